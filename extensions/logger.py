# extensions/logger.py
"""
应用日志：
- 控制台 + 滚动文件（<APP_NAME>.log / <APP_NAME>.error.log）
- 每个请求分配 request_id（优先沿用 X-Request-ID），并随响应头返回
- 日志记录附带 request_id / user_id / method / path
"""
import os, sys, logging, json, uuid, time
from logging.handlers import RotatingFileHandler
from flask import g, has_request_context, request
from werkzeug.exceptions import HTTPException

_REQUEST_ID_KEY = "request_id"
_HANDLER_MARK = "_kpi_portal_handler"
_CONTEXT_FIELDS = ("request_id", "user_id", "method", "path")


class JsonFormatter(logging.Formatter):
    def __init__(self, app_name):
        super().__init__()
        self.app_name = app_name

    def format(self, record):
        data = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "app": self.app_name,
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for field in _CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value not in (None, "-"):
                data[field] = value
        if record.exc_info:
            data["exc"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False, default=str)


class RequestContextFilter(logging.Filter):
    """请求上下文外的记录（启动、迁移）字段统一为 "-"。"""

    def filter(self, record):
        if has_request_context():
            record.request_id = getattr(g, _REQUEST_ID_KEY, "-")
            record.user_id = getattr(g, "current_user_id", None) or "-"
            record.method = request.method
            record.path = request.path
        else:
            for field in _CONTEXT_FIELDS:
                setattr(record, field, "-")
        return True


def _ensure_request_id():
    rid = getattr(g, _REQUEST_ID_KEY, None)
    if rid is None:
        rid = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        setattr(g, _REQUEST_ID_KEY, rid)
    return rid


def _build_handlers(cfg, level):
    formatter = JsonFormatter(cfg.get("APP_NAME")) if cfg["LOG_JSON"] else logging.Formatter(
        "%(asctime)s | %(levelname)s | %(request_id)s | uid=%(user_id)s | %(name)s | %(message)s",
        "%Y-%m-%d %H:%M:%S",
    )
    log_dir = cfg["LOG_DIR"]
    os.makedirs(log_dir, exist_ok=True)
    base_name = cfg.get("APP_NAME") or "app"

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    handlers = [console]
    for suffix, lvl in ((".log", level), (".error.log", logging.ERROR)):
        h = RotatingFileHandler(
            os.path.join(log_dir, base_name + suffix),
            maxBytes=cfg["LOG_MAX_BYTES"],
            backupCount=cfg["LOG_BACKUP_COUNT"],
            encoding="utf-8",
        )
        h.setLevel(lvl)
        handlers.append(h)

    for h in handlers:
        h.setFormatter(formatter)
        h.addFilter(RequestContextFilter())
        setattr(h, _HANDLER_MARK, True)
    return handlers


def _install_handlers(cfg, level):
    root = logging.getLogger()
    # 多次 create_app（如测试）时只安装一次
    if any(getattr(h, _HANDLER_MARK, False) for h in root.handlers):
        return
    root.setLevel(level)
    for h in _build_handlers(cfg, level):
        root.addHandler(h)

    for noisy, lvl in (("sqlalchemy.engine", logging.WARNING), ("alembic", logging.WARNING),
                       ("werkzeug", logging.INFO)):
        logging.getLogger(noisy).setLevel(lvl)


def init_logger(app):
    cfg = app.config
    level = getattr(logging, cfg["LOG_LEVEL"].upper(), logging.INFO)
    _install_handlers(cfg, level)
    slow_ms = cfg.get("LOG_SLOW_REQUEST_MS", 1000)
    app.logger.info("Logger initialized for %s", cfg.get("APP_NAME"))

    @app.before_request
    def _before():
        g._req_start = time.time()
        _ensure_request_id()
        app.logger.info("REQ %s %s from %s", request.method, request.path, request.remote_addr)

    @app.after_request
    def _after(resp):
        duration = (time.time() - getattr(g, "_req_start", time.time())) * 1000
        log = app.logger.warning if duration >= slow_ms else app.logger.info
        log("RESP %s %s %s %.1fms", request.method, request.path, resp.status_code, duration)
        resp.headers.setdefault("X-Request-ID", getattr(g, _REQUEST_ID_KEY, "-"))
        return resp

    @app.errorhandler(Exception)
    def _err(e):
        from utils.response import json_response
        if isinstance(e, HTTPException):
            return json_response(code=e.code, message=e.description)
        app.logger.exception("UNHANDLED EXCEPTION")
        return json_response(code=500, message="服务器内部错误")
