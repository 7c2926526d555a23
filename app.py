# app.py
import os

from flask import Flask
from flask_migrate import upgrade
from sqlalchemy import inspect

from config.settings import BASE_DIR, get_config
from extensions.database import db, migrate
from extensions.logger import init_logger
from controllers.auth_controller import auth_bp
from controllers.admin_controller import admin_bp
from controllers.client_controller import client_bp
from controllers.attachment_controller import attachment_bp
from services.auth_service import AuthService
from utils.response import json_response
from utils.exceptions import BizError

MIGRATIONS_DIR = os.path.join(BASE_DIR, "migrations")


def _bootstrap_database(app):
    with app.app_context():
        if app.config.get("AUTO_MIGRATE"):
            upgrade(directory=MIGRATIONS_DIR)
        # 表结构未就绪时（如关闭自动迁移且尚未 flask db upgrade）跳过默认管理员
        if not inspect(db.engine).has_table("users"):
            app.logger.warning("users 表不存在，跳过默认管理员初始化")
            return
        AuthService.ensure_default_admin(app)


def create_app(config_name="development", overrides=None):
    app = Flask(__name__)
    app.config.from_object(get_config(config_name))
    if overrides:
        app.config.update(overrides)

    # 初始化扩展
    db.init_app(app)
    migrate.init_app(app, db, directory=MIGRATIONS_DIR)
    init_logger(app)

    import models  # noqa: F401  注册模型元数据

    _bootstrap_database(app)

    # 登录 / 当前身份
    app.register_blueprint(auth_bp, url_prefix="/api")
    # 管理员：账号管理与企业总览
    app.register_blueprint(admin_bp)
    # 企业：任务查看与填报
    app.register_blueprint(client_bp)
    # 附件下载
    app.register_blueprint(attachment_bp)

    # 错误处理
    @app.errorhandler(404)
    def not_found(e):
        return json_response(message="接口不存在", code=404)

    @app.errorhandler(413)
    def too_large(e):
        return json_response(message="上传文件过大", code=413)

    @app.errorhandler(500)
    def server_error(e):
        return json_response(message="服务器内部错误", code=500)

    @app.errorhandler(BizError)
    def _biz_err(e: BizError):
        return json_response(code=e.code, message=e.message, data=e.data)

    return app


if __name__ == "__main__":
    app = create_app(os.getenv("FLASK_CONFIG", "development"))
    app.run(host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", 3000)))
