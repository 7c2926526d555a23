# controllers/auth_helpers.py
from __future__ import annotations

from functools import wraps

from flask import g, request

from extensions.jwt import TokenError, decode_token
from utils.exceptions import Unauthenticated, ValidationError
from utils.permissions import Identity, assert_admin, get_current_identity


def _extract_bearer(auth_header: str | None) -> str | None:
    if not auth_header:
        return None
    if auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()
        return token or None
    return None


def json_object_body() -> dict:
    """读取 JSON 请求体；缺省为空对象，非对象（如数组）直接拒绝。"""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("请求体必须为 JSON 对象")
    return data


def _resolve_identity_from_token(token: str) -> Identity:
    """
    校验签名与有效期并还原身份。
    token 自包含，不回查数据库；失败时抛出 Unauthenticated。
    """
    try:
        payload = decode_token(token)
    except TokenError as e:
        raise Unauthenticated(str(e) or "Token 无效或已过期")
    return Identity.from_payload(payload)


def auth_required():
    """
    鉴权装饰器：
      - 验证 Authorization: Bearer <token>
      - 解析 token -> Identity，注入 g.current_identity / g.current_user_id
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            g.current_identity = None
            token = _extract_bearer(request.headers.get("Authorization"))
            if not token:
                raise Unauthenticated("缺少或无效 Authorization")
            identity = _resolve_identity_from_token(token)
            g.current_identity = identity
            g.current_user_id = identity.user_id
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def require_admin():
    """
    管理员校验，依赖 @auth_required 预先注入的身份。
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            assert_admin(get_current_identity())
            return fn(*args, **kwargs)

        return wrapper

    return decorator
