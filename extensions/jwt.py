# extensions/jwt.py
import time, json, base64, hmac, hashlib, uuid
from flask import current_app


def _b64(data: bytes):
    return base64.urlsafe_b64encode(data).rstrip(b"=")


def _b64json(obj):
    return _b64(json.dumps(obj, separators=(",", ":"), ensure_ascii=False).encode())


class TokenError(ValueError):
    pass


def _clock() -> float:
    return time.time()


def create_token(user_id: int, username: str, role: str, enterprise_name: str | None,
                 expires_seconds: int | None = None):
    """签发自包含的 HS256 token，服务端不保存会话。"""
    secret = current_app.config["JWT_SECRET_KEY"].encode()
    if expires_seconds is None:
        expires_seconds = current_app.config.get("JWT_EXPIRES_SECONDS", 24 * 3600)
    now = _clock()
    header = {"alg": "HS256", "typ": "JWT"}
    payload = {
        "sub": user_id,
        "username": username,
        "role": role,
        "enterprise_name": enterprise_name,
        # exp 保留签发时刻的小数部分
        "exp": now + expires_seconds,
        "iat": int(now),
        "jti": uuid.uuid4().hex
    }
    h_b = _b64json(header)
    p_b = _b64json(payload)
    signing = h_b + b"." + p_b
    sig = _b64(hmac.new(secret, signing, hashlib.sha256).digest())
    return (signing + b"." + sig).decode()


def _decode_segment(seg: str):
    pad = "=" * (-len(seg) % 4)
    return json.loads(base64.urlsafe_b64decode(seg + pad).decode())


def decode_token(token: str):
    secret = current_app.config["JWT_SECRET_KEY"].encode()
    try:
        h_b, p_b, sig_b = token.split(".")
        signing = f"{h_b}.{p_b}".encode()
        expected = _b64(hmac.new(secret, signing, hashlib.sha256).digest()).decode()
        if not hmac.compare_digest(expected, sig_b):
            raise TokenError("签名不匹配")

        header = _decode_segment(h_b)
        if header.get("alg") != "HS256":
            raise TokenError("token不合法")

        payload = _decode_segment(p_b)
        exp = payload.get("exp")
        # exp 时刻仍有效，严格晚于 exp 才过期
        if not isinstance(exp, (int, float)):
            raise TokenError("token不合法")
        if _clock() > exp:
            raise TokenError("token已过期")
        return payload
    except TokenError:
        raise
    except Exception:
        raise TokenError("token不合法")
