# utils/password.py
from werkzeug.security import generate_password_hash, check_password_hash

# 固定工作因子的加盐哈希
HASH_METHOD = "pbkdf2:sha256:260000"
SALT_LENGTH = 16


def hash_password(plain: str) -> str:
    return generate_password_hash(plain, method=HASH_METHOD, salt_length=SALT_LENGTH)


def verify_password(hashed: str, plain: str) -> bool:
    # check_password_hash 内部使用 hmac.compare_digest 做常量时间比较
    if not hashed or plain is None:
        return False
    return check_password_hash(hashed, plain)
