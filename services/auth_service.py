# services/auth_service.py
import logging

from sqlalchemy.exc import SQLAlchemyError

from constants.roles import Role
from extensions.database import unit_of_work
from extensions.jwt import create_token
from repositories.user_repository import UserRepository
from utils.exceptions import StorageError, Unauthenticated, ValidationError
from utils.password import hash_password, verify_password

logger = logging.getLogger(__name__)


class AuthService:

    @staticmethod
    def authenticate(username: str, password: str):
        user = UserRepository.find_by_username(username)
        if not user:
            return None
        if not verify_password(user.password_hash, password):
            return None
        return user

    @staticmethod
    def login(username: str, password: str) -> dict:
        """
        Unauthenticated -> Authenticated：账号存在且密码校验通过才签发 token。
        """
        username = (username or "").strip()
        if not username or not password:
            raise ValidationError("用户名密码必填")
        user = AuthService.authenticate(username, password)
        if not user:
            logger.info("login failed for username=%s", username)
            raise Unauthenticated("账号或密码错误")
        token = create_token(user.id, user.username, user.role, user.enterprise_name)
        return {"token": token, "user": user.to_public_dict()}

    @staticmethod
    def ensure_default_admin(app):
        uname = app.config["ADMIN_INIT_USERNAME"]
        if UserRepository.find_by_username(uname):
            return None
        try:
            with unit_of_work():
                user = UserRepository.create(
                    username=uname,
                    password_hash=hash_password(app.config["ADMIN_INIT_PASSWORD"]),
                    role=Role.ADMIN.value,
                    enterprise_name=app.config["ADMIN_INIT_DISPLAY_NAME"],
                )
        except SQLAlchemyError as exc:
            raise StorageError("默认管理员创建失败") from exc
        app.logger.info("默认管理员已创建: %s", uname)
        return user
