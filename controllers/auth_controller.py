# controllers/auth_controller.py
from flask import Blueprint

from controllers.auth_helpers import auth_required, json_object_body
from services.auth_service import AuthService
from utils.permissions import get_current_identity
from utils.response import json_response


auth_bp = Blueprint("auth", __name__)


@auth_bp.post("/login")
def login():
    data = json_object_body()
    username = data.get("username")
    password = data.get("password")
    result = AuthService.login(
        username if isinstance(username, str) else "",
        password if isinstance(password, str) else "",
    )
    return json_response(data=result)


@auth_bp.post("/logout")
def logout():
    # token 自包含且不可吊销，客户端丢弃即可
    return json_response(message="已退出登录")


@auth_bp.get("/me")
@auth_required()
def me():
    return json_response(data=get_current_identity().to_dict())
