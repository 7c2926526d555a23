# controllers/admin_controller.py
from flask import Blueprint, request

from controllers.auth_helpers import auth_required, json_object_body, require_admin
from services.account_service import AccountService
from utils.response import json_response, page_payload

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@admin_bp.get("/accounts")
@auth_required()
@require_admin()
def list_accounts():
    """
    GET /api/admin/accounts?page=1&page_size=10
    仅返回企业账号，按创建顺序分页。
    """
    page, page_size = AccountService.page_params(
        request.args.get("page", type=int), request.args.get("page_size", type=int)
    )
    items, total = AccountService.list_accounts(page=page, page_size=page_size)
    return json_response(
        data=page_payload([u.to_public_dict() for u in items], total, page, page_size, key="accounts")
    )


@admin_bp.get("/accounts/<int:user_id>")
@auth_required()
@require_admin()
def get_account(user_id: int):
    return json_response(data=AccountService.get_account_with_tasks(user_id))


@admin_bp.post("/accounts")
@auth_required()
@require_admin()
def create_account():
    data = json_object_body()
    user = AccountService.create_account(
        username=data.get("username"),
        password=data.get("password"),
        enterprise_name=data.get("enterprise_name"),
        task_defs=data.get("tasks"),
    )
    return json_response(message="创建成功", data={"id": user.id})


@admin_bp.put("/accounts/<int:user_id>")
@auth_required()
@require_admin()
def update_account(user_id: int):
    data = json_object_body()
    AccountService.update_account(
        user_id,
        username=data.get("username"),
        password=data.get("password") or None,
        enterprise_name=data.get("enterprise_name"),
        task_defs=data.get("tasks"),
    )
    return json_response(message="更新成功", data={"success": True})


@admin_bp.post("/accounts/<int:user_id>/reset-password")
@auth_required()
@require_admin()
def reset_password(user_id: int):
    data = json_object_body()
    AccountService.reset_password(user_id, data.get("password"))
    return json_response(message="密码已重置", data={"success": True})


@admin_bp.delete("/accounts/<int:user_id>")
@auth_required()
@require_admin()
def delete_account(user_id: int):
    AccountService.delete_account(user_id)
    return json_response(message="删除成功", data={"success": True})


@admin_bp.get("/enterprises")
@auth_required()
@require_admin()
def list_enterprises():
    return json_response(data=AccountService.list_enterprise_overview())


@admin_bp.get("/enterprises/<int:user_id>")
@auth_required()
@require_admin()
def get_enterprise(user_id: int):
    return json_response(data=AccountService.get_enterprise_detail(user_id))
