# services/account_service.py
import logging
from typing import Any, Dict, List, Optional, Tuple

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from constants.roles import Role
from constants.task import REPORT_STATUS_LABELS_ZH, ReportStatus, TargetType
from extensions.database import unit_of_work
from models.user import User
from repositories.task_repository import TaskRepository
from repositories.user_repository import UserRepository
from services.storage_service import StorageService
from utils.datetime_helpers import datetime_to_beijing_iso
from utils.exceptions import BizError, Conflict, NotFound, StorageError, ValidationError
from utils.password import hash_password
from utils.validators import is_valid_target_value, normalize_value_text, validate_username

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


class AccountService:
    """企业账号与其考核任务集的整体维护（仅管理员调用）。"""

    @staticmethod
    def _normalize_task_defs(task_defs: Any) -> List[Dict[str, str]]:
        """校验任务定义，任一非法即整体拒绝，不进入持久化。"""
        if task_defs is None:
            return []
        if not isinstance(task_defs, list):
            raise ValidationError("tasks 必须为数组")

        normalized = []
        for idx, item in enumerate(task_defs, start=1):
            if not isinstance(item, dict):
                raise ValidationError(f"第 {idx} 个任务格式不正确")
            name = item.get("name")
            name = name.strip() if isinstance(name, str) else ""
            if not name:
                raise ValidationError(f"第 {idx} 个任务名称不能为空")
            target_type = item.get("target_type")
            if target_type not in TargetType.values():
                raise ValidationError(f"第 {idx} 个任务目标类型非法: {target_type}")
            target_value = item.get("target_value")
            if not is_valid_target_value(target_type, target_value):
                if target_type == TargetType.NUMBER.value:
                    raise ValidationError(f"第 {idx} 个任务目标值必须为非负数")
                raise ValidationError(f"第 {idx} 个任务目标值必须为“是”或“否”")
            normalized.append({
                "name": name,
                "target_type": target_type,
                "target_value": normalize_value_text(target_value),
            })
        return normalized

    @staticmethod
    def _normalize_profile(username: Optional[str], enterprise_name: Optional[str]) -> Tuple[str, Optional[str]]:
        username = username.strip() if isinstance(username, str) else ""
        if not validate_username(username):
            raise ValidationError("账号名不能为空且不能包含空白字符")
        if enterprise_name is not None and not isinstance(enterprise_name, str):
            raise ValidationError("企业名称格式不正确")
        enterprise_name = (enterprise_name or "").strip() or None
        return username, enterprise_name

    @staticmethod
    def create_account(username: str, password: str, enterprise_name: Optional[str], task_defs: Any) -> User:
        username, enterprise_name = AccountService._normalize_profile(username, enterprise_name)
        if not password or not isinstance(password, str):
            raise ValidationError("密码不能为空")
        tasks = AccountService._normalize_task_defs(task_defs)

        if UserRepository.find_by_username(username):
            raise Conflict("账号名已存在")

        try:
            with unit_of_work():
                user = UserRepository.create(
                    username=username,
                    password_hash=hash_password(password),
                    role=Role.ENTERPRISE.value,
                    enterprise_name=enterprise_name,
                )
                TaskRepository.add_many(user.id, tasks)
        except IntegrityError:
            # 并发创建同名账号时由唯一约束兜底
            raise Conflict("账号名已存在")
        except SQLAlchemyError:
            raise StorageError("创建账号失败")

        logger.info("account created id=%s username=%s tasks=%d", user.id, username, len(tasks))
        return user

    @staticmethod
    def update_account(user_id: int, username: str, password: Optional[str],
                       enterprise_name: Optional[str], task_defs: Any) -> User:
        """更新账号资料并整体替换任务集，同一事务内完成。"""
        username, enterprise_name = AccountService._normalize_profile(username, enterprise_name)
        if password is not None and not isinstance(password, str):
            raise ValidationError("密码格式不正确")
        tasks = AccountService._normalize_task_defs(task_defs)

        try:
            with unit_of_work():
                user = UserRepository.find_by_id(user_id)
                if not user:
                    raise NotFound("未找到该账号信息")
                if UserRepository.exists_username_except_user(username, user.id):
                    raise Conflict("账号名已存在")
                UserRepository.update_profile(user, username, enterprise_name)
                if password:
                    UserRepository.update_password(user, hash_password(password))
                stale_files = TaskRepository.stored_file_names_by_owner(user.id)
                TaskRepository.replace_set(user.id, tasks)
        except BizError:
            raise
        except IntegrityError:
            raise Conflict("账号名已存在")
        except SQLAlchemyError:
            raise StorageError("更新账号失败")

        StorageService.remove_files(stale_files)
        logger.info("account updated id=%s tasks=%d", user_id, len(tasks))
        return user

    @staticmethod
    def reset_password(user_id: int, new_password: str) -> User:
        if not new_password or not isinstance(new_password, str):
            raise ValidationError("新密码不能为空")
        try:
            with unit_of_work():
                user = UserRepository.find_by_id(user_id)
                if not user:
                    raise NotFound("未找到该账号信息")
                UserRepository.update_password(user, hash_password(new_password))
        except BizError:
            raise
        except SQLAlchemyError:
            raise StorageError("重置密码失败")
        logger.info("password reset for account id=%s", user_id)
        return user

    @staticmethod
    def delete_account(user_id: int) -> bool:
        """
        删除账号，任务与附件由外键级联删除。
        幂等：账号不存在时直接返回 False，不视为错误。
        """
        try:
            with unit_of_work():
                user = UserRepository.find_by_id(user_id)
                if not user:
                    return False
                stale_files = TaskRepository.stored_file_names_by_owner(user.id)
                UserRepository.delete(user)
        except SQLAlchemyError:
            raise StorageError("删除账号失败")

        StorageService.remove_files(stale_files)
        logger.info("account deleted id=%s attachments=%d", user_id, len(stale_files))
        return True

    @staticmethod
    def page_params(page: Optional[int], page_size: Optional[int]) -> Tuple[int, int]:
        """缺省与越界的分页参数统一在这里收敛。"""
        page = max(int(page or 1), 1)
        page_size = int(page_size or current_app.config.get("ACCOUNT_PAGE_SIZE", 10))
        return page, min(max(page_size, 1), MAX_PAGE_SIZE)

    @staticmethod
    def list_accounts(page: Optional[int] = 1, page_size: Optional[int] = None) -> Tuple[List[User], int]:
        page, page_size = AccountService.page_params(page, page_size)
        return UserRepository.list_by_role(Role.ENTERPRISE.value, page, page_size)

    @staticmethod
    def get_account_with_tasks(user_id: int) -> Dict[str, Any]:
        user = UserRepository.find_by_id(user_id)
        if not user:
            raise NotFound("未找到该账号信息")
        data = user.to_public_dict()
        data["tasks"] = [t.to_definition_dict() for t in TaskRepository.list_by_owner(user.id)]
        return data

    @staticmethod
    def list_enterprise_overview() -> List[Dict[str, Any]]:
        result = []
        for row in UserRepository.enterprise_overview():
            status = ReportStatus.REPORTED if row.reported_count > 0 else ReportStatus.NOT_REPORTED
            result.append({
                "id": row.id,
                "username": row.username,
                "enterprise_name": row.enterprise_name,
                "last_reported_at": datetime_to_beijing_iso(row.last_reported_at),
                "status": status.value,
                "status_label": REPORT_STATUS_LABELS_ZH[status.value],
            })
        return result

    @staticmethod
    def get_enterprise_detail(user_id: int) -> Dict[str, Any]:
        user = UserRepository.find_by_id(user_id)
        if not user or user.role != Role.ENTERPRISE.value:
            raise NotFound("未找到该企业信息")
        data = user.to_public_dict()
        data["tasks"] = [t.to_dict() for t in TaskRepository.list_by_owner(user.id)]
        return data
