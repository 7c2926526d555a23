from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """
    系统角色（封闭集合）：
    - ADMIN: 平台管理员，负责账号与考核任务的维护
    - ENTERPRISE: 企业账号，仅能填报自己的考核任务
    """

    ADMIN = "admin"
    ENTERPRISE = "enterprise"

    @classmethod
    def values(cls) -> list[str]:
        return [role.value for role in cls]

    @classmethod
    def has_value(cls, value: str) -> bool:
        return value in cls.values()

    @classmethod
    def is_admin(cls, value: Role | str | None) -> bool:
        """唯一的管理员判定入口，所有权限校验都经由这里。"""
        if value is None:
            return False
        if isinstance(value, Role):
            return value is cls.ADMIN
        return value.strip().lower() == cls.ADMIN.value


ROLE_LABELS_ZH: dict[str, str] = {
    Role.ADMIN.value: "系统管理员",
    Role.ENTERPRISE.value: "企业用户",
}
