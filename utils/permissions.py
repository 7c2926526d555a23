from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from flask import g

from constants.roles import Role
from utils.exceptions import Forbidden, Unauthenticated


@dataclass(frozen=True)
class Identity:
    """token 中携带的身份信息（Authenticated 状态）。"""

    user_id: int
    username: str
    role: str
    enterprise_name: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: dict) -> "Identity":
        user_id = payload.get("sub")
        role = payload.get("role")
        if user_id is None or not role or not Role.has_value(role):
            raise Unauthenticated("Token 载荷无效")
        return cls(
            user_id=int(user_id),
            username=payload.get("username") or "",
            role=role,
            enterprise_name=payload.get("enterprise_name"),
        )

    def is_admin(self) -> bool:
        return Role.is_admin(self.role)

    def to_dict(self):
        return {
            "id": self.user_id,
            "username": self.username,
            "role": self.role,
            "enterprise_name": self.enterprise_name,
        }


def get_current_identity() -> Identity:
    """
    获取当前登录身份（由 auth_required 写入 g.current_identity）
    """
    identity = getattr(g, "current_identity", None)
    if not identity:
        raise Unauthenticated("未登录")
    return identity


def assert_admin(identity: Identity | None = None):
    identity = identity or get_current_identity()
    if not identity.is_admin():
        raise Forbidden("需要管理员权限")
