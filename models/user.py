# -*- coding: utf-8 -*-
"""
user.py
--------------------------------------------------------------------
账号实体。
说明：
- role 为系统角色：admin / enterprise。
- enterprise_name 为展示名称（企业名称；管理员为“系统管理员”）。
- 企业账号独占其考核任务，删除账号时任务与附件级联删除。
"""

from extensions.database import db
from .mixins import TimestampMixin, COMMON_TABLE_ARGS
from constants.roles import Role


class User(TimestampMixin, db.Model):
    __tablename__ = "users"
    __table_args__ = (COMMON_TABLE_ARGS,)

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(50), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(32), nullable=False, server_default=Role.ENTERPRISE.value)
    enterprise_name = db.Column(db.String(128))

    tasks = db.relationship(
        "Task",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Task.id",
    )

    def __repr__(self):
        return f"<User id={self.id} username={self.username} role={self.role}>"

    @property
    def role_label(self) -> str:
        from constants.roles import ROLE_LABELS_ZH
        return ROLE_LABELS_ZH.get(self.role, self.role)

    @property
    def is_admin(self) -> bool:
        return Role.is_admin(self.role)

    def to_public_dict(self):
        return {
            "id": self.id,
            "username": self.username,
            "role": self.role,
            "role_label": self.role_label,
            "enterprise_name": self.enterprise_name,
        }
