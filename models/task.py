# -*- coding: utf-8 -*-
"""
task.py
--------------------------------------------------------------------
考核任务实体：
- 隶属于唯一的企业账号（user_id），随账号级联删除。
- target_type: number / boolean；target_value / actual_value 统一以文本存储。
- updated_at 仅在企业用户填报时写入，为空表示从未填报。
"""

from extensions.database import db
from .mixins import CreatedAtMixin, COMMON_TABLE_ARGS
from utils.datetime_helpers import datetime_to_beijing_iso
from utils.progress import progress


class Task(CreatedAtMixin, db.Model):
    __tablename__ = "tasks"
    __table_args__ = (
        db.Index("ix_tasks_user_id", "user_id"),
        COMMON_TABLE_ARGS,
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    name = db.Column(db.String(255), nullable=False)
    target_type = db.Column(db.String(16), nullable=False)
    target_value = db.Column(db.String(64), nullable=False)
    actual_value = db.Column(db.String(64))
    remarks = db.Column(db.Text)
    updated_at = db.Column(db.DateTime)

    owner = db.relationship("User", back_populates="tasks")
    attachments = db.relationship(
        "Attachment",
        back_populates="task",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Attachment.id",
    )

    @property
    def progress(self) -> int:
        return progress(self.target_type, self.target_value, self.actual_value)

    def to_definition_dict(self):
        """管理员编辑账号时使用的任务定义。"""
        return {
            "id": self.id,
            "name": self.name,
            "target_type": self.target_type,
            "target_value": self.target_value,
        }

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "target_type": self.target_type,
            "target_value": self.target_value,
            "actual_value": self.actual_value,
            "remarks": self.remarks,
            "updated_at": datetime_to_beijing_iso(self.updated_at),
            "progress": self.progress,
            "attachments": [a.to_dict() for a in self.attachments],
        }
