# -*- coding: utf-8 -*-
"""
attachment.py
--------------------------------------------------------------------
考核任务的佐证附件：
- file_name 为原始上传名，仅用于展示与下载时的文件名。
- stored_file_name 为存储层实际文件名（uuid 生成，全局唯一，不受用户控制）。
- 随任务级联删除；磁盘文件由 StorageService 在事务提交后清理。
"""


from extensions.database import db
from .mixins import CreatedAtMixin, COMMON_TABLE_ARGS
from utils.datetime_helpers import datetime_to_beijing_iso


class Attachment(CreatedAtMixin, db.Model):
    __tablename__ = "task_attachments"
    __table_args__ = (
        db.Index("ix_task_attachments_task_id", "task_id"),
        COMMON_TABLE_ARGS,
    )

    id = db.Column(db.Integer, primary_key=True)
    task_id = db.Column(
        db.Integer, db.ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False
    )
    file_name = db.Column(db.String(255), nullable=False)
    stored_file_name = db.Column(db.String(255), nullable=False, unique=True)
    mime_type = db.Column(db.String(128))
    size = db.Column(db.Integer)

    task = db.relationship("Task", back_populates="attachments")

    def to_dict(self):
        return {
            "id": self.id,
            "task_id": self.task_id,
            "name": self.file_name,
            "path": self.stored_file_name,
            "mime_type": self.mime_type,
            "size": self.size,
            "created_at": datetime_to_beijing_iso(self.created_at),
        }
