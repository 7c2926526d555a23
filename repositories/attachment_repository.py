from __future__ import annotations

from typing import Iterable, List, Mapping

from sqlalchemy import select

from extensions.database import db
from models.attachment import Attachment
from models.task import Task


class AttachmentRepository:
    """任务附件的持久化操作。

    仓储层只写入元数据（原始文件名、存储名、大小等），真正的文件
    落盘与删除由 ``StorageService`` 在调用前后完成。"""

    @staticmethod
    def add(task_id: int, payload: Mapping) -> Attachment:
        attachment = Attachment(
            task_id=task_id,
            file_name=payload.get("file_name"),
            stored_file_name=payload.get("stored_file_name"),
            mime_type=payload.get("mime_type"),
            size=payload.get("size"),
        )
        db.session.add(attachment)
        return attachment

    @staticmethod
    def delete_for_owner(attachment_ids: Iterable[int], task_id: int, owner_id: int) -> List[str]:
        """
        删除属于 owner 的某个任务下的指定附件，返回被删除附件的存储名。
        不属于该任务 / 该账号的 id 会被忽略。
        """
        ids = {int(i) for i in attachment_ids if i is not None}
        if not ids:
            return []
        stmt = (
            select(Attachment)
            .join(Task, Task.id == Attachment.task_id)
            .where(
                Attachment.id.in_(ids),
                Attachment.task_id == task_id,
                Task.user_id == owner_id,
            )
        )
        removed = db.session.execute(stmt).scalars().all()
        for attachment in removed:
            db.session.delete(attachment)
        return [a.stored_file_name for a in removed]

    @staticmethod
    def find_by_stored_name(stored_file_name: str) -> Attachment | None:
        return Attachment.query.filter_by(stored_file_name=stored_file_name).first()
