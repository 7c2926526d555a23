# repositories/task_repository.py
from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Mapping

from sqlalchemy import select, update
from sqlalchemy.orm import selectinload

from extensions.database import db
from models.attachment import Attachment
from models.task import Task


class TaskRepository:
    """
    考核任务的持久化操作。
    所有写操作都以 owner (user_id) 为范围，防止跨租户修改；不自动提交。
    """

    @staticmethod
    def list_by_owner(user_id: int) -> List[Task]:
        stmt = (
            select(Task)
            .options(selectinload(Task.attachments))
            .where(Task.user_id == user_id)
            .order_by(Task.id.asc())
        )
        return db.session.execute(stmt).scalars().all()

    @staticmethod
    def stored_file_names_by_owner(user_id: int) -> List[str]:
        stmt = (
            select(Attachment.stored_file_name)
            .join(Task, Task.id == Attachment.task_id)
            .where(Task.user_id == user_id)
        )
        return list(db.session.execute(stmt).scalars().all())

    @staticmethod
    def replace_set(user_id: int, task_defs: Iterable[Mapping]) -> List[Task]:
        """先删除该账号下的全部任务（附件随之级联），再按定义重新插入。"""
        for task in TaskRepository.list_by_owner(user_id):
            db.session.delete(task)
        # 旧任务先出库，新任务可能复用 SQLite 回收的 rowid
        db.session.flush()
        return TaskRepository.add_many(user_id, task_defs)

    @staticmethod
    def add_many(user_id: int, task_defs: Iterable[Mapping]) -> List[Task]:
        tasks = [
            Task(
                user_id=user_id,
                name=item["name"],
                target_type=item["target_type"],
                target_value=item["target_value"],
            )
            for item in task_defs
        ]
        db.session.add_all(tasks)
        db.session.flush()
        return tasks

    @staticmethod
    def update_report(task_id: int, owner_id: int, actual_value: str, remarks: str,
                      reported_at: datetime) -> int:
        """
        写入填报数据，返回受影响行数。
        task 不属于 owner 时返回 0，不做任何修改。
        """
        result = db.session.execute(
            update(Task)
            .where(Task.id == task_id, Task.user_id == owner_id)
            .values(actual_value=actual_value, remarks=remarks, updated_at=reported_at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0
