# repositories/user_repository.py
from __future__ import annotations
from typing import List, Optional, Tuple

from sqlalchemy import func, select

from models.user import User
from models.task import Task
from extensions.database import db
from constants.roles import Role


class UserRepository:
    """
    账号的仓储（数据访问）层。
    说明：
    - 不做业务规则判断，仅做持久化读写。
    - 所有写操作不自动 commit，由上层的 unit_of_work 统一提交或回滚。
    """

    @staticmethod
    def find_by_username(username: str) -> Optional[User]:
        return User.query.filter_by(username=username).first()

    @staticmethod
    def find_by_id(user_id: int) -> Optional[User]:
        return db.session.get(User, user_id)

    @staticmethod
    def exists_username_except_user(username: str, exclude_user_id: int) -> bool:
        return User.query.filter(
            User.username == username,
            User.id != exclude_user_id
        ).first() is not None

    @staticmethod
    def create(username: str, password_hash: str, role: str, enterprise_name: str | None) -> User:
        user = User(
            username=username,
            password_hash=password_hash,
            role=role,
            enterprise_name=enterprise_name,
        )
        db.session.add(user)
        db.session.flush()
        return user

    @staticmethod
    def update_password(user: User, new_hash: str) -> User:
        user.password_hash = new_hash
        db.session.flush()
        return user

    @staticmethod
    def update_profile(user: User, username: str, enterprise_name: str | None) -> User:
        user.username = username
        user.enterprise_name = enterprise_name
        db.session.flush()
        return user

    @staticmethod
    def delete(user: User):
        # 任务与附件依赖外键 ON DELETE CASCADE 以及 ORM 级联
        db.session.delete(user)
        db.session.flush()

    @staticmethod
    def list_by_role(role: str, page: int, page_size: int) -> Tuple[List[User], int]:
        conditions = [User.role == role]
        total = db.session.execute(
            select(func.count(User.id)).where(*conditions)
        ).scalar()
        stmt = (
            select(User)
            .where(*conditions)
            .order_by(User.id.asc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        items = db.session.execute(stmt).scalars().all()
        return items, total

    @staticmethod
    def enterprise_overview():
        """
        每个企业账号的最近填报时间与已填报任务数：
          (id, username, enterprise_name, last_reported_at, reported_count)
        """
        stmt = (
            select(
                User.id,
                User.username,
                User.enterprise_name,
                func.max(Task.updated_at).label("last_reported_at"),
                func.count(Task.updated_at).label("reported_count"),
            )
            .select_from(User)
            .outerjoin(Task, Task.user_id == User.id)
            .where(User.role == Role.ENTERPRISE.value)
            .group_by(User.id, User.username, User.enterprise_name)
            .order_by(User.id.asc())
        )
        return db.session.execute(stmt).all()

    @staticmethod
    def count_by_role(role: str) -> int:
        return User.query.filter_by(role=role).count()
