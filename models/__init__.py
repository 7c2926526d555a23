# -*- coding: utf-8 -*-
"""
__init__.py
--------------------------------------------------------------------
汇总导入所有模型，使得：
- Flask-Migrate/Alembic 能看到完整的 metadata。
- 外部模块可简化引用：from models import User, Task
"""

from .mixins import TimestampMixin, CreatedAtMixin
from .user import User
from .task import Task
from .attachment import Attachment

__all__ = ["TimestampMixin", "CreatedAtMixin", "User", "Task", "Attachment"]
