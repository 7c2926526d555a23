"""数据库扩展：Flask-SQLAlchemy 句柄、Flask-Migrate 以及工作单元。"""
from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from typing import Generator

from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

db = SQLAlchemy()
migrate = Migrate()


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record):
    # SQLite 默认不启用外键，ON DELETE CASCADE 依赖此设置
    if not isinstance(dbapi_connection, sqlite3.Connection):
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@contextmanager
def unit_of_work() -> Generator[Session, None, None]:
    """
    工作单元：块内所有写操作要么一起提交，要么全部回滚。
    异常原样抛出，由调用方映射为业务错误。
    """
    session = db.session
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("unit of work rolled back", exc_info=True)
        raise
