# -*- coding: utf-8 -*-
"""Datetime helpers.

数据库中的 ``datetime`` 一律按 UTC 存储（无时区信息），接口层统一
输出东八区(北京时间)的 ISO 字符串，与填报页面展示的时间一致。
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

BEIJING_TZ = timezone(timedelta(hours=8))


def utcnow() -> datetime:
    """当前 UTC 时间（naive），用于写入数据库。"""

    return datetime.now(timezone.utc).replace(tzinfo=None)


def _ensure_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_beijing_time(dt: datetime) -> datetime:
    return _ensure_utc(dt).astimezone(BEIJING_TZ)


def datetime_to_beijing_iso(dt: Optional[datetime]) -> Optional[str]:
    """将 ``datetime`` 格式化为带 ``+08:00`` 偏移的 ISO 8601 字符串; ``None`` 原样返回。"""

    if dt is None:
        return None
    return to_beijing_time(dt).isoformat()
