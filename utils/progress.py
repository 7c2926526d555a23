# -*- coding: utf-8 -*-
"""考核任务完成进度计算。

进度是 0~100 的整数，只由 (目标类型, 目标值, 实际值) 决定，
管理端详情与企业端自查使用同一份计算逻辑。
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from constants.task import TargetType


def _to_number(value) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _round_half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def progress(target_type: str, target_value, actual_value) -> int:
    """计算任务完成百分比。

    - 尚未填报（实际值为空）=> 0
    - number: 目标为 0 或任一值无法解析 => 0；否则 round(min(actual/target, 1) * 100)
    - boolean: 实际值与目标值完全一致 => 100，否则 0
    """

    if actual_value is None or str(actual_value) == "":
        return 0

    if target_type == TargetType.NUMBER.value:
        target = _to_number(target_value)
        actual = _to_number(actual_value)
        if target is None or actual is None or target == 0:
            return 0
        ratio = min(actual / target, 1)
        if ratio <= 0:
            return 0
        return _round_half_up(ratio * 100)

    if target_type == TargetType.BOOLEAN.value:
        return 100 if str(actual_value) == str(target_value) else 0

    return 0
