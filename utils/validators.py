import math
import re

from constants.task import BOOLEAN_VALUES, TargetType

USERNAME_RE = re.compile(r"^\S{1,50}$")


def validate_username(username: str) -> bool:
    return bool(username) and bool(USERNAME_RE.match(username))


def parse_non_negative_number(value):
    """
    解析非负实数：
      1. 去首尾空白
      2. 能被 float 解析、有限且 >= 0 => 返回 float
      3. 其它情况返回 None
    """
    if value is None or isinstance(value, bool):
        return None
    raw = str(value).strip()
    if not raw:
        return None
    try:
        number = float(raw)
    except ValueError:
        return None
    if math.isnan(number) or math.isinf(number) or number < 0:
        return None
    return number


def normalize_value_text(value) -> str:
    """数值统一以文本存储；前端传数字时转成字符串。"""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def is_valid_target_value(target_type: str, value) -> bool:
    if target_type == TargetType.NUMBER.value:
        return parse_non_negative_number(value) is not None
    if target_type == TargetType.BOOLEAN.value:
        return normalize_value_text(value) in BOOLEAN_VALUES
    return False


def is_valid_actual_value(target_type: str, value) -> bool:
    """实际值允许为空（尚未填报），非空时与目标值规则一致。"""
    if normalize_value_text(value) == "":
        return True
    return is_valid_target_value(target_type, value)
