"""单元格取值的类型转换工具"""

import math
import re
from datetime import date, datetime, timezone
from typing import Any, Optional

# 前缀数值（宽松解析）
_LEADING_FLOAT = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
# 完整数值字面量（严格解析）
_FULL_NUMBER = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")

_DATE_FORMATS = ("%m/%d/%Y", "%m-%d-%Y", "%Y/%m/%d")

NAN = float("nan")


def is_number(value: Any) -> bool:
    """是否为数值类型（布尔值除外）"""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_float(value: Any) -> float:
    """
    宽松解析浮点数

    字符串取最长的数值前缀（"12abc" -> 12.0），无法解析返回 NaN。
    """
    if is_number(value):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if text.startswith(("Infinity", "+Infinity")):
            return math.inf
        if text.startswith("-Infinity"):
            return -math.inf
        match = _LEADING_FLOAT.match(text)
        if match:
            return float(match.group(0))
    return NAN


def to_number(value: Any) -> float:
    """
    严格数值转换

    整个字符串必须是数值字面量；布尔值为 1/0；None 与空串为 NaN。
    """
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if is_number(value):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if _FULL_NUMBER.match(text):
            return float(text)
    return NAN


def to_statistic(value: Any) -> float:
    """统计用数值：日期转为毫秒时间戳，其余按宽松解析"""
    if isinstance(value, (date, datetime)):
        moment = parse_date(value)
        return moment.replace(tzinfo=timezone.utc).timestamp() * 1000 if moment else NAN
    return parse_float(value)


def is_finite(value: float) -> bool:
    return not (math.isnan(value) or math.isinf(value))


def stringify(value: Any) -> str:
    """把单元格值转为字符串，用于相等、包含与列表比较"""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_date(value: Any) -> Optional[datetime]:
    """
    解析日期值

    支持 date/datetime 对象、ISO 字符串、MM/DD/YYYY 与 MM-DD-YYYY；
    带时区的时间统一转换为 UTC 的 naive datetime。无法解析时返回 None。
    """
    moment: Optional[datetime] = None
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            moment = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            for fmt in _DATE_FORMATS:
                try:
                    moment = datetime.strptime(text, fmt)
                    break
                except ValueError:
                    continue
    if moment is None:
        return None
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment
