"""Filter Engine - 行过滤引擎（FilterCondition 逐行求值）"""

import math
from typing import Any, Dict, List, Optional, Sequence

from data_segmenter.core.constants import (
    DATE_PATTERN,
    KNOWN_FILTER_OPERATORS,
    OPERATORS_BY_KIND
)
from data_segmenter.models.dataset import ColumnProfile, OperatorOption, Row
from data_segmenter.models.filter import FilterCondition
from data_segmenter.utils.coercion import parse_date, stringify, to_number
from data_segmenter.utils.logger import log
from data_segmenter.utils.security import SecurityValidator


class FilterValidationError(ValueError):
    """过滤条件不完整或不合法"""

    def __init__(self, message: str, errors: List[str] | None = None):
        super().__init__(message)
        self.errors = errors or []


def operators_for_kind(kind: str) -> List[OperatorOption]:
    """获取列类型可用的操作符（未知类型按文本处理）"""
    options = OPERATORS_BY_KIND.get(kind, OPERATORS_BY_KIND["text"])
    return [OperatorOption(value=value, label=label) for value, label in options]


def _is_blank(value: Any) -> bool:
    return value is None or stringify(value) == ""


def _condition_errors(condition: FilterCondition) -> List[str]:
    """检查单个条件的必填字段"""
    label = f"条件 {condition.id}"
    if not condition.column:
        return [f"{label}: 未指定列"]

    op = condition.operator
    if op == "between":
        if _is_blank(condition.value) or _is_blank(condition.value2):
            return [f"{label}: between 需要 value 与 value2"]
    elif op == "in_list":
        if not condition.values:
            return [f"{label}: in_list 需要非空 values"]
    elif op == "date_between":
        if condition.date_from is None or condition.date_to is None:
            return [f"{label}: date_between 需要 dateFrom 与 dateTo"]
    elif _is_blank(condition.value):
        return [f"{label}: {op} 需要非空 value"]
    return []


def validate_conditions(
    conditions: Sequence[FilterCondition],
    profiles: Optional[Sequence[ColumnProfile]] = None
) -> None:
    """
    在求值前校验条件集合

    Args:
        conditions: 过滤条件
        profiles: 列画像；提供时校验列存在且已知操作符与列类型匹配

    Raises:
        FilterValidationError: 存在任何不合法条件
    """
    if not SecurityValidator.validate_filter_complexity(len(conditions)):
        raise FilterValidationError("过滤条件过多", [f"最多允许 {SecurityValidator.max_conditions()} 个条件"])

    by_name: Dict[str, ColumnProfile] = {p.name: p for p in profiles or []}
    errors: List[str] = []

    for condition in conditions:
        problems = _condition_errors(condition)
        if not problems and profiles is not None:
            profile = by_name.get(condition.column)
            if profile is None:
                problems.append(f"条件 {condition.id}: 列不存在: {condition.column}")
            elif condition.operator in KNOWN_FILTER_OPERATORS:
                allowed = {op for op, _ in OPERATORS_BY_KIND[profile.kind]}
                if condition.operator not in allowed:
                    problems.append(
                        f"条件 {condition.id}: {profile.kind} 列 {condition.column} "
                        f"不支持操作符 {condition.operator}"
                    )
        errors.extend(problems)

    if errors:
        log.warning(f"过滤条件校验失败: {errors}")
        raise FilterValidationError("过滤条件不完整或不合法", errors)


def _compare(value: Any, target: Any, greater: bool) -> bool:
    """大于/小于比较：优先数值，两侧均为日期时按时间比较"""
    left, right = to_number(value), to_number(target)
    if not (math.isnan(left) or math.isnan(right)):
        return left > right if greater else left < right

    if DATE_PATTERN.search(stringify(value)) and DATE_PATTERN.search(stringify(target)):
        left_date, right_date = parse_date(value), parse_date(target)
        if left_date is not None and right_date is not None:
            return left_date > right_date if greater else left_date < right_date
    return False


def _between(value: Any, low: Any, high: Any) -> bool:
    number = to_number(value)
    lower, upper = to_number(low), to_number(high)
    # NaN 参与的比较恒为 False
    return lower <= number <= upper


def _date_between(value: Any, condition: FilterCondition) -> bool:
    if condition.date_from is None or condition.date_to is None:
        # 缺少任一边界时放行
        return True
    moment = parse_date(value)
    start, end = parse_date(condition.date_from), parse_date(condition.date_to)
    if moment is None or start is None or end is None:
        return False
    return start <= moment <= end


def evaluate_condition(value: Any, condition: FilterCondition) -> bool:
    """
    对单个取值求值一个条件

    Args:
        value: 行中该列的值
        condition: 过滤条件

    Returns:
        是否满足条件；未知操作符恒为 True
    """
    op = condition.operator

    if op == "equals":
        return stringify(value) == condition.text_value
    if op == "not_equals":
        return stringify(value) != condition.text_value
    if op == "contains":
        return condition.text_value.lower() in stringify(value).lower()
    if op == "greater_than":
        return _compare(value, condition.value, greater=True)
    if op == "less_than":
        return _compare(value, condition.value, greater=False)
    if op == "between":
        high = condition.value if _is_blank(condition.value2) else condition.value2
        return _between(value, condition.value, high)
    if op == "in_list":
        return stringify(value) in condition.text_values
    if op == "date_between":
        return _date_between(value, condition)
    return True


def row_matches(row: Row, conditions: Sequence[FilterCondition]) -> bool:
    """行是否满足全部条件（AND）"""
    return all(evaluate_condition(row.get(c.column), c) for c in conditions)


class FilterEngine:
    """过滤引擎"""

    def apply(
        self,
        rows: Sequence[Row],
        conditions: Sequence[FilterCondition],
        profiles: Optional[Sequence[ColumnProfile]] = None
    ) -> List[Row]:
        """
        过滤数据行

        Args:
            rows: 数据行
            conditions: 过滤条件（全部满足才保留）
            profiles: 列画像（可选，用于操作符校验）

        Returns:
            满足全部条件的行（原对象，顺序不变）
        """
        validate_conditions(conditions, profiles)
        if not conditions:
            return list(rows)

        result = [row for row in rows if row_matches(row, conditions)]
        log.info(f"过滤完成: {len(conditions)} 个条件, {len(rows)} -> {len(result)} 行")
        return result


# 全局单例
_filter_engine = None


def get_filter_engine() -> FilterEngine:
    """获取 FilterEngine 单例"""
    global _filter_engine
    if _filter_engine is None:
        _filter_engine = FilterEngine()
    return _filter_engine


def evaluate_filters(
    rows: Sequence[Row],
    conditions: Sequence[FilterCondition],
    profiles: Optional[Sequence[ColumnProfile]] = None
) -> List[Row]:
    """过滤数据行"""
    return get_filter_engine().apply(rows, conditions, profiles)
