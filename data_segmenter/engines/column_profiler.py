"""Column Profiler - 列类型推断"""

import math
from typing import Any, Hashable, List, Sequence

from data_segmenter.core.constants import (
    CATEGORICAL_RATIO,
    DATE_PATTERN,
    MAX_CATEGORIES,
    NUMERIC_RATIO
)
from data_segmenter.models.dataset import ColumnProfile, Row
from data_segmenter.utils.coercion import is_number, parse_float, stringify
from data_segmenter.utils.logger import log


def _distinct_key(value: Any) -> Hashable:
    # 区分 1 与 "1"，但 1 与 1.0 视为同一值
    if is_number(value):
        return ("number", value)
    try:
        hash(value)
    except TypeError:
        return (type(value).__name__, repr(value))
    return (type(value).__name__, value)


def distinct_values(values: Sequence[Any]) -> List[Any]:
    """按首次出现顺序去重"""
    seen = set()
    result = []
    for value in values:
        key = _distinct_key(value)
        if key not in seen:
            seen.add(key)
            result.append(value)
    return result


class ColumnProfiler:
    """列画像推断器"""

    def profile_column(self, name: str, values: Sequence[Any]) -> ColumnProfile:
        """
        推断单列类型

        按优先级依次判断：日期 -> 数值 -> 分类 -> 文本。

        Args:
            name: 列名
            values: 该列全部取值（可含 None）

        Returns:
            ColumnProfile: 列画像
        """
        present = [v for v in values if v is not None]
        unique = distinct_values(present)

        if any(DATE_PATTERN.search(stringify(v)) for v in present):
            return ColumnProfile(name=name, kind="date", unique_value_count=len(unique))

        parsed = [parse_float(v) for v in present]
        numeric = [v for v in parsed if not math.isnan(v)]
        if present and len(numeric) / len(present) >= NUMERIC_RATIO:
            return ColumnProfile(
                name=name,
                kind="numeric",
                min_value=min(numeric),
                max_value=max(numeric),
                unique_value_count=len(unique)
            )

        # 唯一值不超过 min(20, 10% 行数) 视为分类列
        if present and len(unique) <= min(MAX_CATEGORIES, len(present) * CATEGORICAL_RATIO):
            return ColumnProfile(
                name=name,
                kind="categorical",
                categories=[stringify(v) for v in unique[:MAX_CATEGORIES]],
                unique_value_count=len(unique)
            )

        return ColumnProfile(name=name, kind="text", unique_value_count=len(unique))

    def infer(self, rows: Sequence[Row], column_names: Sequence[str]) -> List[ColumnProfile]:
        """
        推断数据集所有列的画像

        Args:
            rows: 数据行
            column_names: 列名列表（权威顺序）

        Returns:
            按列顺序排列的 ColumnProfile 列表
        """
        profiles = [
            self.profile_column(col, [row.get(col) for row in rows])
            for col in column_names
        ]
        log.info(
            f"列画像完成: {len(rows)} 行, {len(profiles)} 列 "
            f"({', '.join(f'{p.name}={p.kind}' for p in profiles)})"
        )
        return profiles


# 全局单例
_column_profiler = None


def get_column_profiler() -> ColumnProfiler:
    """获取 ColumnProfiler 单例"""
    global _column_profiler
    if _column_profiler is None:
        _column_profiler = ColumnProfiler()
    return _column_profiler


def infer_columns(rows: Sequence[Row], column_names: Sequence[str]) -> List[ColumnProfile]:
    """推断列画像"""
    return get_column_profiler().infer(rows, column_names)
