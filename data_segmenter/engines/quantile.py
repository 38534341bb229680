"""Quantile Engine - 按主列排名分桶"""

import math
from bisect import bisect_left
from typing import List, Optional, Sequence

from data_segmenter.engines.statistics import group_indices, summarize_groups
from data_segmenter.models.dataset import Row
from data_segmenter.models.segment import SegmentStats
from data_segmenter.utils.coercion import is_finite, parse_float
from data_segmenter.utils.logger import log


def quantile_assign(rows: Sequence[Row], column: str, k: int) -> List[Optional[int]]:
    """
    计算每行所属的分位桶

    桶序号 = min(floor(首次出现位置 / ceil(n / k)), k - 1)。
    重复取值按其在排序数组中首次出现的位置定位。
    主列无法解析的行返回 None（不进入任何桶）。

    Args:
        rows: 数据行
        column: 主列
        k: 桶数量

    Returns:
        每行的桶序号
    """
    if k < 1:
        raise ValueError(f"分桶数量必须 >= 1: {k}")

    parsed = [parse_float(row.get(column)) for row in rows]
    ordered = sorted(v for v in parsed if is_finite(v))
    if not ordered:
        return [None] * len(rows)

    segment_size = math.ceil(len(ordered) / k)
    assignments: List[Optional[int]] = []
    for value in parsed:
        if not is_finite(value):
            assignments.append(None)
            continue
        position = bisect_left(ordered, value)
        assignments.append(min(position // segment_size, k - 1))
    return assignments


def quantile_segment(rows: Sequence[Row], columns: Sequence[str], k: int) -> List[SegmentStats]:
    """
    分位数分群

    只用第一列排序分桶，统计量覆盖全部所选列。

    Args:
        rows: 数据行
        columns: 数值列（第一列为主列）
        k: 桶数量

    Returns:
        k 个分群（可能为空）
    """
    if not columns:
        raise ValueError("分位数分群至少需要一个数值列")

    assignments = quantile_assign(rows, columns[0], k)
    groups = group_indices(assignments, k)
    excluded = sum(1 for a in assignments if a is None)
    log.info(
        f"分位数分群: 主列={columns[0]}, k={k}, 各桶行数 {[len(g) for g in groups]}, "
        f"排除 {excluded} 行"
    )
    return summarize_groups(rows, groups, columns)
