"""分群统计"""

import math
from typing import List, Optional, Sequence

from data_segmenter.models.dataset import Row
from data_segmenter.models.segment import SegmentStats
from data_segmenter.utils.coercion import is_finite, to_statistic


def group_indices(assignments: Sequence[Optional[int]], k: int) -> List[List[int]]:
    """把每行的分群序号转为每个分群的行位置列表；None 表示该行未分配"""
    groups: List[List[int]] = [[] for _ in range(k)]
    for position, bucket in enumerate(assignments):
        if bucket is not None:
            groups[bucket].append(position)
    return groups


def summarize(rows: Sequence[Row], indices: Sequence[int], columns: Sequence[str]) -> SegmentStats:
    """
    计算单个分群的统计量

    只有在该分群内至少有一个有限数值的列才会出现在统计结果中。

    Args:
        rows: 全部数据行
        indices: 分群包含的行位置
        columns: 需要统计的列

    Returns:
        SegmentStats: 行位置与 avg/min/max
    """
    stats = SegmentStats(row_indices=list(indices))
    if not indices:
        return stats

    for col in columns:
        values = [to_statistic(rows[i].get(col)) for i in indices]
        values = [v for v in values if is_finite(v)]
        if not values:
            continue
        stats.avg_values[col] = math.fsum(values) / len(values)
        stats.min_values[col] = min(values)
        stats.max_values[col] = max(values)
    return stats


def summarize_groups(
    rows: Sequence[Row],
    groups: Sequence[Sequence[int]],
    columns: Sequence[str]
) -> List[SegmentStats]:
    """批量计算各分群统计量"""
    return [summarize(rows, indices, columns) for indices in groups]
