"""Segmentation Engine - 分群调度与结果组装"""

from typing import Callable, Dict, List, Optional, Sequence

from data_segmenter.core.config import settings
from data_segmenter.core.constants import (
    DEFAULT_LABEL_COLUMN,
    FALLBACK_SEGMENT_COLOR,
    FALLBACK_SEGMENT_DESCRIPTION,
    FALLBACK_SEGMENT_NAME,
    SEGMENT_COLORS,
    SEGMENT_DESCRIPTIONS,
    SEGMENT_NAMES,
    SEGMENTATION_METHOD_ALIASES
)
from data_segmenter.engines.kmeans import RandomLike, kmeans_segment
from data_segmenter.engines.quantile import quantile_segment
from data_segmenter.engines.rule_engine import rule_segment
from data_segmenter.models.dataset import Row
from data_segmenter.models.segment import (
    Segment,
    SegmentationConfig,
    SegmentationResult,
    SegmentStats
)
from data_segmenter.utils.coercion import is_finite, to_statistic
from data_segmenter.utils.logger import log
from data_segmenter.utils.security import SecurityValidator

Segmenter = Callable[[Sequence[Row], List[str], SegmentationConfig, RandomLike], List[SegmentStats]]


def usable_numeric_columns(rows: Sequence[Row], columns: Sequence[str], sample_size: Optional[int] = None) -> List[str]:
    """筛选在前 sample_size 行中至少有一个有限数值的列"""
    sample = rows[:sample_size or settings.numeric_sample_size]
    return [
        col for col in columns
        if any(is_finite(to_statistic(row.get(col))) for row in sample)
    ]


def decorate(index: int, stats: SegmentStats) -> Segment:
    """为原始分群附加名称、颜色与描述（按下标循环取值，固定名称优先）"""
    return Segment(
        index=index,
        name=stats.label or SEGMENT_NAMES[index % len(SEGMENT_NAMES)],
        color=SEGMENT_COLORS[index % len(SEGMENT_COLORS)],
        description=SEGMENT_DESCRIPTIONS[index % len(SEGMENT_DESCRIPTIONS)],
        count=stats.count,
        avg_values=stats.avg_values,
        min_values=stats.min_values,
        max_values=stats.max_values,
        row_indices=stats.row_indices
    )


def _run_kmeans(rows, columns, config, rng) -> List[SegmentStats]:
    return kmeans_segment(rows, columns, config.num_segments, rng)


def _run_quantile(rows, columns, config, rng) -> List[SegmentStats]:
    return quantile_segment(rows, columns, config.num_segments)


def _run_custom_rules(rows, columns, config, rng) -> List[SegmentStats]:
    return rule_segment(rows, config.custom_rules)


class SegmentationEngine:
    """分群调度器"""

    SEGMENTERS: Dict[str, Segmenter] = {
        "kmeans": _run_kmeans,
        "quantile": _run_quantile,
        "custom_rules": _run_custom_rules,
    }

    def run(
        self,
        rows: Sequence[Row],
        config: SegmentationConfig,
        rng: RandomLike = None
    ) -> SegmentationResult:
        """
        执行分群

        Args:
            rows: 数据行（可为过滤后的子集）
            config: 分群配置
            rng: K-Means 随机数来源或种子

        Returns:
            SegmentationResult: 分群、每行分配与可用数值列
        """
        executed = SEGMENTATION_METHOD_ALIASES[config.method]
        log.info(
            f"执行分群: method={config.method} ({executed}), k={config.num_segments}, "
            f"rows={len(rows)}, columns={config.selected_columns}"
        )
        self._validate(config)

        if not rows:
            return SegmentationResult(method=config.method, executed_method=executed)

        numeric_columns = usable_numeric_columns(rows, config.selected_columns)
        if not numeric_columns:
            log.info("没有可用的数值列，返回全部数据作为单个分群")
            fallback = Segment(
                index=0,
                name=FALLBACK_SEGMENT_NAME,
                color=FALLBACK_SEGMENT_COLOR,
                description=FALLBACK_SEGMENT_DESCRIPTION,
                count=len(rows),
                row_indices=list(range(len(rows)))
            )
            return SegmentationResult(
                method=config.method,
                executed_method=executed,
                segments=[fallback],
                assignments=[0] * len(rows),
                total_rows=len(rows)
            )

        raw_segments = self.SEGMENTERS[executed](rows, numeric_columns, config, rng)
        segments = [decorate(i, stats) for i, stats in enumerate(raw_segments)]

        assignments: List[Optional[int]] = [None] * len(rows)
        for segment in segments:
            for position in segment.row_indices:
                assignments[position] = segment.index

        result = SegmentationResult(
            method=config.method,
            executed_method=executed,
            segments=segments,
            assignments=assignments,
            numeric_columns=numeric_columns,
            total_rows=len(rows)
        )
        log.info(f"分群完成: {len(segments)} 个分群, {result.assigned_rows}/{len(rows)} 行已分配")
        return result

    def _validate(self, config: SegmentationConfig) -> None:
        """校验分群配置的规模限制"""
        if config.num_segments > settings.max_num_segments:
            raise ValueError(f"分群数量超过限制: {config.num_segments} > {settings.max_num_segments}")
        if SEGMENTATION_METHOD_ALIASES[config.method] == "custom_rules":
            problems = SecurityValidator.validate_rules(config.custom_rules)
            if problems:
                raise ValueError(f"自定义规则不合法: {'; '.join(problems)}")


def attach_segment_labels(
    rows: Sequence[Row],
    result: SegmentationResult,
    column: Optional[str] = None
) -> List[Row]:
    """
    返回附加了分群名称的行副本，不修改输入行

    Args:
        rows: 分群时使用的数据行
        result: 分群结果
        column: 标签列名，默认 "segment"

    Returns:
        行副本列表；未分配的行标签为 None
    """
    if len(rows) != len(result.assignments):
        raise ValueError(f"行数与分群结果不一致: {len(rows)} != {len(result.assignments)}")

    label_column = column or DEFAULT_LABEL_COLUMN
    names = {segment.index: segment.name for segment in result.segments}
    labelled = []
    for row, assignment in zip(rows, result.assignments):
        labelled_row = dict(row)
        labelled_row[label_column] = names.get(assignment) if assignment is not None else None
        labelled.append(labelled_row)
    return labelled


# 全局单例
_segmentation_engine = None


def get_segmentation_engine() -> SegmentationEngine:
    """获取 SegmentationEngine 单例"""
    global _segmentation_engine
    if _segmentation_engine is None:
        _segmentation_engine = SegmentationEngine()
    return _segmentation_engine


def run_segmentation(
    rows: Sequence[Row],
    config: SegmentationConfig,
    rng: RandomLike = None
) -> SegmentationResult:
    """执行分群并返回完整结果"""
    return get_segmentation_engine().run(rows, config, rng)


def segment(
    rows: Sequence[Row],
    config: SegmentationConfig,
    rng: RandomLike = None
) -> List[Segment]:
    """执行分群，仅返回分群列表"""
    return run_segmentation(rows, config, rng).segments
