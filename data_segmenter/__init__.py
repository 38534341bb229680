"""
Data Segmenter Package
"""
__version__ = "0.1.0"

from .engines.column_profiler import ColumnProfiler, infer_columns
from .engines.filter_engine import (
    FilterEngine,
    FilterValidationError,
    evaluate_condition,
    evaluate_filters,
    operators_for_kind,
    validate_conditions,
)
from .engines.kmeans import KMeansEngine, kmeans_cluster
from .engines.quantile import quantile_assign, quantile_segment
from .engines.rule_engine import (
    CompiledRule,
    RuleSyntaxError,
    assign_rules,
    compile_rule,
    rule_segment,
)
from .engines.segmentation import (
    SegmentationEngine,
    attach_segment_labels,
    run_segmentation,
    segment,
)
from .models import (
    ColumnProfile,
    Dataset,
    FilterCondition,
    OperatorOption,
    Segment,
    SegmentationConfig,
    SegmentationReport,
    SegmentationResult,
)


__all__ = [
    # Column profiling
    "ColumnProfiler",
    "infer_columns",

    # Filtering
    "FilterEngine",
    "FilterValidationError",
    "evaluate_condition",
    "evaluate_filters",
    "operators_for_kind",
    "validate_conditions",

    # Segmenters
    "KMeansEngine",
    "kmeans_cluster",
    "quantile_assign",
    "quantile_segment",
    "CompiledRule",
    "RuleSyntaxError",
    "assign_rules",
    "compile_rule",
    "rule_segment",

    # Orchestration
    "SegmentationEngine",
    "attach_segment_labels",
    "run_segmentation",
    "segment",

    # Models
    "ColumnProfile",
    "Dataset",
    "FilterCondition",
    "OperatorOption",
    "Segment",
    "SegmentationConfig",
    "SegmentationReport",
    "SegmentationResult",
]
