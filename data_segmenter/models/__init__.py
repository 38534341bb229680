"""数据模型包"""

from data_segmenter.models.dataset import (
    ColumnKind,
    ColumnProfile,
    Dataset,
    OperatorOption,
    Row
)
from data_segmenter.models.filter import FilterCondition
from data_segmenter.models.segment import (
    SegmentationMethod,
    SegmentationConfig,
    SegmentStats,
    Segment,
    SegmentationResult,
    SegmentationReport
)
from data_segmenter.models.response import (
    DatasetPayload,
    FilterRequest,
    SegmentRequest,
    AuditInfo,
    ProfileResponse,
    FilterResponse,
    SegmentResponse,
    LabelResponse
)

__all__ = [
    # Dataset
    "ColumnKind",
    "ColumnProfile",
    "Dataset",
    "OperatorOption",
    "Row",
    # Filter
    "FilterCondition",
    # Segment
    "SegmentationMethod",
    "SegmentationConfig",
    "SegmentStats",
    "Segment",
    "SegmentationResult",
    "SegmentationReport",
    # Request / Response
    "DatasetPayload",
    "FilterRequest",
    "SegmentRequest",
    "AuditInfo",
    "ProfileResponse",
    "FilterResponse",
    "SegmentResponse",
    "LabelResponse",
]
