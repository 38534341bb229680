"""API 请求与响应模型"""

from typing import List, Dict, Any, Optional
from pydantic import BaseModel, Field

from data_segmenter.models.dataset import ColumnProfile, Row
from data_segmenter.models.filter import FilterCondition
from data_segmenter.models.segment import SegmentationConfig, Segment, SegmentationReport


class DatasetPayload(BaseModel):
    """请求中内联的数据集"""
    name: Optional[str] = Field(None, description="数据集名称")
    rows: List[Row] = Field(default_factory=list, description="数据行")
    columns: List[str] = Field(default_factory=list, description="列名列表（为空时取首行的键）")


class FilterRequest(BaseModel):
    """过滤请求"""
    dataset: DatasetPayload
    conditions: List[FilterCondition] = Field(default_factory=list, description="过滤条件（AND）")
    check_operators: bool = Field(True, description="是否按列类型校验操作符")


class SegmentRequest(BaseModel):
    """分群请求"""
    dataset: DatasetPayload
    config: SegmentationConfig
    conditions: List[FilterCondition] = Field(default_factory=list, description="分群前先应用的过滤条件")
    seed: Optional[int] = Field(None, description="K-Means 随机种子")


class AuditInfo(BaseModel):
    """审计信息"""
    trace_id: str = Field(..., description="追踪ID")
    steps: List[Dict[str, Any]] = Field(..., description="执行步骤")
    total_steps: int = Field(..., description="总步数")
    duration_ms: float = Field(0.0, description="总耗时（毫秒）")


class ProfileResponse(BaseModel):
    """列画像响应"""
    columns: List[ColumnProfile] = Field(..., description="列画像")
    row_count: int = Field(..., description="总行数")
    audit: AuditInfo


class FilterResponse(BaseModel):
    """过滤响应"""
    rows: List[Row] = Field(..., description="满足全部条件的行")
    row_count: int = Field(..., description="返回行数")
    total_rows: int = Field(..., description="原始行数")
    audit: AuditInfo


class SegmentResponse(BaseModel):
    """分群响应"""
    report: SegmentationReport
    assigned_rows: int = Field(..., description="被分配到分群的行数")
    total_rows: int = Field(..., description="参与分群的行数")
    audit: AuditInfo


class LabelResponse(BaseModel):
    """附加标签响应"""
    rows: List[Row] = Field(..., description="附加了分群标签的行副本")
    label_column: str = Field(..., description="标签列名")
    segments: List[Segment] = Field(default_factory=list)
    audit: AuditInfo
