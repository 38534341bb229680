"""分群相关模型"""

from datetime import datetime
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from data_segmenter.core.config import settings
from data_segmenter.core.constants import DEFAULT_LABEL_COLUMN

SegmentationMethod = Literal["kmeans", "hierarchical", "quantile", "custom_rules"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SegmentationConfig(_CamelModel):
    """分群配置"""
    method: SegmentationMethod = Field("kmeans", description="分群方法")
    num_segments: int = Field(settings.default_num_segments, ge=1, description="分群数量 k")
    selected_columns: List[str] = Field(default_factory=list, description="参与分群的列")
    custom_rules: List[str] = Field(default_factory=list, description="自定义规则（按顺序匹配）")
    label_column: str = Field(DEFAULT_LABEL_COLUMN, description="附加标签时使用的列名")

    @field_validator("custom_rules")
    @classmethod
    def strip_rules(cls, v: List[str]) -> List[str]:
        # 空规则保留原位：规则 i 始终对应分群 i
        return [rule.strip() for rule in v]


class SegmentStats(_CamelModel):
    """单个分群的原始结果（未附加展示信息）"""
    row_indices: List[int] = Field(default_factory=list, description="所含行在输入中的位置")
    avg_values: Dict[str, float] = Field(default_factory=dict)
    min_values: Dict[str, float] = Field(default_factory=dict)
    max_values: Dict[str, float] = Field(default_factory=dict)
    label: Optional[str] = Field(None, description="固定名称（如规则分群的默认分群），为空时按序号取名")

    @property
    def count(self) -> int:
        return len(self.row_indices)


class Segment(_CamelModel):
    """分群结果"""
    index: int = Field(..., ge=0, description="分群序号")
    name: str = Field(..., description="分群名称")
    color: str = Field(..., description="颜色/样式标识")
    description: str = Field("", description="分群描述")
    count: int = Field(0, ge=0, description="行数")
    avg_values: Dict[str, float] = Field(default_factory=dict, description="各列均值")
    min_values: Dict[str, float] = Field(default_factory=dict, description="各列最小值")
    max_values: Dict[str, float] = Field(default_factory=dict, description="各列最大值")
    row_indices: List[int] = Field(default_factory=list, description="所含行在输入中的位置")


class SegmentationResult(_CamelModel):
    """一次分群运行的完整输出"""
    method: SegmentationMethod = Field(..., description="请求的方法")
    executed_method: str = Field(..., description="实际执行的方法")
    segments: List[Segment] = Field(default_factory=list)
    assignments: List[Optional[int]] = Field(default_factory=list, description="每行所属分群序号，未分配为 None")
    numeric_columns: List[str] = Field(default_factory=list, description="可用的数值列")
    total_rows: int = Field(0, ge=0)

    @property
    def assigned_rows(self) -> int:
        return sum(1 for a in self.assignments if a is not None)


class SegmentationReport(_CamelModel):
    """分群导出报告"""
    dataset: Optional[str] = Field(None, description="数据集名称")
    config: SegmentationConfig
    segments: List[Segment] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=datetime.now)
