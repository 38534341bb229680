"""数据集相关模型"""

from typing import List, Optional, Any, Dict, Literal
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ColumnKind = Literal["numeric", "categorical", "date", "text"]

Row = Dict[str, Any]


class ColumnProfile(BaseModel):
    """列画像（推断类型与摘要统计）"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = Field(..., description="列名")
    kind: ColumnKind = Field(..., description="推断类型: numeric, categorical, date, text")
    min_value: Optional[float] = Field(None, description="最小值（仅数值列）")
    max_value: Optional[float] = Field(None, description="最大值（仅数值列）")
    categories: Optional[List[str]] = Field(None, max_length=20, description="类别取值（仅分类列，最多20个）")
    unique_value_count: int = Field(0, ge=0, description="非空唯一值数量")


class Dataset(BaseModel):
    """内存数据集：有序的行记录与权威列清单"""

    rows: List[Row] = Field(default_factory=list, description="数据行")
    columns: List[str] = Field(default_factory=list, description="列名列表")

    def column_values(self, name: str) -> List[Any]:
        """按行取出某列的值，缺失的键视为 None"""
        return [row.get(name) for row in self.rows]

    @property
    def row_count(self) -> int:
        return len(self.rows)


class OperatorOption(BaseModel):
    """可选过滤操作符"""
    value: str = Field(..., description="操作符")
    label: str = Field(..., description="显示名称")
