"""过滤条件模型"""

import uuid
from datetime import date, datetime
from typing import List, Optional, Any, Union
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from data_segmenter.utils.coercion import stringify


class FilterCondition(BaseModel):
    """
    过滤条件

    operator 不做白名单限制：未知操作符在求值时恒为真。
    必填字段的完整性由 filter_engine.validate_conditions 在求值前校验。
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12], description="条件ID")
    column: str = Field("", description="列名")
    operator: str = Field("equals", description="操作符")
    value: Any = Field("", description="比较值")
    value2: Any = Field(None, description="between 的上界")
    values: Optional[List[Any]] = Field(None, description="in_list 的取值列表")
    date_from: Optional[Union[datetime, date, str]] = Field(None, description="date_between 起始日期")
    date_to: Optional[Union[datetime, date, str]] = Field(None, description="date_between 结束日期")

    @property
    def text_value(self) -> str:
        return stringify(self.value)

    @property
    def text_values(self) -> List[str]:
        return [stringify(v) for v in self.values or []]
