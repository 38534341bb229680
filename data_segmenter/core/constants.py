"""系统常量定义"""

import re
from typing import Dict, List, Set, Tuple

# 列类型
COLUMN_KINDS: Tuple[str, ...] = ("numeric", "categorical", "date", "text")

# 列类型推断阈值
NUMERIC_RATIO = 0.8
CATEGORICAL_RATIO = 0.1
MAX_CATEGORIES = 20

# 宽松日期格式: YYYY-MM-DD / MM/DD/YYYY / MM-DD-YYYY
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}|\d{2}/\d{2}/\d{4}|\d{2}-\d{2}-\d{4}$")

# 各列类型允许的过滤操作符（有序，含显示名）
OPERATORS_BY_KIND: Dict[str, List[Tuple[str, str]]] = {
    "numeric": [
        ("equals", "Equals"),
        ("not_equals", "Not equals"),
        ("greater_than", "Greater than"),
        ("less_than", "Less than"),
        ("between", "Between"),
    ],
    "categorical": [
        ("equals", "Equals"),
        ("not_equals", "Not equals"),
        ("in_list", "In list"),
    ],
    "date": [
        ("equals", "Equals"),
        ("not_equals", "Not equals"),
        ("greater_than", "After"),
        ("less_than", "Before"),
        ("date_between", "Between dates"),
    ],
    "text": [
        ("equals", "Equals"),
        ("not_equals", "Not equals"),
        ("contains", "Contains"),
    ],
}

# 已知过滤操作符全集
KNOWN_FILTER_OPERATORS: Set[str] = {
    op for options in OPERATORS_BY_KIND.values() for op, _ in options
}

# 分群方法 -> 实际执行方法
# hierarchical 暂时复用 kmeans
SEGMENTATION_METHOD_ALIASES: Dict[str, str] = {
    "kmeans": "kmeans",
    "hierarchical": "kmeans",
    "quantile": "quantile",
    "custom_rules": "custom_rules",
}

# 分群展示用的名称/颜色/描述池（按下标循环取值）
SEGMENT_NAMES: Tuple[str, ...] = (
    "Group A", "Group B", "Group C", "Group D", "Group E",
    "Group F", "Group G", "Group H", "Group I", "Group J",
)

SEGMENT_COLORS: Tuple[str, ...] = (
    "bg-primary",
    "bg-success",
    "bg-secondary",
    "bg-warning",
    "bg-accent",
    "bg-info",
    "bg-primary/70",
    "bg-success/70",
)

SEGMENT_DESCRIPTIONS: Tuple[str, ...] = (
    "High value items",
    "Medium-high value items",
    "Medium value items",
    "Medium-low value items",
    "Low value items",
    "Very low value items",
)

# 无可用数值列时的兜底分群
FALLBACK_SEGMENT_NAME = "All Data"
FALLBACK_SEGMENT_COLOR = "bg-primary"
FALLBACK_SEGMENT_DESCRIPTION = "No numeric columns found for segmentation"

# 规则分群默认分组
DEFAULT_RULE_SEGMENT = "Default"

# 附加标签的默认列名
DEFAULT_LABEL_COLUMN = "segment"
