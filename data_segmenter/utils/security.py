"""安全防护工具"""

import re
from typing import List, Sequence
from data_segmenter.core.config import settings
from data_segmenter.utils.logger import log


class SecurityValidator:
    """输入规模与内容校验器"""

    @classmethod
    def max_conditions(cls) -> int:
        return settings.max_filter_conditions

    @classmethod
    def validate_column_name(cls, col_name: str) -> bool:
        """
        验证列名能否在规则中直接引用

        Args:
            col_name: 列名

        Returns:
            是否可不加反引号直接引用
        """
        return re.match(r'^[A-Za-z_\u4e00-\u9fa5][\w\u4e00-\u9fa5.]*$', col_name) is not None

    @classmethod
    def validate_filter_complexity(cls, condition_count: int) -> bool:
        """
        验证过滤条件数量

        Args:
            condition_count: 条件数量

        Returns:
            是否在允许范围内
        """
        if condition_count > settings.max_filter_conditions:
            log.warning(f"过滤条件过多: {condition_count} > {settings.max_filter_conditions}")
            return False
        return True

    @classmethod
    def validate_rule_text(cls, rule: str) -> bool:
        """
        验证单条规则文本

        Args:
            rule: 规则表达式

        Returns:
            是否安全
        """
        if len(rule) > settings.max_rule_length:
            log.warning(f"规则过长: {len(rule)} > {settings.max_rule_length}")
            return False

        if not rule.isprintable():
            log.warning("规则包含不可打印字符")
            return False
        return True

    @classmethod
    def validate_rules(cls, rules: Sequence[str]) -> List[str]:
        """
        校验规则列表

        Args:
            rules: 规则表达式列表

        Returns:
            问题描述列表（为空表示通过）
        """
        problems: List[str] = []
        if len(rules) > settings.max_custom_rules:
            problems.append(f"规则过多: {len(rules)} > {settings.max_custom_rules}")
        for i, rule in enumerate(rules):
            if not cls.validate_rule_text(rule):
                problems.append(f"规则 {i + 1} 不合法: {rule[:50]}")
        return problems
