"""Rule Engine - 规则表达式解析与规则分群

规则只支持比较运算（==, !=, >, <, >=, <=）、布尔组合（and, or, not）、
字面量与列名引用。表达式先解析为闭包树，再逐行求值，不执行任何宿主代码。
"""

import math
import re
from typing import Any, Callable, List, Optional, Sequence, Tuple

from data_segmenter.core.constants import DEFAULT_RULE_SEGMENT
from data_segmenter.engines.statistics import group_indices, summarize
from data_segmenter.models.dataset import Row
from data_segmenter.models.segment import SegmentStats
from data_segmenter.utils.coercion import is_number, to_number
from data_segmenter.utils.logger import log
from data_segmenter.utils.security import SecurityValidator

Evaluator = Callable[[Row], Any]

_TOKEN_SPEC = re.compile(
    r"\s*(?:"
    r"(\d+(?:\.\d*)?(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?)"  # number
    r"|('(?:[^'\\]|\\.)*'|\"(?:[^\"\\]|\\.)*\")"  # string
    r"|`([^`]+)`"  # quoted column
    r"|([A-Za-z_\u4e00-\u9fa5][\w\u4e00-\u9fa5.]*)"  # identifier
    r"|(===|!==|==|!=|>=|<=|>|<|&&|\|\||!|\(|\))"  # operator
    r")"
)

_COMPARISON_OPS = {"==", "===", "!=", "!==", ">", "<", ">=", "<="}
_LITERALS = {"true": True, "false": False, "null": None}

# 括号与 not 的最大嵌套层数
MAX_NESTING_DEPTH = 50


class RuleSyntaxError(ValueError):
    """规则语法错误"""

    def __init__(self, message: str, rule: str, position: int = 0):
        super().__init__(f"{message} (位置 {position}): {rule}")
        self.rule = rule
        self.position = position


class RuleEvaluationError(Exception):
    """规则对某一行求值失败（如引用了不存在的列）"""


def quote_column(name: str) -> str:
    """在规则中引用列名，必要时加反引号"""
    if SecurityValidator.validate_column_name(name):
        return name
    return f"`{name}`"


def _truthy(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, float) and math.isnan(value):
        return False
    return bool(value)


def _equals(left: Any, right: Any, strict: bool) -> bool:
    if left is None or right is None:
        return left is None and right is None
    if isinstance(left, str) and isinstance(right, str):
        return left == right
    left_numeric = is_number(left) or isinstance(left, bool)
    right_numeric = is_number(right) or isinstance(right, bool)
    if strict and left_numeric != right_numeric:
        return False
    if left_numeric or right_numeric:
        a, b = to_number(left), to_number(right)
        return not (math.isnan(a) or math.isnan(b)) and a == b
    return left == right


def _relational(op: str, left: Any, right: Any) -> bool:
    if isinstance(left, str) and isinstance(right, str):
        a, b = left, right
    else:
        a, b = to_number(left), to_number(right)
        if math.isnan(a) or math.isnan(b):
            return False
    if op == ">":
        return a > b
    if op == "<":
        return a < b
    if op == ">=":
        return a >= b
    return a <= b


def _compare(op: str, left: Any, right: Any) -> bool:
    if op in ("==", "==="):
        return _equals(left, right, strict=op == "===")
    if op in ("!=", "!=="):
        return not _equals(left, right, strict=op == "!==")
    return _relational(op, left, right)


def _unescape(literal: str) -> str:
    body = literal[1:-1]
    return re.sub(r"\\(.)", r"\1", body)


def _tokenize(rule: str) -> List[Tuple[str, str, int]]:
    tokens: List[Tuple[str, str, int]] = []
    pos = 0
    text = rule.rstrip()
    while pos < len(text):
        match = _TOKEN_SPEC.match(text, pos)
        if not match:
            raise RuleSyntaxError("规则包含非法字符", rule, pos)
        number, string, quoted, ident, op = match.groups()
        start = match.start(match.lastindex)
        if number is not None:
            tokens.append(("number", number, start))
        elif string is not None:
            tokens.append(("string", _unescape(string), start))
        elif quoted is not None:
            tokens.append(("column", quoted, start))
        elif ident is not None:
            lowered = ident.lower()
            if lowered in ("and", "or", "not"):
                tokens.append(("op", lowered, start))
            else:
                tokens.append(("ident", ident, start))
        else:
            tokens.append(("op", op, start))
        pos = match.end()
    return tokens


class CompiledRule:
    """已解析的规则"""

    def __init__(self, text: str, evaluator: Evaluator):
        self.text = text
        self._evaluator = evaluator

    def evaluate(self, row: Row) -> Any:
        return self._evaluator(row)

    def matches(self, row: Row) -> bool:
        """
        判断行是否满足规则

        Raises:
            RuleEvaluationError: 求值失败
        """
        return _truthy(self.evaluate(row))

    def __repr__(self) -> str:
        return f"CompiledRule({self.text!r})"


def compile_rule(rule: str) -> CompiledRule:
    """
    解析规则表达式

    Args:
        rule: 规则文本，如 "quantity > 100 and price < 50"

    Returns:
        CompiledRule: 可逐行求值的规则

    Raises:
        RuleSyntaxError: 语法错误
    """
    if not SecurityValidator.validate_rule_text(rule):
        raise RuleSyntaxError("规则不合法", rule)

    tokens = _tokenize(rule)
    if not tokens:
        raise RuleSyntaxError("规则为空", rule)

    index = 0
    depth = 0

    def descend(position: int) -> None:
        nonlocal depth
        depth += 1
        if depth > MAX_NESTING_DEPTH:
            raise RuleSyntaxError(f"嵌套层数超过 {MAX_NESTING_DEPTH}", rule, position)

    def ascend() -> None:
        nonlocal depth
        depth -= 1

    def peek() -> Optional[Tuple[str, str, int]]:
        return tokens[index] if index < len(tokens) else None

    def at_op(*ops: str) -> bool:
        token = peek()
        return token is not None and token[0] == "op" and token[1] in ops

    def consume(expected: str | None = None) -> Tuple[str, str, int]:
        nonlocal index
        if index >= len(tokens):
            raise RuleSyntaxError("规则不完整", rule, len(rule))
        token = tokens[index]
        if expected and token[1] != expected:
            raise RuleSyntaxError(f"期望 '{expected}'", rule, token[2])
        index += 1
        return token

    def parse_or() -> Evaluator:
        node = parse_and()
        while at_op("or", "||"):
            consume()
            left, right = node, parse_and()
            node = lambda row, l=left, r=right: _truthy(l(row)) or _truthy(r(row))
        return node

    def parse_and() -> Evaluator:
        node = parse_not()
        while at_op("and", "&&"):
            consume()
            left, right = node, parse_not()
            node = lambda row, l=left, r=right: _truthy(l(row)) and _truthy(r(row))
        return node

    def parse_not() -> Evaluator:
        if at_op("not", "!"):
            descend(consume()[2])
            inner = parse_not()
            ascend()
            return lambda row: not _truthy(inner(row))
        return parse_comparison()

    def parse_comparison() -> Evaluator:
        left = parse_operand()
        token = peek()
        if token and token[0] == "op" and token[1] in _COMPARISON_OPS:
            op = consume()[1]
            right = parse_operand()
            return lambda row: _compare(op, left(row), right(row))
        return left

    def parse_operand() -> Evaluator:
        token = peek()
        if token is None:
            raise RuleSyntaxError("规则不完整", rule, len(rule))
        kind, value, position = token

        if kind == "number":
            consume()
            number = float(value)
            return lambda row: number
        if kind == "string":
            consume()
            return lambda row: value
        if kind in ("ident", "column"):
            consume()
            if kind == "ident" and value in _LITERALS:
                literal = _LITERALS[value]
                return lambda row: literal
            return _lookup(value)
        if kind == "op" and value == "(":
            descend(consume("(")[2])
            inner = parse_or()
            consume(")")
            ascend()
            return inner

        raise RuleSyntaxError(f"无法解析 '{value}'", rule, position)

    try:
        evaluator = parse_or()
    except RecursionError:
        raise RuleSyntaxError("规则嵌套过深", rule, 0) from None
    if index != len(tokens):
        raise RuleSyntaxError(f"多余的内容 '{tokens[index][1]}'", rule, tokens[index][2])
    return CompiledRule(rule, evaluator)


def _lookup(column: str) -> Evaluator:
    def resolve(row: Row) -> Any:
        if column not in row:
            raise RuleEvaluationError(f"列不存在: {column}")
        return row[column]
    return resolve


def _try_compile(rules: Sequence[str]) -> List[Optional[CompiledRule]]:
    compiled: List[Optional[CompiledRule]] = []
    for rule in rules:
        try:
            compiled.append(compile_rule(rule))
        except RuleSyntaxError as e:
            log.warning(f"规则无法解析，视为不匹配: {e}")
            compiled.append(None)
    return compiled


def assign_rules(rows: Sequence[Row], rules: Sequence[str]) -> List[int]:
    """
    按规则顺序为每行分配分群

    Args:
        rows: 数据行
        rules: 规则列表（首个匹配生效）

    Returns:
        每行的规则序号；均不匹配时为 len(rules)（默认分群）
    """
    compiled = _try_compile(rules)
    default_index = len(rules)
    assignments: List[int] = []

    for position, row in enumerate(rows):
        assigned = default_index
        for i, rule in enumerate(compiled):
            if rule is None:
                continue
            try:
                if rule.matches(row):
                    assigned = i
                    break
            except (RuleEvaluationError, TypeError, ValueError, OverflowError, RecursionError) as e:
                log.debug(f"规则 {i + 1} 对第 {position} 行求值失败: {e}")
        assignments.append(assigned)
    return assignments


def rule_segment(rows: Sequence[Row], rules: Sequence[str]) -> List[SegmentStats]:
    """
    规则分群

    每条规则对应一个分群；未匹配任何规则的行归入 "Default" 分群，
    该分群仅在非空时追加到末尾。
    统计量覆盖分群首行的全部列。

    Args:
        rows: 数据行
        rules: 规则列表

    Returns:
        分群列表
    """
    if not rules:
        return [SegmentStats(row_indices=list(range(len(rows))))]

    assignments = assign_rules(rows, rules)
    groups = group_indices(assignments, len(rules) + 1)
    if not groups[-1]:
        groups.pop()

    segments = [
        summarize(rows, indices, list(rows[indices[0]].keys()) if indices else [])
        for indices in groups
    ]
    if len(segments) > len(rules):
        segments[-1].label = DEFAULT_RULE_SEGMENT
    log.info(
        f"规则分群: {len(rules)} 条规则, 各分群行数 {[len(g) for g in groups]}"
        + (f", {DEFAULT_RULE_SEGMENT} 分群 {len(groups[-1])} 行" if len(groups) > len(rules) else "")
    )
    return segments
