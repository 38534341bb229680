"""规则分群测试"""

import pytest
from data_segmenter.engines.rule_engine import (
    MAX_NESTING_DEPTH,
    RuleSyntaxError,
    assign_rules,
    compile_rule,
    quote_column,
    rule_segment
)


def test_first_matching_rule_wins():
    """price=75 落入第二条规则"""
    rows = [{"price": 150}, {"price": 75}, {"price": 10}]
    assert assign_rules(rows, ["price > 100", "price > 50"]) == [0, 1, 2]


def test_default_segment_only_when_non_empty():
    """默认分群仅在有行时出现"""
    rules = ["price > 100", "price > 50"]
    with_default = rule_segment([{"price": 150}, {"price": 75}, {"price": 10}], rules)
    without_default = rule_segment([{"price": 150}, {"price": 75}], rules)
    assert [s.row_indices for s in with_default] == [[0], [1], [2]]
    assert [s.row_indices for s in without_default] == [[0], [1]]


def test_empty_rule_segment_is_kept():
    """规则对应的分群即使为空也保留"""
    segments = rule_segment([{"price": 10}], ["price > 100", "price > 5"])
    assert [s.count for s in segments] == [0, 1]
    assert segments[0].avg_values == {}


def test_string_comparisons():
    """字符串相等与字典序比较"""
    rows = [{"region": "EU", "name": "Nina"}, {"region": "US", "name": "Adam"}]
    assert assign_rules(rows, ["region == 'EU'"]) == [0, 1]
    assert assign_rules(rows, ['name > "M"']) == [0, 1]


def test_numeric_strings_compare_as_numbers():
    """数值字符串与数字比较时按数值"""
    rule = compile_rule("price > 100")
    assert rule.matches({"price": "120"}) is True
    assert rule.matches({"price": "abc"}) is False
    assert compile_rule("price == 120").matches({"price": "120"}) is True
    assert compile_rule("price === 120").matches({"price": "120"}) is False


def test_boolean_and_null_literals():
    """true/false/null 字面量"""
    assert compile_rule("active == true").matches({"active": True}) is True
    assert compile_rule("active != false").matches({"active": True}) is True
    assert compile_rule("note == null").matches({"note": None}) is True
    assert compile_rule("note == null").matches({"note": ""}) is False


def test_operator_precedence():
    """and 优先于 or，not 作用于紧随的比较"""
    rule = compile_rule("a > 1 or b > 1 and c > 1")
    assert rule.matches({"a": 2, "b": 0, "c": 0}) is True
    assert rule.matches({"a": 0, "b": 2, "c": 0}) is False
    assert compile_rule("not a > 1").matches({"a": 0}) is True
    assert compile_rule("(a > 1 or b > 1) and c > 1").matches({"a": 2, "b": 0, "c": 0}) is False


def test_symbolic_operators():
    """&& || ! 写法"""
    row = {"qty": 150, "price": 20}
    assert compile_rule("qty > 100 && price < 50").matches(row) is True
    assert compile_rule("qty < 100 || price <= 20").matches(row) is True
    assert compile_rule("!(qty >= 150)").matches(row) is False


def test_quoted_column_names():
    """反引号引用含空格的列名"""
    rule = compile_rule("`unit price` >= 10")
    assert rule.matches({"unit price": 10}) is True
    assert quote_column("unit price") == "`unit price`"
    assert quote_column("price") == "price"


@pytest.mark.parametrize("rule", ["price >", "price > > 3", "(price > 3", "price > 3 4", "price @ 3"])
def test_syntax_errors(rule):
    """语法错误"""
    with pytest.raises(RuleSyntaxError):
        compile_rule(rule)


def test_host_code_is_rejected():
    """规则不能执行宿主代码"""
    with pytest.raises(RuleSyntaxError):
        compile_rule("__import__('os').system('x')")


@pytest.mark.parametrize("rule", [
    "(" * 300 + "price > 1" + ")" * 150,
    "(" * 51 + "price > 1" + ")" * 51,
    "not " * 60 + "price > 1",
    "!" * 400 + "price",
])
def test_nesting_limit(rule):
    """嵌套过深的规则报语法错误"""
    with pytest.raises(RuleSyntaxError):
        compile_rule(rule)


def test_nesting_within_limit():
    """限制以内的嵌套可以正常解析"""
    rule = compile_rule("(" * MAX_NESTING_DEPTH + "price > 1" + ")" * MAX_NESTING_DEPTH)
    assert rule.matches({"price": 2}) is True
    assert compile_rule("not not price > 1").matches({"price": 2}) is True


def test_deeply_nested_rule_never_matches():
    """嵌套过深的规则视为不匹配"""
    rows = [{"price": 75}]
    assert assign_rules(rows, ["(" * 300 + "price > 1" + ")" * 150, "price > 50"]) == [1]


def test_blank_rule_keeps_index():
    """空规则不匹配，后续规则序号不变"""
    rows = [{"price": 75}]
    assert assign_rules(rows, ["price > 100", "", "price > 50"]) == [2]
    with pytest.raises(RuleSyntaxError):
        compile_rule("")


def test_default_segment_is_named():
    """未匹配任何规则的分群名为 Default"""
    segments = rule_segment([{"price": 150}, {"price": 10}], ["price > 100"])
    assert [s.label for s in segments] == [None, "Default"]


def test_evaluate_returns_raw_value():
    """evaluate 返回表达式原值，matches 返回真值"""
    assert compile_rule("price").evaluate({"price": 3}) == 3
    assert compile_rule("price > 1").evaluate({"price": 3}) is True
    assert compile_rule("price").matches({"price": 0}) is False


def test_bad_rule_never_matches():
    """无法解析的规则视为不匹配"""
    rows = [{"price": 75}]
    assert assign_rules(rows, ["price >", "price > 50"]) == [1]


def test_unknown_column_never_matches():
    """引用不存在的列视为不匹配"""
    rows = [{"price": 75}]
    assert assign_rules(rows, ["ghost > 1", "price > 50"]) == [1]
    assert assign_rules(rows, ["ghost > 1"]) == [1]


def test_no_rules_single_segment():
    """无规则时全部数据为一个分群"""
    segments = rule_segment([{"price": 1}, {"price": 2}], [])
    assert len(segments) == 1
    assert segments[0].row_indices == [0, 1]
    assert segments[0].avg_values == {}


def test_stats_use_first_row_columns():
    """统计列取分群首行的键"""
    rows = [{"price": 150, "name": "x"}, {"price": 120, "qty": 3}]
    segments = rule_segment(rows, ["price > 100"])
    assert len(segments) == 1
    assert segments[0].avg_values == {"price": 135.0}
    assert "qty" not in segments[0].max_values


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
