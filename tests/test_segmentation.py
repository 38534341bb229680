"""分群调度测试"""

import pytest
from data_segmenter.core.constants import SEGMENT_COLORS
from data_segmenter.engines.segmentation import (
    attach_segment_labels,
    run_segmentation,
    segment,
    usable_numeric_columns
)
from data_segmenter.models.segment import SegmentationConfig


@pytest.fixture
def sales():
    return [{"id": i, "amount": i * 10, "region": "EU" if i % 2 else "US"} for i in range(1, 21)]


def test_zero_rows():
    """空数据返回空结果"""
    result = run_segmentation([], SegmentationConfig(selected_columns=["amount"]), rng=1)
    assert result.segments == []
    assert result.assignments == []
    assert result.total_rows == 0


def test_no_numeric_columns_falls_back_to_all_data(sales):
    """没有可用数值列时返回单个 All Data 分群"""
    config = SegmentationConfig(method="quantile", num_segments=3, selected_columns=["region"])
    result = run_segmentation(sales, config)
    assert len(result.segments) == 1
    fallback = result.segments[0]
    assert fallback.name == "All Data"
    assert fallback.count == len(sales)
    assert fallback.avg_values == {}
    assert result.assignments == [0] * len(sales)


def test_no_selected_columns_falls_back(sales):
    """未选择列时同样返回 All Data"""
    segments = segment(sales, SegmentationConfig(method="kmeans"), rng=3)
    assert [s.name for s in segments] == ["All Data"]


def test_hierarchical_runs_kmeans(sales):
    """hierarchical 执行 kmeans 路径"""
    kmeans = run_segmentation(sales, SegmentationConfig(method="kmeans", num_segments=3, selected_columns=["amount"]), rng=11)
    hierarchical = run_segmentation(
        sales,
        SegmentationConfig(method="hierarchical", num_segments=3, selected_columns=["amount"]),
        rng=11
    )
    assert hierarchical.method == "hierarchical"
    assert hierarchical.executed_method == "kmeans"
    assert hierarchical.assignments == kmeans.assignments


def test_kmeans_assigns_every_row(sales):
    """K-Means 为每行分配分群"""
    result = run_segmentation(sales, SegmentationConfig(num_segments=4, selected_columns=["amount"]), rng=5)
    assert len(result.segments) == 4
    assert sum(s.count for s in result.segments) == len(sales)
    assert result.assigned_rows == len(sales)
    assert result.numeric_columns == ["amount"]


def test_display_pools_cycle():
    """名称、颜色与描述按下标循环"""
    rows = [{"v": i} for i in range(1, 25)]
    config = SegmentationConfig(method="quantile", num_segments=12, selected_columns=["v"])
    segments = segment(rows, config)
    assert len(segments) == 12
    assert segments[0].name == "Group A"
    assert segments[9].name == "Group J"
    assert segments[10].name == "Group A"
    assert segments[10].color == "bg-secondary"
    assert segments[8].color == SEGMENT_COLORS[0]
    assert segments[10].description == "Low value items"


def test_quantile_counts_match_assigned_rows():
    """分群行数之和等于已分配行数"""
    rows = [{"v": v} for v in [5, "x", 3, None, 9, 1]]
    result = run_segmentation(rows, SegmentationConfig(method="quantile", num_segments=2, selected_columns=["v"]))
    assert sum(s.count for s in result.segments) == result.assigned_rows == 4
    assert result.assignments[1] is None


def test_custom_rules(sales):
    """自定义规则分群"""
    config = SegmentationConfig(
        method="custom_rules",
        selected_columns=["amount"],
        custom_rules=["amount > 150", "region == 'EU'"]
    )
    result = run_segmentation(sales, config)
    assert [s.name for s in result.segments] == ["Group A", "Group B", "Default"]
    assert result.segments[0].count == 5
    assert result.assignments[0] == 1
    assert result.assignments[1] == 2
    assert result.segments[0].min_values["amount"] == 160


def test_blank_rule_keeps_its_segment():
    """空规则不匹配任何行，但保留自己的分群序号"""
    config = SegmentationConfig(
        method="custom_rules",
        selected_columns=["price"],
        custom_rules=["price > 100", "  ", "price > 50"]
    )
    result = run_segmentation([{"price": 75, "q": 1}], config)
    assert result.assignments == [2]
    assert [s.count for s in result.segments] == [0, 0, 1]
    assert result.segments[2].name == "Group C"


def test_deeply_nested_rule_does_not_abort(sales):
    """嵌套过深的规则视为不匹配，分群照常完成"""
    config = SegmentationConfig(
        method="custom_rules",
        selected_columns=["amount"],
        custom_rules=["(" * 200 + "amount > 1" + ")" * 200, "amount > 150"]
    )
    result = run_segmentation(sales, config)
    assert result.segments[0].count == 0
    assert result.segments[1].count == 5
    assert result.segments[2].name == "Default"


def test_attach_segment_labels(sales):
    """附加标签返回副本，不修改输入"""
    config = SegmentationConfig(method="quantile", num_segments=2, selected_columns=["amount"])
    result = run_segmentation(sales, config)
    labelled = attach_segment_labels(sales, result)
    assert labelled[0]["segment"] == "Group A"
    assert labelled[-1]["segment"] == "Group B"
    assert "segment" not in sales[0]

    custom = attach_segment_labels(sales, result, column="cohort")
    assert custom[0]["cohort"] == "Group A"


def test_attach_labels_unassigned_rows():
    """未分配的行标签为 None"""
    rows = [{"v": 1}, {"v": "?"}, {"v": 3}]
    result = run_segmentation(rows, SegmentationConfig(method="quantile", num_segments=2, selected_columns=["v"]))
    labelled = attach_segment_labels(rows, result)
    assert labelled[1]["segment"] is None


def test_attach_labels_length_mismatch(sales):
    """行数不一致时报错"""
    result = run_segmentation(sales, SegmentationConfig(method="quantile", selected_columns=["amount"]))
    with pytest.raises(ValueError):
        attach_segment_labels(sales[:-1], result)


def test_usable_numeric_columns_samples_first_rows():
    """只在前 100 行中寻找数值"""
    rows = [{"early": i, "late": None if i < 100 else i, "text": "a"} for i in range(150)]
    assert usable_numeric_columns(rows, ["early", "late", "text"]) == ["early"]
    assert usable_numeric_columns(rows, ["early", "late"], sample_size=150) == ["early", "late"]


def test_too_many_segments(sales):
    """分群数量超过上限"""
    with pytest.raises(ValueError):
        run_segmentation(sales, SegmentationConfig(num_segments=51, selected_columns=["amount"]))


def test_too_many_rules(sales):
    """规则数量超过上限"""
    config = SegmentationConfig(
        method="custom_rules",
        selected_columns=["amount"],
        custom_rules=[f"amount > {i}" for i in range(21)]
    )
    with pytest.raises(ValueError):
        run_segmentation(sales, config)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
