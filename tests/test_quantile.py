"""分位数分群测试"""

import pytest
from data_segmenter.engines.quantile import quantile_assign, quantile_segment


def test_even_buckets():
    """1..100 分 4 桶，每桶 25 行"""
    rows = [{"v": i} for i in range(1, 101)]
    assignments = quantile_assign(rows, "v", 4)
    assert assignments[0] == 0
    assert assignments[24] == 0
    assert assignments[25] == 1
    assert assignments[74] == 2
    assert assignments[99] == 3
    assert [assignments.count(b) for b in range(4)] == [25, 25, 25, 25]


def test_order_does_not_matter():
    """桶序号按排名，与行顺序无关"""
    rows = [{"v": 40}, {"v": 10}, {"v": 30}, {"v": 20}]
    assert quantile_assign(rows, "v", 2) == [1, 0, 1, 0]


def test_unparsable_rows_are_excluded():
    """主列无法解析的行不进入任何桶"""
    rows = [{"v": "n/a"}, {"v": 5}, {}, {"v": "7kg"}]
    assert quantile_assign(rows, "v", 2) == [None, 0, None, 1]


def test_duplicates_use_first_position():
    """重复值按首次出现位置分桶"""
    rows = [{"v": v} for v in [1, 2, 2, 2, 3, 4]]
    assignments = quantile_assign(rows, "v", 2)
    assert assignments == [0, 0, 0, 0, 1, 1]


def test_single_bucket():
    """k=1 时全部归入 0 号桶"""
    rows = [{"v": v} for v in [3, 1, 2]]
    assert quantile_assign(rows, "v", 1) == [0, 0, 0]


def test_no_finite_values():
    """没有有效数值时全部未分配"""
    rows = [{"v": "a"}, {"v": None}]
    assert quantile_assign(rows, "v", 3) == [None, None]


def test_invalid_k():
    """k 必须 >= 1"""
    with pytest.raises(ValueError):
        quantile_assign([{"v": 1}], "v", 0)


def test_segment_stats_cover_all_columns():
    """只用第一列分桶，统计覆盖全部所选列"""
    rows = [
        {"price": 10, "qty": 1},
        {"price": 20, "qty": 3},
        {"price": 30, "qty": 5},
        {"price": 40, "qty": 7},
        {"price": "?", "qty": 100},
    ]
    segments = quantile_segment(rows, ["price", "qty"], 2)
    assert [s.row_indices for s in segments] == [[0, 1], [2, 3]]
    assert segments[0].avg_values == {"price": 15.0, "qty": 2.0}
    assert segments[1].max_values["qty"] == 7
    assert sum(s.count for s in segments) == 4


def test_segment_requires_columns():
    """至少需要一个数值列"""
    with pytest.raises(ValueError):
        quantile_segment([{"v": 1}], [], 2)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
