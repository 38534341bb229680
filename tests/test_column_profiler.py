"""列类型推断测试"""

import pytest
from data_segmenter.engines.column_profiler import ColumnProfiler, infer_columns


@pytest.fixture
def profiler():
    return ColumnProfiler()


def test_date_column(profiler):
    """任意一个值匹配日期格式即判为日期列"""
    profile = profiler.profile_column("created", ["2024-01-05", "hello", None])
    assert profile.kind == "date"
    assert profile.unique_value_count == 2
    assert profile.min_value is None


@pytest.mark.parametrize("value", ["01/31/2024", "01-31-2024", "2024-01-31T10:00:00"])
def test_date_formats(profiler, value):
    """测试支持的日期格式"""
    assert profiler.profile_column("d", [value]).kind == "date"


def test_numeric_column_at_threshold(profiler):
    """恰好 80% 可解析为数值时判为数值列"""
    profile = profiler.profile_column("amount", ["1", "2", "3", "4", "x"])
    assert profile.kind == "numeric"
    assert profile.min_value == 1.0
    assert profile.max_value == 4.0
    assert profile.unique_value_count == 5


def test_numeric_column_below_threshold(profiler):
    """79% 数值的列不是数值列"""
    values = [str(i) for i in range(1, 80)] + [f"word{i}" for i in range(21)]
    profile = profiler.profile_column("mixed", values)
    assert profile.kind == "text"
    assert profile.min_value is None


def test_numeric_prefix_parsing(profiler):
    """数值前缀可解析"""
    profile = profiler.profile_column("size", ["12abc", "13", "14", "15", "16"])
    assert profile.kind == "numeric"
    assert profile.min_value == 12.0


def test_categorical_column(profiler):
    """唯一值较少时判为分类列"""
    values = ["A", "B"] * 50
    profile = profiler.profile_column("status", values)
    assert profile.kind == "categorical"
    assert profile.categories == ["A", "B"]
    assert profile.unique_value_count == 2


def test_boolean_column_is_categorical(profiler):
    """布尔值不按数值处理"""
    profile = profiler.profile_column("active", [True, False] * 30)
    assert profile.kind == "categorical"
    assert profile.categories == ["true", "false"]


def test_small_dataset_falls_back_to_text(profiler):
    """行数太少时 10% 阈值不足以判为分类列"""
    profile = profiler.profile_column("status", ["A", "B", "A", "B"])
    assert profile.kind == "text"


def test_all_null_column_is_text(profiler):
    """全空的列判为文本，无最值与类别"""
    profile = profiler.profile_column("empty", [None, None, None])
    assert profile.kind == "text"
    assert profile.unique_value_count == 0
    assert profile.min_value is None
    assert profile.max_value is None
    assert profile.categories is None


def test_infer_columns_uses_column_order_and_missing_keys():
    """列顺序以列清单为准，缺失键视为空"""
    rows = [{"amount": 5}, {"amount": 7, "note": "x"}]
    profiles = infer_columns(rows, ["note", "amount", "ghost"])
    assert [p.name for p in profiles] == ["note", "amount", "ghost"]
    assert profiles[1].kind == "numeric"
    assert profiles[2].kind == "text"
    assert profiles[2].unique_value_count == 0


def test_inference_is_deterministic():
    """重复推断结果一致"""
    rows = [{"a": i % 3, "b": f"t{i}", "c": "2024-01-01"} for i in range(50)]
    assert infer_columns(rows, ["a", "b", "c"]) == infer_columns(rows, ["a", "b", "c"])


def test_one_and_one_point_zero_are_same_value(profiler):
    """1 与 1.0 计为同一个唯一值"""
    profile = profiler.profile_column("n", [1, 1.0, 2])
    assert profile.unique_value_count == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
