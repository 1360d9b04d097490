from __future__ import annotations

import json

import numpy as np

from clf_compare import Dataset, describe_dataset, input_fields, safe_json_convert


def test_describe_dataset(mixed_dataset: Dataset) -> None:
    stats = describe_dataset(mixed_dataset)
    assert stats["rows"] == 120
    assert stats["class_attribute"] == "target"
    assert stats["numerics"] == ["num1", "num2"]
    assert stats["nominals"] == ["cat"]
    assert stats["missing"]["num1"] == 1
    assert sum(stats["class_distribution"].values()) == 120
    assert 0 < stats["data_completeness"] < 100
    json.dumps(stats)


def test_input_fields_follow_attribute_order(nominal_dataset: Dataset, iris_dataset: Dataset) -> None:
    fields = input_fields(nominal_dataset)
    assert [f["name"] for f in fields] == ["outlook", "windy", "humidity"]
    assert fields[0]["values"] == ["overcast", "rainy", "sunny"]
    assert fields[0]["samples"] == ["sunny", "overcast", "rainy"]

    numeric = input_fields(iris_dataset, max_samples=2)
    assert numeric[0]["kind"] == "numeric"
    assert numeric[0]["values"] == []
    assert numeric[0]["samples"] == ["5.10", "4.90"]


def test_safe_json_convert() -> None:
    converted = safe_json_convert({"a": np.int64(3), "b": np.float64("nan"), "c": np.array([1.5, 2.0]), 4: b"x"})
    assert converted == {"a": 3, "b": None, "c": [1.5, 2.0], "4": "x"}
