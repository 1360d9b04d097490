from __future__ import annotations

import pytest

from clf_compare import ComparisonConfig, EvaluationResult, calculate_progress


def test_defaults() -> None:
    config = ComparisonConfig()
    assert (config.n_folds, config.random_state, config.n_bins, config.n_jobs) == (10, 1, 10, 1)


@pytest.mark.parametrize("kwargs", [{"n_folds": 1}, {"n_bins": 0}, {"n_jobs": 0}])
def test_invalid_config(kwargs) -> None:
    with pytest.raises(ValueError):
        ComparisonConfig(**kwargs)


def test_calculate_progress() -> None:
    assert [calculate_progress(i, 10) for i in range(11)] == list(range(0, 101, 10))
    assert calculate_progress(1, 3) == 33
    assert calculate_progress(3, 3) == 100
    assert calculate_progress(5, 0) == 100


def test_result_summary_line() -> None:
    result = EvaluationResult("SVM (Normalized)", 96.0, 144, 150)
    assert str(result) == "SVM (Normalized): 96.00% (144/150)"
    assert not result.failed
    assert EvaluationResult("x", 0.0, 0, 150, error="boom").failed
