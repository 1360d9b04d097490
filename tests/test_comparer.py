from __future__ import annotations

import threading
from pathlib import Path

import numpy as np
import pandas as pd
import pytest
from sklearn.tree import DecisionTreeClassifier

from clf_compare import (
    CANDIDATES, Candidate, ClassifierComparer, ComparisonConfig, Dataset, NotTrainedError,
    RetrainError, run_comparison,
)
from clf_compare import models


def test_iris_end_to_end(iris_dataset: Dataset) -> None:
    ticks = []
    comparer = ClassifierComparer()
    report = comparer.fit_compare(iris_dataset, progress=ticks.append)

    assert ticks == [10, 20, 30, 40, 50, 60, 70, 80, 90, 100]
    assert report.skipped == ("Naive Bayes (Original)",)
    assert len(report.results) == 9
    assert "Naive Bayes (Discretized)" in [r.name for r in report.results]
    assert all(0.0 <= r.accuracy <= 100.0 for r in report.results)
    assert all(r.correct <= r.total == 150 for r in report.results)

    assert report.best is not None
    assert report.best.accuracy >= 90.0
    assert comparer.is_trained
    assert comparer.best_algorithm_name == report.best_model_name
    assert comparer.trained_model is report.model
    assert report.best.accuracy == max(r.accuracy for r in report.results)

    counts = np.bincount(iris_dataset.y)
    label_index = int(np.argmax(counts))
    mean = iris_dataset.X[iris_dataset.y == label_index].mean(axis=0)
    assert comparer.predict(mean.tolist()) == iris_dataset.class_attribute.domain[label_index]


def test_fully_nominal_dataset_skips_only_discretized_naive_bayes(nominal_dataset: Dataset) -> None:
    comparer = ClassifierComparer()
    report = comparer.fit_compare(nominal_dataset)

    names = [r.name for r in report.results]
    assert report.skipped == ("Naive Bayes (Discretized)",)
    assert names[0] == "Naive Bayes (Original)"
    assert len(names) == 9
    assert all(r.total == 20 for r in report.results)
    assert comparer.is_trained


def test_mixed_dataset_runs_the_whole_grid(mixed_dataset: Dataset) -> None:
    report = ClassifierComparer().fit_compare(mixed_dataset)
    assert report.skipped == ()
    assert [r.name for r in report.results] == [c.name for c in CANDIDATES]


def test_runs_are_reproducible(nominal_dataset: Dataset) -> None:
    first = ClassifierComparer().fit_compare(nominal_dataset)
    second = ClassifierComparer().fit_compare(nominal_dataset)
    assert first.results == second.results
    assert first.best_model_name == second.best_model_name


def test_parallel_evaluation_matches_sequential(nominal_dataset: Dataset) -> None:
    sequential = ClassifierComparer().fit_compare(nominal_dataset)
    ticks = []
    parallel = ClassifierComparer(ComparisonConfig(n_jobs=2)).fit_compare(nominal_dataset, ticks.append)
    assert parallel.results == sequential.results
    assert ticks == sorted(ticks) and ticks[-1] == 100


def test_cancellation_keeps_previous_model(nominal_dataset: Dataset) -> None:
    comparer = ClassifierComparer()
    comparer.fit_compare(nominal_dataset)
    previous = comparer.trained_model

    cancel = threading.Event()

    def progress(percentage: int) -> None:
        if percentage >= 30:
            cancel.set()

    report = comparer.fit_compare(nominal_dataset, progress=progress, cancel=cancel)
    assert report.cancelled
    assert len(report.results) + len(report.skipped) == 3
    assert report.model is None
    assert comparer.trained_model is previous


def test_failing_progress_listener_does_not_abort(nominal_dataset: Dataset) -> None:
    def progress(percentage: int) -> None:
        raise RuntimeError("listener down")

    report = ClassifierComparer().fit_compare(nominal_dataset, progress=progress)
    assert len(report.results) == 9


def test_retrain_failure_propagates(iris_dataset: Dataset, monkeypatch) -> None:
    calls = []

    def flaky(dataset, random_state, **params):
        calls.append(dataset)
        if len(calls) > 1:
            raise RuntimeError("boom")
        return DecisionTreeClassifier(random_state=random_state)

    monkeypatch.setitem(models.ALGORITHMS, "flaky", flaky)
    comparer = ClassifierComparer(candidates=[Candidate("Flaky Tree", "flaky", "original")])
    with pytest.raises(RetrainError):
        comparer.fit_compare(iris_dataset)
    assert not comparer.is_trained


def test_no_successful_candidate_means_no_model(iris_dataset: Dataset) -> None:
    broken = Candidate("k-NN (K=500)", "k_nearest_neighbors", "original", {"n_neighbors": 500})
    comparer = ClassifierComparer(candidates=[broken])
    report = comparer.fit_compare(iris_dataset)
    assert report.best is None
    assert report.results[0].failed
    assert not comparer.is_trained
    with pytest.raises(NotTrainedError):
        comparer.predict([5.0, 3.4, 1.5, 0.2])


def test_report_records_are_json_safe(nominal_dataset: Dataset) -> None:
    report = ClassifierComparer().fit_compare(nominal_dataset)
    records = report.to_records()
    assert [r["algorithm"] for r in records] == [r.name for r in report.results]
    assert records[0]["representation"] == "original"
    assert all(isinstance(r["accuracy"], float) and isinstance(r["correct"], int) for r in records)


def test_run_comparison_from_csv(tmp_path: Path, iris_dataset: Dataset) -> None:
    path = tmp_path / "iris.csv"
    iris_dataset.to_frame().to_csv(path, index=False)
    ticks = []
    comparer = run_comparison(str(path), progress=ticks.append)
    assert ticks[-1] == 100
    assert comparer.is_trained
    assert len(comparer.results) == 9
    assert comparer.predict([5.0, 3.4, 1.5, 0.2]) == "setosa"
