from __future__ import annotations

import math

import numpy as np
import pytest

from clf_compare import (
    CANDIDATES, ClassifierComparer, Dataset, InvalidValueError, NotTrainedError,
    SchemaMismatchError, derive_representations, evaluate, refit,
)


def _trained(dataset: Dataset, index: int):
    candidate = CANDIDATES[index]
    representation = derive_representations(dataset)[candidate.representation]
    return refit(evaluate(candidate, representation), representation)


def _class_mean(dataset: Dataset, label: str) -> list:
    rows = dataset.X[dataset.y == dataset.class_attribute.index_of(label)]
    return rows.mean(axis=0).tolist()


def test_predict_before_training_raises() -> None:
    with pytest.raises(NotTrainedError):
        ClassifierComparer().predict([1.0, 2.0, 3.0, 4.0])


def test_predict_re_encodes_raw_values_through_normalization(iris_dataset: Dataset) -> None:
    model = _trained(iris_dataset, 5)
    assert model.representation.name == "numeric-normalized"
    for label in iris_dataset.class_attribute.domain:
        assert model.predict(_class_mean(iris_dataset, label)) == label


def test_predict_re_encodes_raw_values_through_discretization(iris_dataset: Dataset) -> None:
    model = _trained(iris_dataset, 1)
    assert model.representation.name == "discretized"
    assert model.predict(_class_mean(iris_dataset, "setosa")) == "setosa"
    assert model.predict(_class_mean(iris_dataset, "virginica")) == "virginica"


def test_predict_with_nominal_indices(nominal_dataset: Dataset) -> None:
    model = _trained(nominal_dataset, 0)
    outlook = nominal_dataset.attributes[0]
    windy = nominal_dataset.attributes[1]
    humidity = nominal_dataset.attributes[2]
    values = [outlook.index_of("overcast"), windy.index_of("no"), humidity.index_of("normal")]
    assert model.predict(values) == "yes"


def test_predict_rejects_wrong_length(iris_dataset: Dataset) -> None:
    model = _trained(iris_dataset, 2)
    with pytest.raises(SchemaMismatchError):
        model.predict([1.0, 2.0, 3.0])
    with pytest.raises(SchemaMismatchError):
        model.predict([1.0, 2.0, 3.0, 4.0, 5.0])


def test_predict_rejects_malformed_values(nominal_dataset: Dataset, iris_dataset: Dataset) -> None:
    nominal_model = _trained(nominal_dataset, 2)
    with pytest.raises(InvalidValueError):
        nominal_model.predict([5, 0, 0])
    with pytest.raises(InvalidValueError):
        nominal_model.predict([0.5, 0, 0])

    numeric_model = _trained(iris_dataset, 2)
    with pytest.raises(InvalidValueError):
        numeric_model.predict(["wide", 1.0, 1.0, 1.0])
    with pytest.raises(InvalidValueError):
        numeric_model.predict([math.inf, 1.0, 1.0, 1.0])


def test_predict_accepts_missing_values(iris_dataset: Dataset) -> None:
    model = _trained(iris_dataset, 7)
    mean = _class_mean(iris_dataset, "setosa")
    mean[0] = None
    mean[1] = np.nan
    assert model.predict(mean) in iris_dataset.class_attribute.domain


def test_input_attributes_follow_original_schema(mixed_dataset: Dataset) -> None:
    model = _trained(mixed_dataset, 9)
    assert [a.name for a in model.input_attributes] == ["num1", "num2", "cat"]
    assert model.representation.dataset.n_attributes == 6
