"""Trained winner and single-record prediction."""

import math
from dataclasses import dataclass
from numbers import Real
from typing import TYPE_CHECKING, Any, Optional, Sequence

import numpy as np
from sklearn.pipeline import Pipeline

from .dataset import Attribute
from .errors import InvalidValueError, SchemaMismatchError
from .preprocessing import Representation

if TYPE_CHECKING:
    from .config import EvaluationResult
    from .models import Candidate


@dataclass(frozen=True, eq=False)
class TrainedModel:
    """Immutable snapshot of the refit winner and the representation it was fit on."""
    candidate: "Candidate"
    representation: Representation
    estimator: Pipeline
    result: Optional["EvaluationResult"] = None

    @property
    def name(self) -> str:
        return self.candidate.name

    @property
    def input_attributes(self) -> Sequence[Attribute]:
        """Non-class attributes of the original schema, in input order."""
        return self.representation.source.feature_attributes

    def predict(self, values: Sequence[Any]) -> str:
        """Predict the class label for one record.

        ``values`` holds one entry per non-class attribute of the original
        schema, in order: numbers for numeric attributes and domain indices
        for nominal ones. ``None`` or NaN marks a missing value.

        Raises:
            SchemaMismatchError: If the number of values is wrong.
            InvalidValueError: If a value is not numeric or not a valid index.
        """
        source = self.representation.source
        values = list(values)
        if len(values) != len(source.feature_indices):
            raise SchemaMismatchError(
                f"Expected {len(source.feature_indices)} attribute values, got {len(values)}"
            )

        row = np.full(source.n_attributes, np.nan)
        for index, value in zip(source.feature_indices, values):
            row[index] = _coerce(source.attributes[index], value)

        encoded = self.representation.encode(row)
        features = np.delete(encoded, self.representation.dataset.class_index, axis=1)
        label_index = int(self.estimator.predict(features)[0])
        return source.class_attribute.domain[label_index]


def _coerce(attribute: Attribute, value: Any) -> float:
    if value is None:
        return math.nan
    if isinstance(value, bool) or not isinstance(value, (Real, np.number)):
        raise InvalidValueError(
            f"Value for attribute '{attribute.name}' must be numeric, got {value!r}"
        )
    number = float(value)
    if math.isnan(number):
        return number
    if attribute.is_nominal:
        if not number.is_integer() or not 0 <= number < len(attribute.domain):
            raise InvalidValueError(
                f"'{value}' is not a valid index for attribute '{attribute.name}' "
                f"(expected 0..{len(attribute.domain) - 1})"
            )
    elif math.isinf(number):
        raise InvalidValueError(f"Value for attribute '{attribute.name}' must be finite")
    return number


# ---------------------------------------------------------------------------
# Features implemented in this module
# - TrainedModel: frozen winner, estimator and representation snapshot
# - predict: validate, re-encode through the training steps, map to label
# ---------------------------------------------------------------------------
