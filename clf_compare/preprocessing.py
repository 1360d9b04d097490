"""Derived data representations.

Each representation is produced by fitted transformers that map rows of the
original schema onto the representation's schema. The same transformers are
kept with the representation so prediction inputs can be encoded exactly the
way the training data was.
"""

import logging
import warnings
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from sklearn.base import BaseEstimator, TransformerMixin
from sklearn.preprocessing import KBinsDiscretizer, MinMaxScaler, OneHotEncoder

from .dataset import NOMINAL, NUMERIC, Attribute, Dataset
from .errors import RepresentationError

logger = logging.getLogger(__name__)

ORIGINAL = "original"
DISCRETIZED = "discretized"
BINARIZED = "binarized"
NORMALIZED = "normalized"
NUMERIC_NORMALIZED = "numeric-normalized"


class _SchemaTransformer(TransformerMixin, BaseEstimator):
    """Transformer over full rows (class column included) of a known schema."""

    def __init__(self, attributes: Sequence[Attribute] = (), class_index: int = -1):
        self.attributes = attributes
        self.class_index = class_index

    def _targets(self, kind: str) -> List[int]:
        return [
            j for j, attribute in enumerate(self.attributes)
            if j != self.class_index and attribute.kind == kind
        ]


class Discretizer(_SchemaTransformer):
    """Equal-width binning of every numeric non-class attribute."""

    def __init__(self, attributes: Sequence[Attribute] = (), class_index: int = -1, n_bins: int = 10):
        super().__init__(attributes, class_index)
        self.n_bins = n_bins

    def fit(self, X, y=None):
        X = np.asarray(X, dtype=float)
        targets = self._targets(NUMERIC)
        if not targets:
            raise RepresentationError("No numeric attributes to discretize")

        self.binners_: Dict[int, Optional[KBinsDiscretizer]] = {}
        attributes = list(self.attributes)
        for j in targets:
            observed = X[:, j][~np.isnan(X[:, j])]
            if observed.size == 0:
                self.binners_[j] = None
                attributes[j] = Attribute(attributes[j].name, NOMINAL, ("All",))
                continue
            with warnings.catch_warnings():
                warnings.simplefilter("ignore")
                binner = KBinsDiscretizer(n_bins=self.n_bins, encode="ordinal", strategy="uniform")
                binner.fit(observed.reshape(-1, 1))
            self.binners_[j] = binner
            attributes[j] = Attribute(attributes[j].name, NOMINAL, _bin_labels(binner.bin_edges_[0]))

        self.attributes_out_ = tuple(attributes)
        self.class_index_out_ = self.class_index
        return self

    def transform(self, X):
        X = np.asarray(X, dtype=float)
        out = X.copy()
        for j, binner in self.binners_.items():
            present = ~np.isnan(X[:, j])
            if binner is None:
                out[present, j] = 0.0
            elif present.any():
                out[present, j] = binner.transform(X[present, j].reshape(-1, 1))[:, 0]
        return out


def _bin_labels(edges: np.ndarray) -> Tuple[str, ...]:
    cuts = [float(edge) for edge in edges[1:-1]]
    if not cuts:
        return ("All",)
    labels = [f"(-inf-{cuts[0]:g})"]
    labels += [f"[{low:g}-{high:g})" for low, high in zip(cuts, cuts[1:])]
    labels.append(f"[{cuts[-1]:g}-inf)")
    # Cut points closer than the label precision still need distinct labels.
    seen: Dict[str, int] = {}
    unique = []
    for label in labels:
        seen[label] = seen.get(label, 0) + 1
        unique.append(label if seen[label] == 1 else f"{label}#{seen[label]}")
    return tuple(unique)


class NominalBinarizer(_SchemaTransformer):
    """One indicator column per domain value of each nominal non-class attribute."""

    def fit(self, X, y=None):
        self.encoders_: Dict[int, OneHotEncoder] = {}
        attributes: List[Attribute] = []
        class_index_out = self.class_index
        for j, attribute in enumerate(self.attributes):
            if j == self.class_index or attribute.is_numeric:
                attributes.append(attribute)
                continue
            codes = np.arange(len(attribute.domain), dtype=float)
            encoder = OneHotEncoder(categories=[codes], handle_unknown="ignore",
                                    sparse_output=False, dtype=float)
            self.encoders_[j] = encoder.fit(codes.reshape(-1, 1))
            attributes.extend(Attribute(f"{attribute.name}={label}", NUMERIC) for label in attribute.domain)
            if j < self.class_index:
                class_index_out += len(attribute.domain) - 1

        self.attributes_out_ = tuple(attributes)
        self.class_index_out_ = class_index_out
        return self

    def transform(self, X):
        X = np.asarray(X, dtype=float)
        blocks = []
        for j in range(X.shape[1]):
            encoder = self.encoders_.get(j)
            if encoder is None:
                blocks.append(X[:, [j]])
                continue
            missing = np.isnan(X[:, j])
            indicators = encoder.transform(np.where(missing, 0.0, X[:, j]).reshape(-1, 1))
            indicators[missing] = np.nan
            blocks.append(indicators)
        return np.hstack(blocks) if blocks else X.copy()


class RangeNormalizer(_SchemaTransformer):
    """Rescale every non-class attribute to [0, 1] from the fitted min/max.

    Constant (or entirely missing) columns map every present value to 0.
    """

    def fit(self, X, y=None):
        X = np.asarray(X, dtype=float)
        nominal = self._targets(NOMINAL)
        if nominal:
            names = ", ".join(self.attributes[j].name for j in nominal)
            raise RepresentationError(f"Normalization requires numeric attributes, found nominal: {names}")

        self.targets_ = self._targets(NUMERIC)
        self.scaler_ = None
        self.degenerate_ = np.zeros(len(self.targets_), dtype=bool)
        if self.targets_:
            with warnings.catch_warnings():
                warnings.simplefilter("ignore")
                self.scaler_ = MinMaxScaler().fit(X[:, self.targets_])
            self.degenerate_ = ~(self.scaler_.data_max_ > self.scaler_.data_min_)

        self.attributes_out_ = tuple(self.attributes)
        self.class_index_out_ = self.class_index
        return self

    def transform(self, X):
        X = np.asarray(X, dtype=float)
        out = X.copy()
        if self.scaler_ is None:
            return out
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            scaled = self.scaler_.transform(X[:, self.targets_])
        constant = np.where(np.isnan(X[:, self.targets_]), np.nan, 0.0)
        scaled[:, self.degenerate_] = constant[:, self.degenerate_]
        out[:, self.targets_] = scaled
        return out


@dataclass(frozen=True, eq=False)
class Representation:
    """A derived dataset plus the fitted steps that produced it from the source."""
    name: str
    dataset: Dataset
    source: Dataset
    steps: Tuple[Tuple[str, _SchemaTransformer], ...] = ()

    def encode(self, values: np.ndarray) -> np.ndarray:
        """Map full rows of the source schema onto this representation's schema."""
        values = np.atleast_2d(np.asarray(values, dtype=float))
        if values.shape[1] != self.source.n_attributes:
            raise ValueError(
                f"Expected rows with {self.source.n_attributes} values, got {values.shape[1]}"
            )
        for _, step in self.steps:
            values = step.transform(values)
        return values

    def then(self, name: str, step_name: str, transformer: _SchemaTransformer) -> "Representation":
        """Fit one more step on this representation's data and chain it."""
        data = self.dataset
        transformer.fit(data.values)
        derived = data.derive(transformer.attributes_out_, transformer.transform(data.values),
                              transformer.class_index_out_, step_name)
        return Representation(name, derived, self.source, self.steps + ((step_name, transformer),))


def original(dataset: Dataset) -> Representation:
    return Representation(ORIGINAL, dataset, dataset)


def discretize(dataset: Dataset, n_bins: int = 10) -> Representation:
    """Bin numeric attributes; fails when there is nothing numeric to bin."""
    return original(dataset).then(
        DISCRETIZED, "discretize", Discretizer(dataset.attributes, dataset.class_index, n_bins)
    )


def binarize(dataset: Dataset) -> Representation:
    """Expand nominal attributes to indicators; pass-through when there are none."""
    return original(dataset).then(
        BINARIZED, "binarize", NominalBinarizer(dataset.attributes, dataset.class_index)
    )


def normalize(dataset: Dataset) -> Representation:
    return original(dataset).then(
        NORMALIZED, "normalize", RangeNormalizer(dataset.attributes, dataset.class_index)
    )


def to_numeric_normalized(dataset: Dataset) -> Representation:
    """normalize(binarize(dataset)), keeping both fitted steps."""
    binarized = binarize(dataset)
    data = binarized.dataset
    return binarized.then(
        NUMERIC_NORMALIZED, "normalize", RangeNormalizer(data.attributes, data.class_index)
    )


def derive_representations(dataset: Dataset, n_bins: int = 10) -> Dict[str, Representation]:
    """Build every representation that applies; failures leave it absent."""
    representations = {ORIGINAL: original(dataset)}
    for name, build in ((DISCRETIZED, lambda: discretize(dataset, n_bins)),
                        (NUMERIC_NORMALIZED, lambda: to_numeric_normalized(dataset))):
        try:
            representations[name] = build()
        except (RepresentationError, ValueError) as e:
            logger.warning("Could not create %s data: %s", name, e)
    return representations


# ---------------------------------------------------------------------------
# Features implemented in this module
# - Discretizer: KBinsDiscretizer equal-width bins with interval labels
# - NominalBinarizer: OneHotEncoder indicators, missing stays missing
# - RangeNormalizer: MinMaxScaler to [0, 1], constant columns map to 0
# - Representation: derived dataset plus the fitted steps to re-encode rows
# - derive_representations: original, discretized and numeric-normalized
# ---------------------------------------------------------------------------
