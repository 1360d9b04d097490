"""Algorithm families and the fixed candidate grid.

Every candidate pairs an algorithm family with the representation it is
trained on. ``build_estimator`` returns a fresh, unfit sklearn pipeline each
time it is called, so no fit state is shared between runs or folds.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

import numpy as np
from sklearn.base import BaseEstimator, ClassifierMixin, TransformerMixin
from sklearn.ensemble import RandomForestClassifier
from sklearn.impute import SimpleImputer
from sklearn.linear_model import LogisticRegression
from sklearn.naive_bayes import CategoricalNB, GaussianNB
from sklearn.neighbors import KNeighborsClassifier
from sklearn.neural_network import MLPClassifier
from sklearn.pipeline import Pipeline
from sklearn.svm import SVC
from sklearn.tree import DecisionTreeClassifier

from .dataset import Dataset
from .preprocessing import DISCRETIZED, NUMERIC_NORMALIZED, ORIGINAL, Representation


class AttributeImputer(TransformerMixin, BaseEstimator):
    """Fill missing values with the mean (numeric) or mode (nominal), in place."""

    def __init__(self, nominal_mask: Sequence[bool] = ()):
        self.nominal_mask = nominal_mask

    def fit(self, X, y=None):
        X = np.asarray(X, dtype=float)
        mask = _column_mask(self.nominal_mask, X.shape[1])
        self.numeric_ = None
        self.nominal_ = None
        if (~mask).any():
            self.numeric_ = SimpleImputer(strategy="mean", keep_empty_features=True).fit(X[:, ~mask])
        if mask.any():
            self.nominal_ = SimpleImputer(strategy="most_frequent", keep_empty_features=True).fit(X[:, mask])
        return self

    def transform(self, X):
        X = np.asarray(X, dtype=float)
        mask = _column_mask(self.nominal_mask, X.shape[1])
        out = X.copy()
        if self.numeric_ is not None:
            out[:, ~mask] = self.numeric_.transform(X[:, ~mask])
        if self.nominal_ is not None:
            out[:, mask] = self.nominal_.transform(X[:, mask])
        return out


class NaiveBayes(ClassifierMixin, BaseEstimator):
    """Naive Bayes over mixed attributes.

    Nominal columns use categorical likelihoods with Laplace smoothing and
    numeric columns use per-class Gaussians; the class prior is counted once.
    """

    def __init__(self, nominal_mask: Sequence[bool] = (), category_counts: Sequence[int] = ()):
        self.nominal_mask = nominal_mask
        self.category_counts = category_counts

    def fit(self, X, y):
        X = np.asarray(X, dtype=float)
        y = np.asarray(y)
        self.mask_ = _column_mask(self.nominal_mask, X.shape[1])
        self.classes_, counts = np.unique(y, return_counts=True)
        self.class_log_prior_ = np.log(counts / counts.sum())

        self.categorical_ = None
        self.gaussian_ = None
        if self.mask_.any():
            min_categories = np.asarray(self.category_counts, dtype=int)[self.mask_]
            self.categorical_ = CategoricalNB(alpha=1.0, min_categories=min_categories)
            self.categorical_.fit(X[:, self.mask_].astype(int), y)
        if (~self.mask_).any():
            self.gaussian_ = GaussianNB().fit(X[:, ~self.mask_], y)
        return self

    def _joint_log_likelihood(self, X):
        X = np.asarray(X, dtype=float)
        jll = np.tile(self.class_log_prior_, (X.shape[0], 1))
        if self.categorical_ is not None:
            part = self.categorical_.predict_joint_log_proba(X[:, self.mask_].astype(int))
            jll += part - self.categorical_.class_log_prior_
        if self.gaussian_ is not None:
            part = self.gaussian_.predict_joint_log_proba(X[:, ~self.mask_])
            jll += part - np.log(self.gaussian_.class_prior_)
        return jll

    def predict(self, X):
        return self.classes_[np.argmax(self._joint_log_likelihood(X), axis=1)]


def _column_mask(mask: Sequence[bool], n_columns: int) -> np.ndarray:
    mask = np.asarray(mask, dtype=bool)
    if mask.size != n_columns:
        return np.zeros(n_columns, dtype=bool)
    return mask


# Factories take the representation dataset the estimator will be fit on,
# the seed, and the candidate's fixed settings.

def _naive_bayes(dataset: Dataset, random_state: int, **params: Any) -> NaiveBayes:
    counts = tuple(len(a.domain) if a.is_nominal else 0 for a in dataset.feature_attributes)
    return NaiveBayes(nominal_mask=dataset.nominal_mask, category_counts=counts)


def _decision_tree(dataset: Dataset, random_state: int, **params: Any) -> DecisionTreeClassifier:
    return DecisionTreeClassifier(random_state=random_state, **params)


def _random_forest(dataset: Dataset, random_state: int, **params: Any) -> RandomForestClassifier:
    return RandomForestClassifier(random_state=random_state, **params)


def _random_tree(dataset: Dataset, random_state: int, **params: Any) -> DecisionTreeClassifier:
    n_features = max(1, len(dataset.feature_indices))
    max_features = min(n_features, int(math.log2(n_features)) + 1)
    return DecisionTreeClassifier(max_features=max_features, random_state=random_state, **params)


def _k_nearest(dataset: Dataset, random_state: int, **params: Any) -> KNeighborsClassifier:
    return KNeighborsClassifier(**params)


def _logistic(dataset: Dataset, random_state: int, **params: Any) -> LogisticRegression:
    return LogisticRegression(random_state=random_state, **params)


def _perceptron(dataset: Dataset, random_state: int, hidden_layers: str = "auto",
                **params: Any) -> MLPClassifier:
    if hidden_layers == "auto":
        width = max(1, (len(dataset.feature_indices) + dataset.n_classes) // 2)
        sizes: Tuple[int, ...] = (width,)
    else:
        sizes = tuple(int(size) for size in hidden_layers.split(","))
    return MLPClassifier(hidden_layer_sizes=sizes, random_state=random_state, **params)


def _svm(dataset: Dataset, random_state: int, **params: Any) -> SVC:
    return SVC(random_state=random_state, **params)


ALGORITHMS: Dict[str, Callable[..., BaseEstimator]] = {
    "naive_bayes": _naive_bayes,
    "decision_tree": _decision_tree,
    "random_forest": _random_forest,
    "random_tree": _random_tree,
    "k_nearest_neighbors": _k_nearest,
    "logistic_regression": _logistic,
    "multilayer_perceptron": _perceptron,
    "svm": _svm,
}


def _has_nominal_features(dataset: Dataset) -> bool:
    return dataset.has_nominal_attributes()


@dataclass(frozen=True)
class Candidate:
    """One fixed (algorithm, representation, settings) configuration."""
    name: str
    algorithm: str
    representation: str
    params: Mapping[str, Any] = field(default_factory=dict, compare=False)
    requires: Optional[Callable[[Dataset], bool]] = field(default=None, compare=False)

    def is_applicable(self, dataset: Dataset, representations: Mapping[str, Representation]) -> bool:
        """The representation must exist and the dataset must satisfy ``requires``."""
        if self.representation not in representations:
            return False
        return self.requires is None or bool(self.requires(dataset))

    def build(self, dataset: Dataset, random_state: int) -> Pipeline:
        return build_estimator(self, dataset, random_state)


def build_estimator(candidate: Candidate, dataset: Dataset, random_state: int) -> Pipeline:
    """Fresh, unfit imputer + model pipeline for the given representation."""
    factory = ALGORITHMS[candidate.algorithm]
    model = factory(dataset, random_state, **dict(candidate.params))
    return Pipeline([
        ("imputer", AttributeImputer(nominal_mask=dataset.nominal_mask)),
        ("model", model),
    ])


CANDIDATES: Tuple[Candidate, ...] = (
    Candidate("Naive Bayes (Original)", "naive_bayes", ORIGINAL, requires=_has_nominal_features),
    Candidate("Naive Bayes (Discretized)", "naive_bayes", DISCRETIZED),
    Candidate("Decision Tree (Original)", "decision_tree", ORIGINAL, {"min_samples_leaf": 2}),
    Candidate("Random Forest (Original)", "random_forest", ORIGINAL, {"n_estimators": 100}),
    Candidate("Random Tree (Original)", "random_tree", ORIGINAL),
    Candidate("k-NN (K=3, Normalized)", "k_nearest_neighbors", NUMERIC_NORMALIZED, {"n_neighbors": 3}),
    Candidate("k-NN (K=5, Normalized)", "k_nearest_neighbors", NUMERIC_NORMALIZED, {"n_neighbors": 5}),
    Candidate("Logistic Regression (Normalized)", "logistic_regression", NUMERIC_NORMALIZED,
              {"max_iter": 1000}),
    Candidate("Multilayer Perceptron (Normalized)", "multilayer_perceptron", NUMERIC_NORMALIZED, {
        "hidden_layers": "auto",
        "solver": "sgd",
        "activation": "logistic",
        "learning_rate_init": 0.3,
        "momentum": 0.2,
        "nesterovs_momentum": False,
        "max_iter": 500,
    }),
    Candidate("SVM (Normalized)", "svm", NUMERIC_NORMALIZED, {"kernel": "linear", "C": 1.0}),
)


# ---------------------------------------------------------------------------
# Features implemented in this module
# - AttributeImputer: mean/mode imputation that keeps column order
# - NaiveBayes: categorical + Gaussian likelihoods for mixed attributes
# - Algorithm factories resolving data-dependent settings (MLP width, K)
# - Candidate registry in fixed evaluation order with applicability gates
# ---------------------------------------------------------------------------
