"""Cross-validated scoring of candidates and winner selection."""

import logging
import warnings
from typing import Iterable, Optional

import numpy as np
from sklearn.model_selection import KFold, StratifiedKFold, cross_val_predict

from .config import ComparisonConfig, EvaluationResult
from .errors import RetrainError
from .models import Candidate
from .prediction import TrainedModel
from .preprocessing import Representation

logger = logging.getLogger(__name__)


def make_folds(y: np.ndarray, n_folds: int, random_state: int):
    """Shuffled stratified folds, or plain folds when no class can fill every fold."""
    counts = np.bincount(np.asarray(y, dtype=int)) if len(y) else np.array([0])
    if counts.max() >= n_folds:
        return StratifiedKFold(n_splits=n_folds, shuffle=True, random_state=random_state)
    return KFold(n_splits=n_folds, shuffle=True, random_state=random_state)


def evaluate(candidate: Candidate, representation: Representation,
             config: Optional[ComparisonConfig] = None) -> EvaluationResult:
    """Score one candidate with k-fold cross-validation.

    Any failure while fitting or scoring is contained: it is logged and turned
    into a zero-accuracy result so the rest of the grid still runs.
    """
    config = config or ComparisonConfig()
    dataset = representation.dataset
    total = dataset.n_instances

    try:
        estimator = candidate.build(dataset, config.random_state)
        y = dataset.y
        folds = make_folds(y, config.n_folds, config.random_state)
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            predictions = cross_val_predict(estimator, dataset.X, y, cv=folds)
        correct = int(np.sum(predictions == y))
    except Exception as e:
        logger.error("Error running %s: %s", candidate.name, e)
        return EvaluationResult(candidate.name, 0.0, 0, total, candidate=candidate, error=str(e))

    result = EvaluationResult(candidate.name, 100.0 * correct / total, correct, total, candidate=candidate)
    logger.info("%s", result)
    return result


def select_best(results: Iterable[EvaluationResult]) -> Optional[EvaluationResult]:
    """First result with the highest accuracy; failed evaluations never win."""
    best = None
    for result in results:
        if result.failed:
            continue
        if best is None or result.accuracy > best.accuracy:
            best = result
    return best


def refit(result: EvaluationResult, representation: Representation,
          config: Optional[ComparisonConfig] = None) -> TrainedModel:
    """Rebuild the winning candidate and fit it on the whole representation.

    Raises:
        RetrainError: If the candidate cannot be rebuilt or fit, even though
            it was scored successfully.
    """
    config = config or ComparisonConfig()
    candidate = result.candidate
    if candidate is None:
        raise RetrainError(f"Result '{result.name}' carries no candidate to rebuild")

    dataset = representation.dataset
    try:
        estimator = candidate.build(dataset, config.random_state)
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            estimator.fit(dataset.X, dataset.y)
    except Exception as e:
        raise RetrainError(f"Could not retrain {candidate.name} on the full dataset: {e}") from e

    logger.info("Trained %s on %d instances", candidate.name, dataset.n_instances)
    return TrainedModel(candidate=candidate, representation=representation,
                        estimator=estimator, result=result)


# ---------------------------------------------------------------------------
# Features implemented in this module
# - Seeded k-fold cross-validation with per-candidate failure containment
# - Winner selection with earliest-registered tie-break
# - Full-data refit of the winner with RetrainError on inconsistency
# ---------------------------------------------------------------------------
