"""Run the candidate grid, pick the winner and serve predictions."""

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Mapping, Optional, Sequence, Tuple

from joblib import Parallel, delayed

from .config import ComparisonConfig, EvaluationResult, ResultRecord, calculate_progress
from .dataset import Dataset, load_dataset
from .errors import NotTrainedError
from .evaluation import evaluate, refit, select_best
from .models import CANDIDATES, Candidate
from .prediction import TrainedModel
from .preprocessing import Representation, derive_representations
from .utils import results_to_records

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]


@dataclass(frozen=True)
class ComparisonReport:
    """Outcome of one full pass over the candidate grid."""
    results: Tuple[EvaluationResult, ...]
    best: Optional[EvaluationResult] = None
    model: Optional[TrainedModel] = field(default=None, repr=False)
    skipped: Tuple[str, ...] = ()
    cancelled: bool = False

    @property
    def best_model_name(self) -> Optional[str]:
        return self.best.name if self.best is not None else None

    def to_records(self) -> List[ResultRecord]:
        return results_to_records(self.results)


def _run_slot(candidate: Candidate, dataset: Dataset,
              representations: Mapping[str, Representation],
              config: ComparisonConfig) -> Optional[EvaluationResult]:
    if not candidate.is_applicable(dataset, representations):
        logger.info("Skipping %s: not applicable to this dataset", candidate.name)
        return None
    return evaluate(candidate, representations[candidate.representation], config)


def _notify(progress: Optional[ProgressCallback], percentage: int) -> None:
    if progress is None:
        return
    try:
        progress(percentage)
    except Exception as e:
        logger.warning("Progress listener failed at %d%%: %s", percentage, e)


class ClassifierComparer:
    """Compare the fixed candidate grid on a dataset and keep the best model.

    The active model is an immutable snapshot swapped in under a lock once a
    run completes, so predictions never observe a half-finished retraining.
    """

    def __init__(self, config: Optional[ComparisonConfig] = None,
                 candidates: Sequence[Candidate] = CANDIDATES):
        self.config = config or ComparisonConfig()
        self.candidates = tuple(candidates)
        self._lock = threading.Lock()
        self._results: Tuple[EvaluationResult, ...] = ()
        self._model: Optional[TrainedModel] = None

    @property
    def results(self) -> List[EvaluationResult]:
        return list(self._results)

    @property
    def trained_model(self) -> Optional[TrainedModel]:
        return self._model

    @property
    def is_trained(self) -> bool:
        return self._model is not None

    @property
    def best_algorithm_name(self) -> Optional[str]:
        model = self._model
        return model.name if model is not None else None

    def fit_compare(self, dataset: Dataset, progress: Optional[ProgressCallback] = None,
                    cancel: Optional[threading.Event] = None) -> ComparisonReport:
        """Evaluate every applicable candidate, then retrain the winner.

        ``progress`` receives an integer percentage after each grid slot,
        skipped slots included, ending at 100. ``cancel`` is checked between
        slots; a cancelled run keeps the previous model.

        Raises:
            RetrainError: If the winner cannot be refit on the full dataset.
        """
        logger.info(
            "Starting comparison on %s: %d instances, %d candidates",
            dataset.relation, dataset.n_instances, len(self.candidates),
        )
        representations = derive_representations(dataset, self.config.n_bins)

        results: List[EvaluationResult] = []
        skipped: List[str] = []
        total = len(self.candidates)
        cancelled = False

        slots = self._iter_slots(dataset, representations)
        for step, candidate in enumerate(self.candidates, start=1):
            if cancel is not None and cancel.is_set():
                logger.warning("Comparison cancelled after %d of %d candidates", step - 1, total)
                cancelled = True
                break
            outcome = next(slots)
            if outcome is None:
                skipped.append(candidate.name)
            else:
                results.append(outcome)
            _notify(progress, calculate_progress(step, total))

        if cancelled:
            return ComparisonReport(tuple(results), skipped=tuple(skipped), cancelled=True)

        best = select_best(results)
        model = None
        if best is None:
            logger.warning("No candidate was evaluated successfully; nothing to train")
        else:
            logger.info("Best algorithm: %s", best)
            model = refit(best, representations[best.candidate.representation], self.config)

        with self._lock:
            self._results = tuple(results)
            self._model = model
        return ComparisonReport(tuple(results), best, model, tuple(skipped))

    def _iter_slots(self, dataset: Dataset,
                    representations: Mapping[str, Representation]) -> Iterator[Optional[EvaluationResult]]:
        """Outcomes in registry order; None for skipped slots."""
        if self.config.n_jobs == 1:
            return (_run_slot(candidate, dataset, representations, self.config)
                    for candidate in self.candidates)
        return iter(Parallel(n_jobs=self.config.n_jobs, prefer="threads", return_as="generator")(
            delayed(_run_slot)(candidate, dataset, representations, self.config)
            for candidate in self.candidates
        ))

    def predict(self, values: Sequence[float]) -> str:
        """Predict with the active model; see ``TrainedModel.predict``.

        Raises:
            NotTrainedError: If no comparison run has produced a model yet.
        """
        model = self._model
        if model is None:
            raise NotTrainedError("Model is not trained yet. Please run classification first.")
        return model.predict(values)


def run_comparison(path: str, class_column: Optional[str] = None,
                   progress: Optional[ProgressCallback] = None,
                   config: Optional[ComparisonConfig] = None) -> ClassifierComparer:
    """Load a dataset file and run the full comparison on it."""
    dataset = load_dataset(path, class_column)
    comparer = ClassifierComparer(config)
    comparer.fit_compare(dataset, progress)
    return comparer


# ---------------------------------------------------------------------------
# Features implemented in this module
# - ClassifierComparer: grid evaluation, progress ticks, cancellation
# - Optional joblib thread pool with ordered single-writer aggregation
# - Locked swap of the immutable results/model snapshot
# - run_comparison convenience entry point from a dataset file
# ---------------------------------------------------------------------------
