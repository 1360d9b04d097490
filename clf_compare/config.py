"""Configuration and typed result structures for classifier comparison."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, TypedDict

if TYPE_CHECKING:
    from .models import Candidate


@dataclass
class ComparisonConfig:
    """Configuration object for candidate evaluation and selection."""
    n_folds: int = 10
    random_state: int = 1
    n_bins: int = 10
    n_jobs: int = 1

    def __post_init__(self) -> None:
        if self.n_folds < 2:
            raise ValueError(f"n_folds must be at least 2, got {self.n_folds}")
        if self.n_bins < 1:
            raise ValueError(f"n_bins must be at least 1, got {self.n_bins}")
        if self.n_jobs == 0:
            raise ValueError("n_jobs must be a positive number or -1")


@dataclass(frozen=True)
class EvaluationResult:
    """Cross-validated score of one candidate."""
    name: str
    accuracy: float
    correct: int
    total: int
    candidate: Optional["Candidate"] = field(default=None, compare=False, repr=False)
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    def __str__(self) -> str:
        return f"{self.name}: {self.accuracy:.2f}% ({self.correct}/{self.total})"


class ResultRecord(TypedDict, total=False):
    """JSON-friendly view of an EvaluationResult."""
    algorithm: str
    accuracy: float
    correct: int
    total: int
    representation: str
    error: Optional[str]


def calculate_progress(current: int, total: int) -> int:
    """Percentage of grid slots processed, truncated to an integer."""
    if total <= 0:
        return 100
    current = max(0, min(current, total))
    return current * 100 // total


# ---------------------------------------------------------------------------
# Features implemented in this module
# - ComparisonConfig dataclass for fold count, seed, bin count and workers
# - EvaluationResult value object with a one-line accuracy summary
# - ResultRecord typed dictionary for result consumers
# - Integer progress percentage for fixed-size evaluation grids
# ---------------------------------------------------------------------------
