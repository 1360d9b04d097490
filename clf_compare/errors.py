"""Exception types raised by the comparison pipeline."""


class ComparisonError(Exception):
    """Base class for all errors raised by clf_compare."""


class DataLoadError(ComparisonError, ValueError):
    """The data source could not be read or parsed."""


class RepresentationError(ComparisonError, ValueError):
    """A derived representation cannot be built from the given dataset."""


class RetrainError(ComparisonError, RuntimeError):
    """The winning candidate could not be refit on the full dataset."""


class NotTrainedError(ComparisonError, RuntimeError):
    """Prediction was requested before any successful comparison run."""


class PredictionError(ComparisonError, ValueError):
    """Base class for per-call prediction input errors."""


class SchemaMismatchError(PredictionError):
    """The input vector does not match the trained schema."""


class InvalidValueError(PredictionError):
    """An input value cannot be used for the attribute it was given for."""
