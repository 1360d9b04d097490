"""
Classifier comparison for labeled tabular data.
Scores a fixed grid of algorithm/representation candidates with
cross-validation, retrains the winner and serves single-record predictions.
"""

import logging

from .config import ComparisonConfig, EvaluationResult, calculate_progress
from .dataset import Attribute, Dataset, load_dataset
from .errors import (
    ComparisonError, DataLoadError, RepresentationError, RetrainError,
    NotTrainedError, PredictionError, SchemaMismatchError, InvalidValueError
)
from .preprocessing import Representation, derive_representations, discretize, binarize, normalize, to_numeric_normalized
from .models import CANDIDATES, Candidate
from .evaluation import evaluate, select_best, refit
from .prediction import TrainedModel
from .comparer import ClassifierComparer, ComparisonReport, run_comparison
from .eda import describe_dataset, input_fields
from .utils import safe_json_convert, results_to_records

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    'ComparisonConfig',
    'EvaluationResult',
    'calculate_progress',
    'Attribute',
    'Dataset',
    'load_dataset',
    'ComparisonError',
    'DataLoadError',
    'RepresentationError',
    'RetrainError',
    'NotTrainedError',
    'PredictionError',
    'SchemaMismatchError',
    'InvalidValueError',
    'Representation',
    'derive_representations',
    'discretize',
    'binarize',
    'normalize',
    'to_numeric_normalized',
    'CANDIDATES',
    'Candidate',
    'evaluate',
    'select_best',
    'refit',
    'TrainedModel',
    'ClassifierComparer',
    'ComparisonReport',
    'run_comparison',
    'describe_dataset',
    'input_fields',
    'safe_json_convert',
    'results_to_records'
]
