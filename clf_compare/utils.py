"""Utility helpers for handing results to JSON-based consumers."""

from typing import Any, Dict, Iterable, List, Union

import numpy as np
import pandas as pd

from .config import EvaluationResult, ResultRecord


JSONSafe = Union[int, float, list, Dict[str, Any], str, None]

def safe_json_convert(obj: Any) -> JSONSafe:
    """Convert arbitrary Python/NumPy/pandas objects to JSON-safe values.

    Rules:
    - numpy scalars/arrays → native ints/floats/lists
    - NaN/None → None
    - bytes → utf-8 string
    - mappings/iterables → recursively converted
    - anything else → str(obj)
    """
    if obj is None:
        return None
    if isinstance(obj, (bool, np.bool_)):
        return bool(obj)
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, (float, np.floating)):
        return None if np.isnan(obj) else float(obj)
    if isinstance(obj, (int, str)):
        return obj
    if isinstance(obj, bytes):
        return obj.decode('utf-8', errors='ignore')
    if isinstance(obj, np.ndarray):
        return [safe_json_convert(x) for x in obj.tolist()]
    if isinstance(obj, pd.Series):
        return [safe_json_convert(x) for x in obj.tolist()]
    if isinstance(obj, dict):
        return {str(k): safe_json_convert(v) for k, v in obj.items()}
    if isinstance(obj, Iterable):
        return [safe_json_convert(x) for x in obj]
    return str(obj)


def results_to_records(results: Iterable[EvaluationResult]) -> List[ResultRecord]:
    """Ordered, JSON-safe rows for a results table."""
    records: List[ResultRecord] = []
    for result in results:
        record: ResultRecord = {
            'algorithm': result.name,
            'accuracy': round(float(result.accuracy), 4),
            'correct': int(result.correct),
            'total': int(result.total),
            'error': result.error,
        }
        if result.candidate is not None:
            record['representation'] = result.candidate.representation
        records.append(record)
    return records


# ---------------------------------------------------------------------------
# Features implemented in this module
# - safe_json_convert: normalize numpy/pandas objects to JSON-safe values
# - results_to_records: evaluation results as ordered table rows
# ---------------------------------------------------------------------------
