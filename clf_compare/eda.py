"""Dataset description helpers for result consumers.

Produces compact stats about the loaded dataset and the field list a front
end needs to collect one prediction input per attribute.
"""

from typing import Any, Dict, List

from .dataset import Dataset
from .utils import safe_json_convert


def describe_dataset(dataset: Dataset) -> Dict[str, Any]:
    """Summary stats using pandas built-ins."""
    df = dataset.to_frame()
    features = dataset.feature_attributes
    missing = df.isnull().sum()
    total_cells = df.shape[0] * df.shape[1]

    stats = {
        "relation": dataset.relation,
        "rows": dataset.n_instances,
        "cols": dataset.n_attributes,
        "class_attribute": dataset.class_attribute.name,
        "class_distribution": dict(zip(dataset.class_attribute.domain, dataset.class_counts())),
        "numerics": [a.name for a in features if a.is_numeric],
        "nominals": [a.name for a in features if a.is_nominal],
        "missing": missing.to_dict(),
        "fully_nominal": dataset.is_fully_nominal(),
        "fully_numeric": dataset.is_fully_numeric(),
        "data_completeness": round((1 - missing.sum() / total_cells) * 100, 2) if total_cells else 100.0,
    }
    return {key: safe_json_convert(value) for key, value in stats.items()}


def input_fields(dataset: Dataset, max_samples: int = 3) -> List[Dict[str, Any]]:
    """One entry per non-class attribute, in the order predict() expects."""
    fields = []
    for index in dataset.feature_indices:
        attribute = dataset.attributes[index]
        fields.append({
            "name": attribute.name,
            "index": index,
            "kind": attribute.kind,
            "values": dataset.nominal_values(index),
            "samples": dataset.sample_values(index, max_samples),
        })
    return fields


# ---------------------------------------------------------------------------
# Features implemented in this module
# - describe_dataset: size, attribute kinds, class distribution, missingness
# - input_fields: prediction form fields with domains and sample values
# ---------------------------------------------------------------------------
