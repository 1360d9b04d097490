"""Tabular dataset model and file loading.

A Dataset is an immutable float matrix described by an ordered tuple of
attributes. Nominal cells hold the index of their label in the attribute
domain and missing cells hold NaN. Loading supports ARFF (through scipy),
CSV/TSV and Excel (through pandas).
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from scipy.io import arff

from .errors import DataLoadError, InvalidValueError, SchemaMismatchError

logger = logging.getLogger(__name__)

NOMINAL = "nominal"
NUMERIC = "numeric"

SUPPORTED_EXTENSIONS = {"arff", "csv", "tsv", "xlsx", "xls"}


@dataclass(frozen=True)
class Attribute:
    """A named column; nominal attributes carry their ordered label domain."""
    name: str
    kind: str
    domain: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.kind not in (NOMINAL, NUMERIC):
            raise ValueError(f"Unknown attribute kind '{self.kind}' for '{self.name}'")
        domain = tuple(str(label) for label in self.domain)
        if self.kind == NOMINAL and not domain:
            raise ValueError(f"Nominal attribute '{self.name}' needs at least one value")
        if self.kind == NUMERIC and domain:
            raise ValueError(f"Numeric attribute '{self.name}' cannot have a domain")
        if len(set(domain)) != len(domain):
            raise ValueError(f"Nominal attribute '{self.name}' has duplicate values")
        object.__setattr__(self, "domain", domain)

    @property
    def is_nominal(self) -> bool:
        return self.kind == NOMINAL

    @property
    def is_numeric(self) -> bool:
        return self.kind == NUMERIC

    def index_of(self, label: Any) -> int:
        """Domain index of a nominal label."""
        try:
            return self.domain.index(str(label))
        except ValueError:
            raise InvalidValueError(
                f"'{label}' is not a value of attribute '{self.name}'"
            ) from None


@dataclass(frozen=True, eq=False)
class Dataset:
    """Immutable attributes + instances, with a designated nominal class."""
    attributes: Tuple[Attribute, ...]
    values: np.ndarray
    class_index: Optional[int] = None
    relation: str = "dataset"

    def __post_init__(self) -> None:
        attributes = tuple(self.attributes)
        if not attributes:
            raise ValueError("A dataset needs at least one attribute")
        names = [attribute.name for attribute in attributes]
        if len(set(names)) != len(names):
            raise ValueError("Attribute names must be unique")

        class_index = len(attributes) - 1 if self.class_index is None else int(self.class_index)
        if class_index < 0:
            class_index += len(attributes)
        if not 0 <= class_index < len(attributes):
            raise ValueError(f"Class index {self.class_index} is out of range")
        if not attributes[class_index].is_nominal:
            raise ValueError(
                f"Class attribute '{attributes[class_index].name}' must be nominal"
            )

        values = np.array(self.values, dtype=float)
        if values.size == 0:
            values = values.reshape(0, len(attributes))
        if values.ndim != 2 or values.shape[1] != len(attributes):
            raise ValueError(
                f"Expected {len(attributes)} value columns, got shape {values.shape}"
            )
        for j, attribute in enumerate(attributes):
            if attribute.is_nominal:
                present = values[:, j][~np.isnan(values[:, j])]
                if np.any(present != np.floor(present)) or np.any(present < 0) \
                        or np.any(present >= len(attribute.domain)):
                    raise ValueError(f"Attribute '{attribute.name}' holds values outside its domain")
        if np.isnan(values[:, class_index]).any():
            raise ValueError(f"Class attribute '{attributes[class_index].name}' has missing values")
        values.setflags(write=False)

        object.__setattr__(self, "attributes", attributes)
        object.__setattr__(self, "values", values)
        object.__setattr__(self, "class_index", class_index)

    # -- shape -------------------------------------------------------------

    @property
    def n_instances(self) -> int:
        return self.values.shape[0]

    @property
    def n_attributes(self) -> int:
        return len(self.attributes)

    @property
    def class_attribute(self) -> Attribute:
        return self.attributes[self.class_index]

    @property
    def n_classes(self) -> int:
        return len(self.class_attribute.domain)

    @property
    def feature_indices(self) -> Tuple[int, ...]:
        return tuple(i for i in range(self.n_attributes) if i != self.class_index)

    @property
    def feature_attributes(self) -> Tuple[Attribute, ...]:
        return tuple(self.attributes[i] for i in self.feature_indices)

    @property
    def nominal_mask(self) -> Tuple[bool, ...]:
        """Per feature column, whether it is nominal."""
        return tuple(attribute.is_nominal for attribute in self.feature_attributes)

    @property
    def X(self) -> np.ndarray:
        return np.delete(self.values, self.class_index, axis=1)

    @property
    def y(self) -> np.ndarray:
        return self.values[:, self.class_index].astype(int)

    # -- inspection ----------------------------------------------------------

    def has_nominal_attributes(self) -> bool:
        return any(attribute.is_nominal for attribute in self.feature_attributes)

    def has_numeric_attributes(self) -> bool:
        return any(attribute.is_numeric for attribute in self.feature_attributes)

    def is_fully_nominal(self) -> bool:
        return all(attribute.is_nominal for attribute in self.feature_attributes)

    def is_fully_numeric(self) -> bool:
        return all(attribute.is_numeric for attribute in self.feature_attributes)

    def attribute_names(self) -> List[str]:
        """Names of the non-class attributes, in order."""
        return [attribute.name for attribute in self.feature_attributes]

    def attribute_index(self, name: str) -> int:
        for i in self.feature_indices:
            if self.attributes[i].name == name:
                return i
        raise KeyError(f"No non-class attribute named '{name}'")

    def nominal_values(self, index: int) -> List[str]:
        return list(self.attributes[index].domain)

    def sample_values(self, index: int, max_samples: int = 3) -> List[str]:
        """First distinct non-missing values of an attribute, formatted for display."""
        attribute = self.attributes[index]
        samples: List[str] = []
        for value in self.values[:, index]:
            if len(samples) >= max_samples:
                break
            if np.isnan(value):
                continue
            text = attribute.domain[int(value)] if attribute.is_nominal else _format_number(value)
            if text not in samples:
                samples.append(text)
        return samples

    def class_counts(self) -> List[int]:
        return np.bincount(self.y, minlength=self.n_classes).tolist()

    # -- conversion ----------------------------------------------------------

    def derive(self, attributes: Sequence[Attribute], values: np.ndarray,
               class_index: int, suffix: str) -> "Dataset":
        """New dataset sharing this one's lineage."""
        return Dataset(tuple(attributes), values, class_index, f"{self.relation}-{suffix}")

    def resolve_inputs(self, raw: Iterable[Any]) -> List[float]:
        """Turn text inputs for each non-class attribute into a numeric vector.

        Numbers are parsed and nominal labels are resolved to their domain
        index, which is the form the predictor accepts.
        """
        raw = list(raw)
        features = self.feature_attributes
        if len(raw) != len(features):
            raise SchemaMismatchError(f"Expected {len(features)} values, got {len(raw)}")

        resolved = []
        for attribute, value in zip(features, raw):
            text = "" if value is None else str(value).strip()
            if not text:
                raise InvalidValueError(f"Please enter a value for attribute: {attribute.name}")
            if attribute.is_nominal:
                resolved.append(float(attribute.index_of(text)))
                continue
            try:
                resolved.append(float(text))
            except ValueError:
                raise InvalidValueError(
                    f"Invalid numeric value for attribute: {attribute.name}"
                ) from None
        return resolved

    def to_frame(self) -> pd.DataFrame:
        """Decode into a DataFrame with labels in nominal columns."""
        columns = {}
        for j, attribute in enumerate(self.attributes):
            column = self.values[:, j]
            if attribute.is_nominal:
                codes = np.where(np.isnan(column), -1, column).astype(int)
                columns[attribute.name] = pd.Categorical.from_codes(codes, categories=list(attribute.domain))
            else:
                columns[attribute.name] = column
        return pd.DataFrame(columns)

    @classmethod
    def from_frame(cls, df: pd.DataFrame, class_column: Optional[str] = None,
                   relation: str = "dataset") -> "Dataset":
        """Build a dataset from a DataFrame.

        Numeric columns become numeric attributes and everything else becomes
        nominal. The class column (last column by default) is always nominal;
        rows where it is missing are dropped.
        """
        if df.shape[1] == 0:
            raise ValueError("DataFrame has no columns")
        class_column = df.columns[-1] if class_column is None else class_column
        if class_column not in df.columns:
            raise ValueError(f"Class column '{class_column}' not found in dataset")

        missing_class = df[class_column].isna()
        if missing_class.any():
            logger.warning("Dropping %d rows with a missing class value", int(missing_class.sum()))
            df = df.loc[~missing_class]

        attributes, columns = [], []
        for name in df.columns:
            series = df[name]
            numeric = pd.api.types.is_numeric_dtype(series) and not pd.api.types.is_bool_dtype(series)
            if name != class_column and (numeric or series.isna().all()):
                attributes.append(Attribute(str(name), NUMERIC))
                columns.append(pd.to_numeric(series, errors="coerce").to_numpy(dtype=float))
            else:
                attribute, codes = _nominal_column(str(name), series)
                attributes.append(attribute)
                columns.append(codes)

        values = np.column_stack(columns)
        return cls(tuple(attributes), values, list(df.columns).index(class_column), relation)


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return "%d" % value
    return "%.2f" % value


def _format_label(value: Any) -> str:
    if isinstance(value, bytes):
        value = value.decode("utf-8")
    if isinstance(value, (float, np.floating)) and float(value).is_integer():
        return str(int(value))
    return str(value)


def _nominal_column(name: str, series: pd.Series) -> Tuple[Attribute, np.ndarray]:
    if isinstance(series.dtype, pd.CategoricalDtype):
        labels = [_format_label(c) for c in series.cat.categories]
    else:
        present = list(series.dropna().unique())
        try:
            present = sorted(present)
        except TypeError:
            present = sorted(present, key=str)
        labels = [_format_label(v) for v in present]
    labels = list(dict.fromkeys(labels))

    lookup = {label: i for i, label in enumerate(labels)}
    codes = np.array(
        [np.nan if pd.isna(v) else lookup[_format_label(v)] for v in series.astype(object)],
        dtype=float,
    )
    return Attribute(name, NOMINAL, tuple(labels)), codes


def _read_arff(path: str, class_column: Optional[str]) -> Dataset:
    data, meta = arff.loadarff(path)
    attributes, columns = [], []
    for name in meta.names():
        kind, domain = meta[name]
        column = data[name]
        if kind == "nominal":
            attribute = Attribute(name, NOMINAL, tuple(domain))
            lookup = {label: i for i, label in enumerate(attribute.domain)}
            columns.append(np.array([lookup.get(_format_label(v), np.nan) for v in column], dtype=float))
        elif kind == "numeric":
            attribute = Attribute(name, NUMERIC)
            columns.append(np.asarray(column, dtype=float))
        else:
            raise DataLoadError(f"Unsupported ARFF attribute type '{kind}' for '{name}'")
        attributes.append(attribute)

    names = [attribute.name for attribute in attributes]
    if class_column is None:
        class_index = len(attributes) - 1
    elif class_column in names:
        class_index = names.index(class_column)
    else:
        raise DataLoadError(f"Class column '{class_column}' not found in {path}")

    values = np.column_stack(columns) if len(data) else np.empty((0, len(attributes)))
    missing_class = np.isnan(values[:, class_index])
    if missing_class.any():
        logger.warning("Dropping %d rows with a missing class value", int(missing_class.sum()))
        values = values[~missing_class]
    return Dataset(tuple(attributes), values, class_index, meta.name)


def _read_table(path: str, extension: str) -> pd.DataFrame:
    if extension == "csv":
        try:
            return pd.read_csv(path, encoding="utf-8", na_values=["?"])
        except UnicodeDecodeError:
            return pd.read_csv(path, encoding="latin-1", na_values=["?"])
    if extension == "tsv":
        return pd.read_csv(path, sep="\t", na_values=["?"])
    return pd.read_excel(path)


def load_dataset(path: str, class_column: Optional[str] = None) -> Dataset:
    """Load a dataset file; the class defaults to the last attribute.

    Raises:
        DataLoadError: If the file is missing, unsupported or malformed.
    """
    extension = os.path.splitext(str(path))[1].lower().lstrip(".")
    if extension not in SUPPORTED_EXTENSIONS:
        raise DataLoadError(
            f"Unsupported file type: .{extension}. "
            f"Supported: {', '.join(sorted(SUPPORTED_EXTENSIONS))}"
        )

    try:
        if extension == "arff":
            dataset = _read_arff(str(path), class_column)
        else:
            relation = os.path.splitext(os.path.basename(str(path)))[0]
            dataset = Dataset.from_frame(_read_table(str(path), extension), class_column, relation)
    except DataLoadError:
        raise
    except Exception as e:
        raise DataLoadError(f"Could not load dataset '{path}': {e}") from e

    logger.info(
        "Loaded %s: %d instances, %d attributes, class '%s'",
        dataset.relation, dataset.n_instances, dataset.n_attributes, dataset.class_attribute.name,
    )
    return dataset


# ---------------------------------------------------------------------------
# Features implemented in this module
# - Attribute / Dataset immutable data model with nominal class validation
# - Inspection helpers for building prediction forms (names, domains, samples)
# - Text input resolution into the numeric vector used for prediction
# - DataFrame conversion in both directions
# - ARFF (scipy), CSV/TSV and Excel (pandas) loading with DataLoadError
# ---------------------------------------------------------------------------
