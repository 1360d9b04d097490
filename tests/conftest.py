from __future__ import annotations

import numpy as np
import pandas as pd
import pytest
from sklearn.datasets import load_iris

from clf_compare import Dataset


@pytest.fixture
def iris_dataset() -> Dataset:
    iris = load_iris(as_frame=True)
    df = iris.data.copy()
    df["class"] = iris.target_names[iris.target]
    return Dataset.from_frame(df, relation="iris")


def _make_mixed_df(n_rows: int = 120, seed: int = 0) -> pd.DataFrame:
    rng = np.random.default_rng(seed)

    df = pd.DataFrame(
        {
            "num1": rng.normal(size=n_rows),
            "num2": rng.integers(0, 10, size=n_rows).astype(float),
            "cat": rng.choice(["A", "B", "C"], size=n_rows),
        }
    )

    score = df["num1"] + df["num2"] * 0.1 + (df["cat"] == "A") * 0.5
    df["target"] = np.where(score > score.median(), "high", "low")

    df.loc[0, "num1"] = np.nan
    df.loc[1, "cat"] = None

    return df


@pytest.fixture
def mixed_frame() -> pd.DataFrame:
    return _make_mixed_df()


@pytest.fixture
def mixed_dataset(mixed_frame: pd.DataFrame) -> Dataset:
    return Dataset.from_frame(mixed_frame, relation="mixed")


def _make_nominal_df() -> pd.DataFrame:
    outlook = ["sunny", "overcast", "rainy", "sunny", "rainy"] * 4
    windy = ["yes", "no", "no", "no", "yes", "yes", "no", "yes", "no", "no"] * 2
    humidity = ["high", "normal"] * 10
    play = [
        "no" if (o == "sunny" and h == "high") or (o == "rainy" and w == "yes") else "yes"
        for o, w, h in zip(outlook, windy, humidity)
    ]
    return pd.DataFrame({"outlook": outlook, "windy": windy, "humidity": humidity, "play": play})


@pytest.fixture
def nominal_dataset() -> Dataset:
    return Dataset.from_frame(_make_nominal_df(), relation="weather")
