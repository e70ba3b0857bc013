"""Shared fixtures: a synthetic stand-in for the building energy table.

The attribute grid matches the published design exactly (12 building
shapes × 4 orientations × 16 glazing combinations = 768 rows), so the
exact dependency ``sa = wa + 2 * ra`` holds. Loads are synthetic and
log-linear in surface area, wall area, height and glazing area.
"""

from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from heatload.data.preprocessor import EnergyPreprocessor

# (relative compactness, surface area, wall area, roof area, overall height)
_SHAPES = [
    (0.98, 514.5, 294.0, 110.25, 7.0),
    (0.90, 563.5, 318.5, 122.50, 7.0),
    (0.86, 588.0, 294.0, 147.00, 7.0),
    (0.82, 612.5, 318.5, 147.00, 7.0),
    (0.79, 637.0, 343.0, 147.00, 7.0),
    (0.76, 661.5, 416.5, 122.50, 7.0),
    (0.74, 686.0, 245.0, 220.50, 3.5),
    (0.71, 710.5, 269.5, 220.50, 3.5),
    (0.69, 735.0, 294.0, 220.50, 3.5),
    (0.66, 759.5, 318.5, 220.50, 3.5),
    (0.64, 784.0, 343.0, 220.50, 3.5),
    (0.62, 808.5, 367.5, 220.50, 3.5),
]

_GLAZING = [(0.0, 0)] + [(ga, gad) for ga in (0.10, 0.25, 0.40) for gad in range(1, 6)]


def make_raw_frame(seed: int = 0, noise: float = 0.03) -> pd.DataFrame:
    """Raw table with UCI headers, two empty trailing columns and blank rows."""
    rng = np.random.default_rng(seed)
    rows = [
        (*shape, orient, ga, gad)
        for shape in _SHAPES
        for orient in (2, 3, 4, 5)
        for ga, gad in _GLAZING
    ]
    df = pd.DataFrame(rows, columns=[f"X{i}" for i in range(1, 9)])
    log_hl = (
        -4.0
        + 0.6 * np.log(df["X2"])
        + 0.5 * np.log(df["X3"])
        + 0.9 * (df["X5"] == 7.0)
        + 1.0 * df["X7"]
        + rng.normal(0.0, noise, len(df))
    )
    df["Y1"] = np.round(np.exp(log_hl), 2)
    df["Y2"] = np.round(np.exp(log_hl) * 1.1 + rng.normal(0.0, 0.5, len(df)), 2)
    df["Unnamed: 10"] = np.nan
    df["Unnamed: 11"] = np.nan

    blank = pd.DataFrame(np.nan, index=range(4), columns=df.columns)
    return pd.concat([df, blank], ignore_index=True)


@pytest.fixture()
def raw_df() -> pd.DataFrame:
    return make_raw_frame()


@pytest.fixture()
def dataset(raw_df: pd.DataFrame) -> pd.DataFrame:
    return EnergyPreprocessor().transform(raw_df)


@pytest.fixture()
def raw_csv(tmp_path: Path, raw_df: pd.DataFrame) -> Path:
    path = tmp_path / "ENB2012_data.csv"
    raw_df.to_csv(path, index=False)
    return path
