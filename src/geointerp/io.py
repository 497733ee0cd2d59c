import logging
from pathlib import Path
from typing import Sequence

import numpy as np
import pandas as pd
from pyproj import Transformer

from .errors import ValidationError

logger = logging.getLogger(__name__)


def read_samples(path) -> pd.DataFrame:
    """Read a CSV or parquet table of sample points."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return pd.read_csv(path)
    if suffix in (".parquet", ".pq"):
        return pd.read_parquet(path)
    raise ValidationError(f"unsupported file type {suffix!r} (expected .csv or .parquet)")


def write_frame(df: pd.DataFrame, path):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() == ".csv":
        df.to_csv(path, index=False)
    elif path.suffix.lower() in (".parquet", ".pq"):
        df.to_parquet(path, index=False)
    else:
        raise ValidationError(f"unsupported file type {path.suffix!r} (expected .csv or .parquet)")
    return path


def clean_numeric(df: pd.DataFrame, cols: Sequence[str]) -> pd.DataFrame:
    """Coerce `cols` to float and drop rows where any of them is missing."""
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise ValidationError(f"missing columns: {missing}")
    df = df.copy()
    for c in cols:
        df[c] = pd.to_numeric(df[c], errors="coerce").astype(float)
    before = len(df)
    df = df.dropna(subset=list(cols)).reset_index(drop=True)
    if len(df) < before:
        logger.info("dropped %d rows with missing or non-numeric %s", before - len(df), list(cols))
    return df


def drop_duplicate_coordinates(df: pd.DataFrame, cols: Sequence[str] = ("lon", "lat")) -> pd.DataFrame:
    """Keep the first row for each coordinate tuple."""
    before = len(df)
    df = df.drop_duplicates(subset=list(cols), keep="first").reset_index(drop=True)
    if len(df) < before:
        logger.info("dropped %d rows with duplicate coordinates", before - len(df))
    return df


def project_coordinates(df: pd.DataFrame, x_col: str = "lon", y_col: str = "lat",
                        src_crs: str = "epsg:4326", dst_crs: str = "epsg:25833",
                        out_cols: Sequence[str] = ("x", "y")) -> pd.DataFrame:
    """
    Add projected coordinate columns. Distances in IDW are Euclidean, so
    lon/lat should be projected to metres before fitting.
    """
    transformer = Transformer.from_crs(src_crs, dst_crs, always_xy=True)
    x, y = transformer.transform(df[x_col].astype(float).values, df[y_col].astype(float).values)
    df = df.copy()
    df[out_cols[0]] = np.asarray(x, dtype=float)
    df[out_cols[1]] = np.asarray(y, dtype=float)
    return df


def grid_to_frame(X: np.ndarray, Y: np.ndarray, Z: np.ndarray, x_col: str = "lon",
                  y_col: str = "lat", value_col: str = "value") -> pd.DataFrame:
    """Flatten a predicted surface into one row per grid cell."""
    if not (np.shape(X) == np.shape(Y) == np.shape(Z)):
        raise ValidationError("X, Y and Z must share one shape")
    return pd.DataFrame({
        x_col: np.asarray(X, dtype=float).ravel(),
        y_col: np.asarray(Y, dtype=float).ravel(),
        value_col: np.asarray(Z, dtype=float).ravel(),
    })
