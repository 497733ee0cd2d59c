from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple

import numpy as np
import pandas as pd

from .errors import DimensionMismatchError, ValidationError


@dataclass(frozen=True)
class SamplePoint:
    coordinates: Tuple[float, ...]
    value: float

    @property
    def dim(self) -> int:
        return len(self.coordinates)


@dataclass(frozen=True)
class Prediction:
    value: float
    query_coordinates: Tuple[float, ...]


class SampleSet:
    """
    Ordered, immutable collection of labeled sample points.

    Every point must have the same number of coordinates (at least 2),
    finite coordinates and values, and no two points may share a coordinate
    tuple. Duplicates have to be removed before building the set
    (see geointerp.io.drop_duplicate_coordinates).
    """

    def __init__(self, points: Iterable[SamplePoint] = ()):
        self._points = tuple(
            SamplePoint(tuple(float(c) for c in p.coordinates), float(p.value))
            for p in points
        )
        self._validate()

        if self._points:
            coords = np.array([p.coordinates for p in self._points], dtype=float)
        else:
            coords = np.empty((0, 0), dtype=float)
        values = np.array([p.value for p in self._points], dtype=float)
        coords.setflags(write=False)
        values.setflags(write=False)
        self._coords = coords
        self._values = values

    def _validate(self):
        if not self._points:
            return

        dims = {p.dim for p in self._points}
        if len(dims) > 1:
            raise DimensionMismatchError(
                f"sample coordinates have mixed dimensionality {sorted(dims)}"
            )
        dim = dims.pop()
        if dim < 2:
            raise ValidationError(f"coordinates need at least 2 dimensions, got {dim}")

        seen = set()
        for i, p in enumerate(self._points):
            if not all(np.isfinite(p.coordinates)) or not np.isfinite(p.value):
                raise ValidationError(f"sample {i} has non-finite coordinates or value")
            if p.coordinates in seen:
                raise ValidationError(f"duplicate coordinates {p.coordinates} at sample {i}")
            seen.add(p.coordinates)

    # ------------------------------------------------------------------
    # constructors
    # ------------------------------------------------------------------
    @classmethod
    def from_arrays(cls, coords, values) -> "SampleSet":
        coords = np.asarray(coords, dtype=float)
        values = np.asarray(values, dtype=float).ravel()
        if coords.ndim != 2:
            raise ValidationError(f"coords must be a 2-D (n, k) array, got shape {coords.shape}")
        if len(coords) != len(values):
            raise ValidationError(
                f"got {len(coords)} coordinate rows but {len(values)} values"
            )
        return cls(SamplePoint(tuple(c), v) for c, v in zip(coords, values))

    @classmethod
    def from_frame(cls, df: pd.DataFrame, coord_cols: Sequence[str] = ("lon", "lat"),
                   value_col: str = "value") -> "SampleSet":
        missing = [c for c in [*coord_cols, value_col] if c not in df.columns]
        if missing:
            raise ValidationError(f"missing columns: {missing}")
        return cls.from_arrays(
            df[list(coord_cols)].astype(float).values,
            df[value_col].astype(float).values,
        )

    def to_frame(self, coord_cols: Sequence[str] = None, value_col: str = "value") -> pd.DataFrame:
        if coord_cols is None:
            coord_cols = [f"x{i}" for i in range(self.dim)]
        if len(self) and len(coord_cols) != self.dim:
            raise DimensionMismatchError(
                f"{len(coord_cols)} column names for {self.dim}-dimensional coordinates"
            )
        df = pd.DataFrame(self._coords.reshape(len(self), len(coord_cols)).copy(), columns=list(coord_cols))
        df[value_col] = self._values.copy()
        return df

    # ------------------------------------------------------------------
    # accessors
    # ------------------------------------------------------------------
    @property
    def coordinates(self) -> np.ndarray:
        return self._coords

    @property
    def values(self) -> np.ndarray:
        return self._values

    @property
    def dim(self) -> int:
        return self._points[0].dim if self._points else 0

    def subset(self, indices) -> "SampleSet":
        return SampleSet(self._points[int(i)] for i in indices)

    def __len__(self):
        return len(self._points)

    def __iter__(self):
        return iter(self._points)

    def __getitem__(self, idx):
        return self._points[idx]

    def __eq__(self, other):
        if not isinstance(other, SampleSet):
            return NotImplemented
        return self._points == other._points

    def __hash__(self):
        return hash(self._points)

    def __repr__(self):
        return f"SampleSet(n={len(self)}, dim={self.dim})"
