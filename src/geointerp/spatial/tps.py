import logging
import math

import numpy as np
from scipy.interpolate import RBFInterpolator

from ..errors import InsufficientDataError, ValidationError
from ..samples import Prediction, SampleSet
from .base import FittedModel, SpatialModel, require_samples

logger = logging.getLogger(__name__)


class FittedTPS(FittedModel):
    def __init__(self, samples: SampleSet, rbf: RBFInterpolator, smoothing: float, neighbors):
        super().__init__(samples, {"smoothing": smoothing, "neighbors": neighbors})
        self.rbf = rbf

    def predict(self, query) -> Prediction:
        q = self._check_query(query)
        z = self.rbf(q.reshape(1, -1))
        return Prediction(float(z[0]), tuple(q.tolist()))

    def predict_many(self, queries, max_workers: int = None) -> np.ndarray:
        return np.asarray(self.rbf(self._check_queries(queries)), dtype=float)


class ThinPlateSplineModel(SpatialModel):
    """
    Thin-plate spline with a linear polynomial term. smoothing=0 interpolates
    the samples exactly; larger values trade closeness to the data for a
    smoother surface.
    """

    def __init__(self, smoothing: float = 0.0, neighbors: int = None):
        self.smoothing = smoothing
        self.neighbors = neighbors

    def fit(self, samples: SampleSet) -> FittedTPS:
        require_samples(samples)
        smoothing = float(self.smoothing)
        if not math.isfinite(smoothing) or smoothing < 0:
            raise ValidationError(f"smoothing must be >= 0, got {self.smoothing}")
        if self.neighbors is not None and self.neighbors < 1:
            raise ValidationError(f"neighbors must be >= 1, got {self.neighbors}")
        # degree-1 polynomial needs dim + 1 points
        if len(samples) < samples.dim + 1:
            raise InsufficientDataError(
                f"thin-plate spline needs at least {samples.dim + 1} samples, got {len(samples)}"
            )

        try:
            rbf = RBFInterpolator(
                samples.coordinates, samples.values,
                neighbors=self.neighbors,
                smoothing=smoothing,
                kernel="thin_plate_spline",
                degree=1,
            )
        except (ValueError, np.linalg.LinAlgError) as e:
            # raised for degenerate layouts, e.g. all samples on one line
            raise InsufficientDataError(f"thin-plate spline could not be fit: {e}") from e

        logger.debug("TPS fit: n=%d smoothing=%s", len(samples), smoothing)
        return FittedTPS(samples, rbf, smoothing, self.neighbors)

    def __repr__(self):
        return f"ThinPlateSplineModel(smoothing={self.smoothing})"
