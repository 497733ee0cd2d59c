import logging

import numpy as np
from pykrige.ok import OrdinaryKriging
from pykrige.ok3d import OrdinaryKriging3D

from ..errors import InsufficientDataError, ValidationError
from ..samples import Prediction, SampleSet
from .base import FittedModel, SpatialModel, require_samples

logger = logging.getLogger(__name__)

MIN_SAMPLES = 3


def _filled(z) -> np.ndarray:
    return np.asarray(np.ma.filled(z, np.nan), dtype=float)


class FittedKriging(FittedModel):
    """
    Ordinary kriging on (x, y), or (x, y, covariate) for 3-D samples.
    The variogram is fit by pykrige when the model is built.
    """

    def __init__(self, samples: SampleSet, krige, variogram: str):
        params = {
            "variogram": variogram,
            "variogram_parameters": [float(v) for v in krige.variogram_model_parameters],
        }
        super().__init__(samples, params)
        self.krige = krige
        self.variogram = variogram

    def _execute_points(self, Q: np.ndarray) -> np.ndarray:
        cols = [Q[:, i] for i in range(Q.shape[1])]
        z, ss = self.krige.execute("points", *cols)
        return _filled(z)

    def predict(self, query) -> Prediction:
        q = self._check_query(query)
        z = self._execute_points(q.reshape(1, -1))
        return Prediction(float(z[0]), tuple(q.tolist()))

    def predict_many(self, queries, max_workers: int = None) -> np.ndarray:
        # pykrige solves all points in one vectorised system
        return self._execute_points(self._check_queries(queries))

    def predict_grid(self, X, Y, covariates=()):
        X = np.asarray(X, dtype=float)
        Y = np.asarray(Y, dtype=float)
        if self.dim == 2 and len(covariates) == 0 and X.ndim == 2:
            # regular meshgrid: let pykrige build the grid itself
            if np.allclose(X, X[0]) and np.allclose(Y, Y[:, :1]):
                z, ss = self.krige.execute("grid", X[0], Y[:, 0])
                return _filled(z)
        return super().predict_grid(X, Y, covariates)

    def variance_many(self, queries) -> np.ndarray:
        """Kriging variance at each query point."""
        Q = self._check_queries(queries)
        z, ss = self.krige.execute("points", *[Q[:, i] for i in range(Q.shape[1])])
        return _filled(ss)


class OrdinaryKrigingModel(SpatialModel):
    def __init__(self, variogram="spherical", variogram_parameters=None, nlags=6):
        self.variogram = variogram
        self.variogram_parameters = variogram_parameters
        self.nlags = nlags

    def fit(self, samples: SampleSet) -> FittedKriging:
        require_samples(samples)
        if len(samples) < MIN_SAMPLES:
            raise InsufficientDataError(
                f"kriging needs at least {MIN_SAMPLES} samples, got {len(samples)}"
            )

        coords, values = samples.coordinates, samples.values
        if samples.dim == 2:
            krige = OrdinaryKriging(
                coords[:, 0], coords[:, 1], values,
                variogram_model=self.variogram,
                variogram_parameters=self.variogram_parameters,
                nlags=self.nlags,
                enable_plotting=False,
                verbose=False
            )
        elif samples.dim == 3:
            krige = OrdinaryKriging3D(
                coords[:, 0], coords[:, 1], coords[:, 2], values,
                variogram_model=self.variogram,
                variogram_parameters=self.variogram_parameters,
                nlags=self.nlags,
                enable_plotting=False,
                verbose=False
            )
        else:
            raise ValidationError(f"kriging supports 2 or 3 coordinates, got {samples.dim}")

        fitted = FittedKriging(samples, krige, self.variogram)
        logger.debug("kriging fit: n=%d params=%s", len(samples), fitted.params)
        return fitted

    def __repr__(self):
        return f"OrdinaryKrigingModel(variogram={self.variogram!r})"
