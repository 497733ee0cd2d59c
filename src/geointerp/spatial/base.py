from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Sequence, Union

import numpy as np

from ..errors import DimensionMismatchError, ValidationError
from ..samples import Prediction, SampleSet


class FittedModel(ABC):
    """
    A model fit on a SampleSet. Immutable once built: holds a read-only
    reference to its samples and the fitted parameters.
    """

    def __init__(self, samples: SampleSet, params: dict):
        self._samples = samples
        self._params = dict(params)

    @property
    def samples(self) -> SampleSet:
        return self._samples

    @property
    def params(self) -> dict:
        return dict(self._params)

    @property
    def dim(self) -> int:
        return self._samples.dim

    def _check_query(self, query) -> np.ndarray:
        q = np.asarray(query, dtype=float).ravel()
        if q.shape[0] != self.dim:
            raise DimensionMismatchError(
                f"query has {q.shape[0]} coordinates, model was fit on {self.dim}"
            )
        return q

    def _check_queries(self, queries) -> np.ndarray:
        Q = np.asarray(queries, dtype=float)
        if Q.ndim == 1:
            Q = Q.reshape(1, -1)
        if Q.ndim != 2 or Q.shape[1] != self.dim:
            raise DimensionMismatchError(
                f"queries must have shape (m, {self.dim}), got {Q.shape}"
            )
        return Q

    @abstractmethod
    def predict(self, query) -> Prediction:
        pass

    def predict_many(self, queries, max_workers: int = None) -> np.ndarray:
        """
        Predict at every row of an (m, k) array. Query points are independent,
        so with max_workers > 1 the map runs on a thread pool; results keep
        query order.
        """
        Q = self._check_queries(queries)
        if max_workers is not None and max_workers > 1 and len(Q) > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                preds = list(executor.map(self.predict, Q))
        else:
            preds = [self.predict(q) for q in Q]
        return np.array([p.value for p in preds], dtype=float)

    def predict_grid(self, X: np.ndarray, Y: np.ndarray, covariates: Sequence[np.ndarray] = ()) -> np.ndarray:
        """
        Predict over meshgrid arrays X, Y. Extra coordinate dimensions
        (e.g. elevation) are taken from same-shaped covariate grids.
        """
        X = np.asarray(X, dtype=float)
        Y = np.asarray(Y, dtype=float)
        layers = [X, Y] + [np.asarray(c, dtype=float) for c in covariates]
        if any(layer.shape != X.shape for layer in layers):
            raise DimensionMismatchError("X, Y and covariate grids must share one shape")
        if len(layers) != self.dim:
            raise DimensionMismatchError(
                f"grid provides {len(layers)} coordinates, model was fit on {self.dim}"
            )
        Q = np.column_stack([layer.ravel() for layer in layers])
        return self.predict_many(Q).reshape(X.shape)

    def __repr__(self):
        return f"{type(self).__name__}(n={len(self._samples)}, params={self._params})"


class SpatialModel(ABC):
    """
    Fit strategy. Carries its configuration and turns a SampleSet into a
    FittedModel; every strategy's fitted model satisfies the same predict
    contract.
    """

    @abstractmethod
    def fit(self, samples: SampleSet) -> FittedModel:
        pass

    def __call__(self, samples: SampleSet) -> FittedModel:
        return self.fit(samples)


ModelFitFn = Union[SpatialModel, Callable[[SampleSet], FittedModel]]


def fit_model(model_fit_fn: ModelFitFn, samples: SampleSet) -> FittedModel:
    if isinstance(model_fit_fn, SpatialModel):
        return model_fit_fn.fit(samples)
    if callable(model_fit_fn):
        return model_fit_fn(samples)
    raise ValidationError(f"expected a SpatialModel or a callable, got {type(model_fit_fn).__name__}")


def require_samples(samples: SampleSet):
    if not isinstance(samples, SampleSet):
        raise ValidationError(f"expected a SampleSet, got {type(samples).__name__}")
    if len(samples) == 0:
        raise ValidationError("cannot fit on an empty sample set")
