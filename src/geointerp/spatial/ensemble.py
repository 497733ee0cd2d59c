import logging
from typing import Sequence

import numpy as np

from ..errors import ValidationError
from ..samples import Prediction, SampleSet
from .base import FittedModel, SpatialModel, require_samples

logger = logging.getLogger(__name__)


def _normalise(weights) -> np.ndarray:
    w = np.asarray(weights, dtype=float)
    if w.ndim != 1 or np.any(~np.isfinite(w)) or np.any(w < 0) or w.sum() <= 0:
        raise ValidationError(f"weights must be non-negative with a positive sum, got {weights}")
    return w / w.sum()


def weights_from_rmse(rmses: Sequence[float]) -> np.ndarray:
    """Inverse-RMSE weights, normalised to sum to 1."""
    r = np.asarray(rmses, dtype=float)
    if r.size == 0 or np.any(~np.isfinite(r)) or np.any(r <= 0):
        raise ValidationError(f"RMSE values must be finite and > 0, got {rmses}")
    return _normalise(1.0 / r)


class FittedEnsemble(FittedModel):
    def __init__(self, samples: SampleSet, members: Sequence[FittedModel], weights: np.ndarray):
        # own copy: later edits to the strategy must not reach a fitted model
        weights = np.array(weights, dtype=float)
        weights.setflags(write=False)
        super().__init__(samples, {
            "members": [type(m).__name__ for m in members],
            "weights": [float(w) for w in weights],
        })
        self.members = tuple(members)
        self.weights = weights

    def predict(self, query) -> Prediction:
        q = self._check_query(query)
        z = sum(w * m.predict(q).value for m, w in zip(self.members, self.weights))
        return Prediction(float(z), tuple(q.tolist()))

    def predict_many(self, queries, max_workers: int = None) -> np.ndarray:
        Q = self._check_queries(queries)
        stacked = np.vstack([m.predict_many(Q, max_workers=max_workers) for m in self.members])
        return self.weights @ stacked


class EnsembleModel(SpatialModel):
    """
    Weighted average of several strategies fit on the same samples.
    Typical weights come from cross-validated RMSE (weights_from_rmse).
    """

    def __init__(self, members: Sequence[SpatialModel], weights=None):
        if not members:
            raise ValidationError("ensemble needs at least one member")
        self.members = list(members)
        if weights is None:
            weights = np.ones(len(self.members))
        if len(weights) != len(self.members):
            raise ValidationError(f"{len(weights)} weights for {len(self.members)} members")
        self.weights = _normalise(weights)

    def fit(self, samples: SampleSet) -> FittedEnsemble:
        require_samples(samples)
        fitted = [m.fit(samples) for m in self.members]
        logger.debug("ensemble fit: %d members, weights=%s", len(fitted), self.weights)
        return FittedEnsemble(samples, fitted, self.weights)
