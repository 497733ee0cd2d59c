import logging
import math
import numbers

import numpy as np

from ..errors import ValidationError
from ..samples import Prediction, SampleSet
from .base import FittedModel, SpatialModel, require_samples

logger = logging.getLogger(__name__)


class FittedIDW(FittedModel):
    def __init__(self, samples: SampleSet, power: float, max_neighbors: int):
        super().__init__(samples, {"power": power, "max_neighbors": max_neighbors})

    @property
    def power(self) -> float:
        return self._params["power"]

    @property
    def max_neighbors(self) -> int:
        return self._params["max_neighbors"]

    def predict(self, query) -> Prediction:
        q = self._check_query(query)
        coords = self.samples.coordinates
        values = self.samples.values

        # hypot scales its operands, so large coordinates do not overflow
        d = np.hypot.reduce(coords - q, axis=1)
        # stable: equal distances keep insertion order
        nearest = np.argsort(d, kind="stable")[: min(self.max_neighbors, len(d))]
        d_near = d[nearest]
        v_near = values[nearest]

        if d_near[0] == 0.0:
            return Prediction(float(v_near[0]), tuple(q.tolist()))

        # 1 / d^p scaled by d_min^p: same ratios, no overflow for large p
        w = (d_near[0] / d_near) ** self.power
        z = np.sum(w * v_near) / np.sum(w)
        # rounding in the weighted sum can step just outside the neighbour range
        z = float(np.clip(z, v_near.min(), v_near.max()))
        return Prediction(z, tuple(q.tolist()))


class IDWModel(SpatialModel):
    """
    Inverse distance weighting over the max_neighbors nearest samples.
    max_neighbors=1 gives nearest-neighbour (proximity polygon) interpolation.
    """

    def __init__(self, power: float = 2.0, max_neighbors: int = 8):
        self.power = power
        self.max_neighbors = max_neighbors

    def fit(self, samples: SampleSet) -> FittedIDW:
        require_samples(samples)
        if isinstance(self.power, bool) or not isinstance(self.power, numbers.Real):
            raise ValidationError(f"power must be a number, got {self.power!r}")
        power = float(self.power)
        if not math.isfinite(power) or power <= 0:
            raise ValidationError(f"power must be > 0, got {self.power}")
        if (isinstance(self.max_neighbors, bool) or not isinstance(self.max_neighbors, numbers.Integral)
                or self.max_neighbors < 1):
            raise ValidationError(f"max_neighbors must be an integer >= 1, got {self.max_neighbors}")

        logger.debug("IDW fit: n=%d power=%s max_neighbors=%s", len(samples), power, self.max_neighbors)
        return FittedIDW(samples, power, int(self.max_neighbors))

    def __repr__(self):
        return f"IDWModel(power={self.power}, max_neighbors={self.max_neighbors})"


def fit(samples: SampleSet, power: float = 2.0, max_neighbors: int = 8) -> FittedIDW:
    return IDWModel(power=power, max_neighbors=max_neighbors).fit(samples)


def predict(model: FittedModel, query) -> Prediction:
    return model.predict(query)
