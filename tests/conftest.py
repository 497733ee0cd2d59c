import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from geointerp.samples import SampleSet


def smooth_field(x, y):
    return 10 + 0.5 * x + 0.25 * y + np.sin(x / 3.0)


@pytest.fixture
def two_points():
    return SampleSet.from_arrays([[0.0, 0.0], [10.0, 0.0]], [10.0, 20.0])


@pytest.fixture
def field_samples():
    rng = np.random.default_rng(7)
    coords = rng.uniform(0, 20, size=(50, 2))
    return SampleSet.from_arrays(coords, smooth_field(coords[:, 0], coords[:, 1]))


@pytest.fixture
def field_frame(field_samples):
    return field_samples.to_frame(["lon", "lat"], "value")


@pytest.fixture
def station_frame():
    return pd.DataFrame({
        "lon": [13.1, 13.2, 13.3, 13.2, 13.4, 13.5, "bad", 13.6],
        "lat": [52.4, 52.5, 52.6, 52.5, 52.45, 52.55, 52.6, None],
        "value": [10.0, 12.0, 14.0, 99.0, 11.0, 13.0, 15.0, 16.0],
    })
