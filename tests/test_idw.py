import numpy as np
import pytest

from geointerp.errors import DimensionMismatchError, ValidationError
from geointerp.samples import SampleSet
from geointerp.spatial import idw
from geointerp.spatial.idw import IDWModel


def test_midpoint_of_two_samples(two_points):
    model = idw.fit(two_points, power=1, max_neighbors=2)
    pred = idw.predict(model, (5.0, 0.0))
    assert pred.value == 15.0
    assert pred.query_coordinates == (5.0, 0.0)


def test_exact_match_returns_sample_value(field_samples):
    model = IDWModel(power=2, max_neighbors=8).fit(field_samples)
    for point in field_samples:
        assert model.predict(point.coordinates).value == point.value


def test_single_sample_predicts_its_value_everywhere():
    s = SampleSet.from_arrays([[3.0, 4.0]], [7.5])
    model = idw.fit(s, power=2, max_neighbors=1)
    for q in [(0, 0), (100, -50), (3.0, 4.1)]:
        assert model.predict(q).value == 7.5


def test_prediction_within_neighbourhood_range(field_samples):
    n = 5
    model = IDWModel(power=2, max_neighbors=n).fit(field_samples)
    rng = np.random.default_rng(0)
    for q in rng.uniform(-5, 25, size=(30, 2)):
        d = np.hypot.reduce(field_samples.coordinates - q, axis=1)
        near = field_samples.values[np.argsort(d, kind="stable")[:n]]
        z = model.predict(q).value
        assert near.min() <= z <= near.max()


def test_constant_neighbourhood_returns_constant():
    rng = np.random.default_rng(4)
    for _ in range(50):
        s = SampleSet.from_arrays(rng.uniform(0, 10, size=(6, 2)), np.full(6, 0.1))
        model = idw.fit(s, power=2, max_neighbors=6)
        for q in rng.uniform(0, 10, size=(10, 2)):
            assert model.predict(q).value == 0.1


def test_large_coordinates_do_not_overflow():
    s = SampleSet.from_arrays([[1e200, 0.0], [-1e200, 0.0]], [1.0, 3.0])
    assert idw.fit(s, power=1, max_neighbors=2).predict((0.0, 0.0)).value == pytest.approx(2.0)


def test_fitted_parameters_are_read_only(two_points):
    model = idw.fit(two_points, power=1, max_neighbors=2)
    with pytest.raises(AttributeError):
        model.max_neighbors = 1
    with pytest.raises(AttributeError):
        model.power = 3.0
    assert model.predict((4.0, 0.0)).value == pytest.approx(14.0)
    assert model.params == {"power": 1.0, "max_neighbors": 2}


def test_higher_power_pulls_towards_nearest():
    # nearest sample (value 0) at distance 1, the other (value 100) at distance 3
    s = SampleSet.from_arrays([[1.0, 0.0], [-3.0, 0.0]], [0.0, 100.0])
    preds = [idw.fit(s, power=p, max_neighbors=2).predict((0.0, 0.0)).value for p in (0.5, 1, 2, 4, 8)]
    assert all(a > b for a, b in zip(preds, preds[1:]))
    # weight ratio nearest / farther is 3**p
    assert preds[2] == pytest.approx(100 * 1 / (9 + 1))


def test_neighbour_cap_ignores_far_samples():
    s = SampleSet.from_arrays([[1, 0], [0, 1], [50, 50]], [1.0, 1.0, 1000.0])
    assert idw.fit(s, power=2, max_neighbors=2).predict((0, 0)).value == pytest.approx(1.0)


def test_ties_broken_by_insertion_order():
    s = SampleSet.from_arrays([[1, 0], [-1, 0], [0, 1]], [5.0, 7.0, 9.0])
    assert idw.fit(s, power=2, max_neighbors=1).predict((0, 0)).value == 5.0


def test_max_neighbors_larger_than_sample_count(two_points):
    assert idw.fit(two_points, power=1, max_neighbors=10).predict((5, 0)).value == 15.0


def test_large_power_does_not_overflow(two_points):
    z = idw.fit(two_points, power=400, max_neighbors=2).predict((1e-3, 0)).value
    assert z == pytest.approx(10.0)


def test_deterministic(field_samples):
    model = idw.fit(field_samples, power=2, max_neighbors=6)
    Q = np.array([[1.5, 2.5], [10.0, 10.0]])
    np.testing.assert_array_equal(model.predict_many(Q), model.predict_many(Q))


def test_predict_many_parallel_matches_serial(field_samples):
    model = idw.fit(field_samples, power=2, max_neighbors=6)
    Q = np.random.default_rng(1).uniform(0, 20, size=(40, 2))
    np.testing.assert_array_equal(model.predict_many(Q, max_workers=4), model.predict_many(Q))


def test_predict_grid_shape(field_samples):
    model = idw.fit(field_samples, power=2, max_neighbors=6)
    X, Y = np.meshgrid(np.linspace(0, 20, 7), np.linspace(0, 20, 5))
    Z = model.predict_grid(X, Y)
    assert Z.shape == (5, 7)
    assert Z[0, 0] == model.predict((0.0, 0.0)).value


def test_covariate_dimension_used_in_distance():
    s = SampleSet.from_arrays([[0, 0, 0], [0, 0, 10]], [1.0, 2.0])
    model = idw.fit(s, power=2, max_neighbors=1)
    assert model.predict((0, 0, 9)).value == 2.0
    X, Y = np.meshgrid([0.0, 1.0], [0.0, 1.0])
    Z = model.predict_grid(X, Y, covariates=[np.full(X.shape, 9.0)])
    assert np.all(Z == 2.0)


def test_query_dimension_mismatch(two_points):
    model = idw.fit(two_points)
    with pytest.raises(DimensionMismatchError):
        model.predict((1.0, 2.0, 3.0))


@pytest.mark.parametrize("power, max_neighbors", [
    (0, 2), (-1, 2), (2, 0), (2, 1.5),
    (2, None), (2, float("inf")), (2, float("nan")),
    (None, 2), (float("nan"), 2), ("2", 2),
])
def test_invalid_parameters(two_points, power, max_neighbors):
    with pytest.raises(ValidationError):
        idw.fit(two_points, power=power, max_neighbors=max_neighbors)


def test_empty_samples_rejected():
    with pytest.raises(ValidationError):
        idw.fit(SampleSet(), power=2, max_neighbors=1)


def test_fitted_params(two_points):
    model = idw.fit(two_points, power=1.5, max_neighbors=3)
    assert model.params == {"power": 1.5, "max_neighbors": 3}
    assert model.samples is two_points
