import numpy as np
import pandas as pd
import pytest

from geointerp.errors import ValidationError
from geointerp.io import (
    clean_numeric,
    drop_duplicate_coordinates,
    grid_to_frame,
    project_coordinates,
    read_samples,
    write_frame,
)


def test_csv_round_trip(tmp_path, field_frame):
    path = write_frame(field_frame, tmp_path / "out" / "samples.csv")
    pd.testing.assert_frame_equal(read_samples(path), field_frame)


def test_parquet_round_trip(tmp_path, field_frame):
    path = write_frame(field_frame, tmp_path / "samples.parquet")
    pd.testing.assert_frame_equal(read_samples(path), field_frame)


def test_unsupported_suffix(tmp_path, field_frame):
    with pytest.raises(ValidationError):
        read_samples(tmp_path / "samples.shp")
    with pytest.raises(ValidationError):
        write_frame(field_frame, tmp_path / "samples.json")


def test_clean_numeric(station_frame):
    out = clean_numeric(station_frame, ["lon", "lat", "value"])
    assert len(out) == 6
    assert out["lon"].dtype == float


def test_clean_numeric_missing_column(station_frame):
    with pytest.raises(ValidationError):
        clean_numeric(station_frame, ["lon", "elev"])


def test_drop_duplicate_coordinates_keeps_first():
    df = pd.DataFrame({"lon": [1.0, 1.0, 2.0], "lat": [5.0, 5.0, 5.0], "value": [1.0, 2.0, 3.0]})
    out = drop_duplicate_coordinates(df, ["lon", "lat"])
    assert list(out["value"]) == [1.0, 3.0]


def test_project_coordinates_to_utm():
    df = pd.DataFrame({"lon": [13.4, 13.5], "lat": [52.5, 52.5]})
    out = project_coordinates(df, dst_crs="epsg:25833")
    assert {"x", "y"} <= set(out.columns)
    # ~6.8 km between 13.4E and 13.5E at 52.5N
    dist = np.hypot(out["x"].diff().iloc[1], out["y"].diff().iloc[1])
    assert dist == pytest.approx(6770, rel=0.02)
    assert "x" not in df.columns


def test_grid_to_frame():
    X, Y = np.meshgrid([0.0, 1.0, 2.0], [10.0, 20.0])
    Z = X + Y
    df = grid_to_frame(X, Y, Z, x_col="x", y_col="y")
    assert len(df) == 6
    assert list(df.columns) == ["x", "y", "value"]
    np.testing.assert_array_equal(df["value"], df["x"] + df["y"])


def test_grid_to_frame_shape_mismatch():
    with pytest.raises(ValidationError):
        grid_to_frame(np.zeros((2, 2)), np.zeros((2, 2)), np.zeros((3, 2)))
