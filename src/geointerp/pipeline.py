# Tabular front end: DataFrame of stations -> fitted model, surface, scores
import numpy as np
import pandas as pd

from .config import build_model
from .errors import ValidationError
from .io import clean_numeric, drop_duplicate_coordinates
from .samples import SampleSet
from .validation import cross_validate, evaluate, split


class InterpolationPipeline:
    """
    Generic interpolation pipeline over a DataFrame of sample points:
    1. Clean and de-duplicate the coordinate/value columns
    2. Fit the spatial model
    3. Predict on a regular grid, or score with holdout / k-fold CV
    """
    def __init__(self, spatial_model, x_col="lon", y_col="lat", value_col="value", covariate_cols=()):
        self.spatial_model = spatial_model
        self.x_col = x_col
        self.y_col = y_col
        self.value_col = value_col
        self.covariate_cols = tuple(covariate_cols)

    @classmethod
    def from_config(cls, cfg, **columns):
        return cls(build_model(cfg), **columns)

    @property
    def coord_cols(self):
        return (self.x_col, self.y_col) + self.covariate_cols

    def samples_from_frame(self, df: pd.DataFrame) -> SampleSet:
        df = clean_numeric(df, list(self.coord_cols) + [self.value_col])
        df = drop_duplicate_coordinates(df, self.coord_cols)
        return SampleSet.from_frame(df, self.coord_cols, self.value_col)

    def fit(self, df):
        return self.spatial_model.fit(self.samples_from_frame(df))

    def interpolate_grid(self, df, grid_size=100, buffer=0.0, bbox=None, covariate_grids=()):
        if len(covariate_grids) != len(self.covariate_cols):
            raise ValidationError(
                f"{len(self.covariate_cols)} covariate columns need as many covariate grids, "
                f"got {len(covariate_grids)}"
            )

        model = self.fit(df)
        coords = model.samples.coordinates

        if bbox is None:
            bbox = {
                "x_min": coords[:, 0].min() - buffer,
                "x_max": coords[:, 0].max() + buffer,
                "y_min": coords[:, 1].min() - buffer,
                "y_max": coords[:, 1].max() + buffer,
            }

        # generate grid
        xs = np.linspace(bbox["x_min"], bbox["x_max"], grid_size)
        ys = np.linspace(bbox["y_min"], bbox["y_max"], grid_size)
        X, Y = np.meshgrid(xs, ys)

        # spatial prediction
        Z = model.predict_grid(X, Y, covariates=covariate_grids)

        return X, Y, Z

    def evaluate(self, df, holdout_fraction=0.2, seed=42):
        train, test = split(self.samples_from_frame(df), holdout_fraction, seed)
        return evaluate(self.spatial_model, train, test)

    def cross_validate(self, df, k=5, seed=42, progress=False):
        return cross_validate(self.spatial_model, self.samples_from_frame(df), k=k, seed=seed, progress=progress)
