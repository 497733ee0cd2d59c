import numpy as np
import pandas as pd

from geointerp.config import configure_logging, load_config
from geointerp.pipeline import InterpolationPipeline
from geointerp.plotting import plot_surface
from geointerp.spatial.ensemble import EnsembleModel, weights_from_rmse
from geointerp.spatial.idw import IDWModel
from geointerp.spatial.kriging import OrdinaryKrigingModel
from geointerp.spatial.tps import ThinPlateSplineModel
from geointerp.validation import compare, grid_search


cfg = load_config()
configure_logging(cfg["logging"]["level"])
SEED = cfg["validation"]["seed"]
FOLDS = cfg["validation"]["folds"]


# =============================
# Fake stations for a demo
# =============================
rng = np.random.default_rng(SEED)
n_stations = 80
x = rng.uniform(0, 10_000, size=n_stations)
y = rng.uniform(0, 10_000, size=n_stations)
value = (
    20
    + 5 * np.sin(x / 2_000)
    + 3 * np.cos(y / 1_500)
    + rng.normal(0, 0.5, size=n_stations)
)
df = pd.DataFrame({"x": x, "y": y, "value": value})


# =============================
# Compare methods on the same folds
# =============================
pipe = InterpolationPipeline(IDWModel(), x_col="x", y_col="y")
samples = pipe.samples_from_frame(df)

scores = compare([
    ("nearest", IDWModel(max_neighbors=1)),
    ("idw", IDWModel(**cfg["idw"])),
    ("tps", ThinPlateSplineModel(smoothing=cfg["tps"]["smoothing"])),
    ("kriging", OrdinaryKrigingModel(variogram=cfg["kriging"]["variogram"])),
], samples, k=FOLDS, seed=SEED)
print(scores.to_string(index=False))


# =============================
# Tune IDW
# =============================
search = grid_search(
    IDWModel,
    {"power": [1.0, 1.5, 2.0, 3.0], "max_neighbors": [4, 8, 16]},
    samples, k=FOLDS, seed=SEED, progress=True,
)
print(f"Best IDW params: {search.best_params} (mean RMSE {search.best_report.mean_rmse:.3f})")


# =============================
# Ensemble weighted by CV RMSE
# =============================
members = [
    IDWModel(**search.best_params),
    ThinPlateSplineModel(smoothing=cfg["tps"]["smoothing"]),
    OrdinaryKrigingModel(variogram=cfg["kriging"]["variogram"]),
]
rmses = [
    search.best_report.mean_rmse,
    *scores.set_index("model").loc[["tps", "kriging"], "mean_rmse"].values,
]
ensemble = EnsembleModel(members, weights=weights_from_rmse(rmses))

pipe = InterpolationPipeline(ensemble, x_col="x", y_col="y")
report = pipe.evaluate(df, holdout_fraction=cfg["validation"]["holdout_fraction"], seed=SEED)
print(f"Ensemble holdout: R2={report.r_squared:.3f}, RMSE={report.rmse:.3f}, "
      f"relative to null model={report.relative_performance:.3f}")


# =============================
# Plot result
# =============================
X, Y, Z = pipe.interpolate_grid(df, grid_size=cfg["grid"]["size"], buffer=cfg["grid"]["buffer"])
plot_surface(X, Y, Z, samples=samples, title="IDW + TPS + kriging ensemble", path="fig.pdf")
