"""
Holdout and k-fold evaluation of spatial models.

All partitioning is driven by an explicit seed (numpy Generator), so the
same seed and input always give the same folds.

Note: random holdout ignores spatial autocorrelation. Test points close to
training points make the scores optimistic; no spatial blocking is done here.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Sequence, Tuple

import numpy as np
import pandas as pd
from sklearn.metrics import mean_squared_error
from sklearn.model_selection import ParameterGrid
from tqdm import tqdm

from .errors import InsufficientDataError, ValidationError
from .samples import SampleSet
from .spatial.base import ModelFitFn, SpatialModel, fit_model

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccuracyReport:
    r_squared: float
    rmse: float
    n_test: int
    null_rmse: float = float("nan")

    @property
    def relative_performance(self) -> float:
        """1 - RMSE / RMSE of the null model (predicting the training mean)."""
        if not np.isfinite(self.null_rmse) or self.null_rmse == 0:
            return float("nan")
        return 1.0 - self.rmse / self.null_rmse


@dataclass(frozen=True)
class CrossValidationReport:
    folds: List[AccuracyReport]
    pooled: AccuracyReport

    @property
    def mean_rmse(self) -> float:
        return float(np.mean([f.rmse for f in self.folds]))

    @property
    def mean_r_squared(self) -> float:
        return float(np.mean([f.r_squared for f in self.folds]))

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame([
            {"fold": i, "r_squared": f.r_squared, "rmse": f.rmse,
             "null_rmse": f.null_rmse, "n_test": f.n_test}
            for i, f in enumerate(self.folds)
        ])


@dataclass(frozen=True)
class GridSearchResult:
    best_params: dict
    best_report: CrossValidationReport
    results: pd.DataFrame = field(repr=False)


# ----------------------------
# Metrics
# ----------------------------

def r_squared(observed, predicted) -> float:
    """Squared Pearson correlation, clipped to [0, 1]."""
    obs = np.asarray(observed, dtype=float)
    pred = np.asarray(predicted, dtype=float)
    if len(obs) < 2:
        raise InsufficientDataError("correlation needs at least 2 points")
    if np.std(obs) == 0 or np.std(pred) == 0:
        logger.warning("zero variance in observed or predicted values; R^2 reported as 0")
        return 0.0
    r = np.corrcoef(obs, pred)[0, 1]
    return float(min(max(r * r, 0.0), 1.0))


def rmse(observed, predicted) -> float:
    return float(np.sqrt(mean_squared_error(observed, predicted)))


def accuracy(observed, predicted, baseline: float = None) -> AccuracyReport:
    obs = np.asarray(observed, dtype=float)
    pred = np.asarray(predicted, dtype=float)
    if obs.shape != pred.shape:
        raise ValidationError(f"observed {obs.shape} and predicted {pred.shape} differ in shape")
    if len(obs) < 2:
        raise InsufficientDataError(f"need at least 2 test points, got {len(obs)}")

    null = float("nan")
    if baseline is not None:
        null = rmse(obs, np.full_like(obs, baseline))
    return AccuracyReport(
        r_squared=r_squared(obs, pred),
        rmse=rmse(obs, pred),
        n_test=len(obs),
        null_rmse=null,
    )


# ----------------------------
# Partitioning
# ----------------------------

def split(samples: SampleSet, holdout_fraction: float, seed: int) -> Tuple[SampleSet, SampleSet]:
    if not 0 < holdout_fraction < 1:
        raise ValidationError(f"holdout_fraction must be in (0, 1), got {holdout_fraction}")

    n = len(samples)
    n_test = round(n * holdout_fraction)
    if n - n_test < 1:
        raise ValidationError(
            f"holdout of {n_test} from {n} samples leaves an empty training set"
        )

    perm = np.random.default_rng(seed).permutation(n)
    test_idx = np.sort(perm[:n_test])
    train_idx = np.sort(perm[n_test:])
    return samples.subset(train_idx), samples.subset(test_idx)


def kfold(samples: SampleSet, k: int, seed: int) -> List[Tuple[SampleSet, SampleSet]]:
    n = len(samples)
    if k < 2 or k > n:
        raise ValidationError(f"k must be between 2 and the number of samples ({n}), got {k}")

    perm = np.random.default_rng(seed).permutation(n)
    folds = []
    for test_idx in np.array_split(perm, k):
        train_idx = np.setdiff1d(perm, test_idx)  # sorted
        folds.append((samples.subset(train_idx), samples.subset(np.sort(test_idx))))
    return folds


# ----------------------------
# Evaluation
# ----------------------------

def _fit_and_predict(model_fit_fn: ModelFitFn, train: SampleSet, test: SampleSet) -> np.ndarray:
    model = fit_model(model_fit_fn, train)
    return model.predict_many(test.coordinates)


def evaluate(model_fit_fn: ModelFitFn, train: SampleSet, test: SampleSet) -> AccuracyReport:
    if len(test) < 2:
        raise InsufficientDataError(f"need at least 2 test points, got {len(test)}")
    preds = _fit_and_predict(model_fit_fn, train, test)
    return accuracy(test.values, preds, baseline=float(np.mean(train.values)))


def cross_validate(model_fit_fn: ModelFitFn, samples: SampleSet, k: int = 5, seed: int = 0,
                   progress: bool = False) -> CrossValidationReport:
    folds = kfold(samples, k, seed)
    if any(len(test) < 2 for _, test in folds):
        raise InsufficientDataError(
            f"{len(samples)} samples in {k} folds leaves a fold with fewer than 2 points"
        )

    reports = []
    observed, predicted, baseline = [], [], []
    for i in tqdm(range(k), desc="Cross-validating", disable=not progress):
        train, test = folds[i]
        preds = _fit_and_predict(model_fit_fn, train, test)
        train_mean = float(np.mean(train.values))
        report = accuracy(test.values, preds, baseline=train_mean)
        logger.debug("fold %d: rmse=%.4f r2=%.4f n_test=%d", i, report.rmse, report.r_squared, report.n_test)
        reports.append(report)
        observed.append(test.values)
        predicted.append(preds)
        baseline.append(np.full(len(test), train_mean))

    obs = np.concatenate(observed)
    pooled = accuracy(obs, np.concatenate(predicted))
    pooled = AccuracyReport(pooled.r_squared, pooled.rmse, pooled.n_test,
                            null_rmse=rmse(obs, np.concatenate(baseline)))
    return CrossValidationReport(folds=reports, pooled=pooled)


def grid_search(make_model: Callable[..., SpatialModel], param_grid, samples: SampleSet,
                k: int = 5, seed: int = 0, progress: bool = False) -> GridSearchResult:
    """
    Cross-validate make_model(**params) for every combination in param_grid
    (same folds for each candidate) and rank by mean RMSE.

    e.g. grid_search(IDWModel, {"power": [1, 2, 3], "max_neighbors": [4, 8]}, samples)
    """
    candidates = list(ParameterGrid(param_grid))
    if not candidates:
        raise ValidationError("empty parameter grid")

    rows = []
    best = None
    for params in tqdm(candidates, desc="Grid search", disable=not progress):
        report = cross_validate(make_model(**params), samples, k=k, seed=seed)
        rows.append({**params, "mean_rmse": report.mean_rmse,
                     "mean_r_squared": report.mean_r_squared,
                     "pooled_r_squared": report.pooled.r_squared})
        # first candidate wins ties
        if best is None or report.mean_rmse < best[1].mean_rmse:
            best = (params, report)

    results = pd.DataFrame(rows).sort_values("mean_rmse", kind="stable").reset_index(drop=True)
    logger.info("grid search: best %s (mean rmse %.4f)", best[0], best[1].mean_rmse)
    return GridSearchResult(best_params=best[0], best_report=best[1], results=results)


def compare(models: Sequence[Tuple[str, ModelFitFn]], samples: SampleSet, k: int = 5,
            seed: int = 0) -> pd.DataFrame:
    """Cross-validate several named models on the same folds."""
    rows = []
    for name, model in models:
        report = cross_validate(model, samples, k=k, seed=seed)
        rows.append({
            "model": name,
            "mean_rmse": report.mean_rmse,
            "mean_r_squared": report.mean_r_squared,
            "pooled_r_squared": report.pooled.r_squared,
            "relative_performance": report.pooled.relative_performance,
        })
    return pd.DataFrame(rows)
