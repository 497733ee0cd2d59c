import copy
import logging
import os
from pathlib import Path

import yaml

from .errors import ValidationError
from .spatial.base import SpatialModel
from .spatial.idw import IDWModel
from .spatial.kriging import OrdinaryKrigingModel
from .spatial.tps import ThinPlateSplineModel

DEFAULT_CONFIG = Path(__file__).resolve().parent / "default.yaml"
CONFIG_ENV_VAR = "GEOINTERP_CONFIG"


def _merge(base: dict, override: dict) -> dict:
    out = copy.deepcopy(base)
    for key, val in (override or {}).items():
        if isinstance(val, dict) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], val)
        else:
            out[key] = val
    return out


def load_config(path=None) -> dict:
    """
    Packaged defaults, overridden by `path` or, when no path is given,
    by the file named in $GEOINTERP_CONFIG.
    """
    with open(DEFAULT_CONFIG) as f:
        cfg = yaml.safe_load(f)

    path = path or os.environ.get(CONFIG_ENV_VAR)
    if path:
        with open(path) as f:
            override = yaml.safe_load(f) or {}
        if not isinstance(override, dict):
            raise ValidationError(f"config file {path} must contain a mapping")
        cfg = _merge(cfg, override)
    return cfg


def build_model(cfg: dict) -> SpatialModel:
    method = cfg.get("model", {}).get("method", "idw")
    if method == "idw":
        idw = cfg.get("idw", {})
        return IDWModel(power=idw.get("power", 2.0), max_neighbors=idw.get("max_neighbors", 8))
    if method == "tps":
        return ThinPlateSplineModel(smoothing=cfg.get("tps", {}).get("smoothing", 0.0))
    if method == "kriging":
        kr = cfg.get("kriging", {})
        return OrdinaryKrigingModel(variogram=kr.get("variogram", "spherical"), nlags=kr.get("nlags", 6))
    raise ValidationError(f"unknown model method {method!r} (expected idw, tps or kriging)")


def configure_logging(level="INFO"):
    logging.basicConfig(
        level=level.upper() if isinstance(level, str) else level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
