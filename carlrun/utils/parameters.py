"""
Loads the fitted logistic classifier parameters.
"""

import json
import numpy as np
from dataclasses import dataclass
from pathlib import Path
from scipy.io import loadmat

# Variable names in the published .mat parameter file
_MAT_KEYS = {
    "torso": ("back_final_theta", "back_best_p"),
    "wrist": ("wrist_final_theta", "wrist_best_p"),
}

DEVICE_LOCATIONS = ("torso", "wrist")


def check_device_location(device_location: str) -> str:
    """Lower-cased device location, or a ValueError if it is neither 'torso' nor 'wrist'."""
    location = str(device_location).lower()
    if location not in DEVICE_LOCATIONS:
        raise ValueError(f"Invalid location: {device_location!r}. Specify 'wrist' or 'torso'.")
    return location


@dataclass(frozen=True)
class ClassifierParameters:
    """Weights (intercept first) and decision threshold of a logistic classifier."""

    theta: np.ndarray
    threshold: float

    def __post_init__(self):
        theta = np.array(self.theta, dtype=float).reshape(-1)
        if theta.size == 0:
            raise ValueError("theta must contain at least one weight.")
        if not 0 < float(self.threshold) < 1:
            raise ValueError(f"threshold must be in (0, 1), got {self.threshold}.")
        # Shared between calls, so it must not be changed in place
        theta.setflags(write=False)
        object.__setattr__(self, "theta", theta)
        object.__setattr__(self, "threshold", float(self.threshold))


@dataclass(frozen=True)
class CarlParameters:
    torso: ClassifierParameters
    wrist: ClassifierParameters

    def for_location(self, device_location: str) -> ClassifierParameters:
        return getattr(self, check_device_location(device_location))


def _from_mat(path: Path) -> CarlParameters:
    mat = loadmat(str(path))
    params = {}
    for location, (theta_key, threshold_key) in _MAT_KEYS.items():
        missing = [key for key in (theta_key, threshold_key) if key not in mat]
        if missing:
            raise ValueError(f"Missing required key(s) {missing} in {path.name}")
        params[location] = ClassifierParameters(
            theta=np.ravel(mat[theta_key]), threshold=float(np.ravel(mat[threshold_key])[0])
        )
    return CarlParameters(**params)


def _from_json(path: Path) -> CarlParameters:
    with open(path) as f:
        content = json.load(f)
    params = {}
    for location in _MAT_KEYS:
        if location not in content or not {"theta", "threshold"}.issubset(content[location]):
            raise ValueError(f"Missing 'theta'/'threshold' for '{location}' in {path.name}")
        params[location] = ClassifierParameters(
            theta=content[location]["theta"], threshold=content[location]["threshold"]
        )
    return CarlParameters(**params)


def load_carl_parameters(path) -> CarlParameters:
    """
    Load torso and wrist classifier parameters from a .mat or .json file.

    The .mat file must hold ``back_final_theta``, ``back_best_p``, ``wrist_final_theta`` and ``wrist_best_p``.
    The .json file must look like ``{"torso": {"theta": [...], "threshold": p}, "wrist": {...}}``.
    """

    path = Path(path)
    if path.suffix == ".mat":
        return _from_mat(path)
    if path.suffix == ".json":
        return _from_json(path)
    raise ValueError(f"Unsupported parameter file type: '{path.suffix}'. Use .mat or .json.")
