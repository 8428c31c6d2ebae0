import importlib
import pytest
import pandas as pd
import numpy as np
from carlrun.utils.parameters import CarlParameters, ClassifierParameters


def import_class(module_path: str, class_name: str):
    """Dynamically import a class from a module path."""
    module = importlib.import_module(module_path)
    return getattr(module, class_name)


def _as_df_or_empty(data):
    """Ensure output is a pandas DataFrame, or return empty DataFrame if None/empty."""
    if data is None:
        return pd.DataFrame()
    if isinstance(data, pd.DataFrame):
        return data
    return pd.DataFrame(data)


def _synthesize_run(n_seconds=10, sampling_rate_hz=100, step_freq_hz=2.5, amplitude_g=1.5, seed=42):
    """Synthetic resultant acceleration of running: ~1 g offset with a large oscillation at step frequency."""
    n_samples = int(n_seconds * sampling_rate_hz)
    t = np.arange(n_samples) / sampling_rate_hz
    rng = np.random.default_rng(seed)
    return 1.0 + amplitude_g * np.sin(2 * np.pi * step_freq_hz * t) + rng.normal(0, 0.02, n_samples)


def _synthesize_rest(n_seconds=10, sampling_rate_hz=100, seed=42):
    """Synthetic resultant acceleration at rest: 1 g with sensor noise."""
    n_samples = int(n_seconds * sampling_rate_hz)
    rng = np.random.default_rng(seed)
    return 1.0 + rng.normal(0, 0.01, n_samples)


@pytest.fixture
def carl_parameters():
    """
    Parameters that accept any window with a peak-to-peak amplitude above ~2 g, whatever its dominant frequency.

    Real fitted parameters are not bundled with the package.
    """
    return CarlParameters(
        torso=ClassifierParameters(theta=[-10.0, 2.0, 5.0], threshold=0.5),
        wrist=ClassifierParameters(theta=[-10.0, 2.0, 0.0, 5.0], threshold=0.5),
    )


@pytest.fixture
def rejecting_parameters():
    """Parameters that never predict running."""
    return CarlParameters(
        torso=ClassifierParameters(theta=[-10.0, 0.0, 0.0], threshold=0.5),
        wrist=ClassifierParameters(theta=[-10.0, 0.0, 0.0, 0.0], threshold=0.5),
    )


@pytest.fixture
def zeros_signal():
    """20 s of zeros at 100 Hz."""
    return np.zeros(2000)


@pytest.fixture
def run_signal():
    """10 s of running at 2.5 Hz, sampled at 100 Hz."""
    return _synthesize_run(n_seconds=10, sampling_rate_hz=100)


@pytest.fixture
def rest_run_rest_signal():
    """10 s rest, 20 s running, 10 s rest at 100 Hz."""
    return np.concatenate([
        _synthesize_rest(n_seconds=10, seed=1),
        _synthesize_run(n_seconds=20, seed=2),
        _synthesize_rest(n_seconds=10, seed=3),
    ])
