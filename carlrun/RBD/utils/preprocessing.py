import warnings
import numpy as np
import pandas as pd
from scipy.interpolate import CubicSpline
from mobgap.data_transform import (
    Resample,
    chain_transformers,
    ButterworthFilter
)


def as_vector(data) -> np.ndarray:
    """
    Convert the input to a 1-D float array.

    Lists, row or column vectors, pd.Series and single-column DataFrames are accepted.
    Anything with more than one non-singleton dimension raises a ValueError.
    """

    if isinstance(data, (pd.DataFrame, pd.Series)):
        data = data.to_numpy()

    arr = np.asarray(data, dtype=float)
    if arr.ndim == 0 or sum(dim != 1 for dim in arr.shape) > 1:
        raise ValueError("Input was not a vector. Did you input a matrix instead?")

    return arr.reshape(-1)


def fill_missing_spline(vm: np.ndarray, *, stacklevel: int = 2) -> np.ndarray:
    """
    Interpolate NaN samples with a cubic spline.

    Only the samples that were present in the input are used as knots, so that filled values never feed back
    into the interpolation. Leading and trailing NaNs are extrapolated.
    """

    missing = np.isnan(vm)
    n_missing = int(missing.sum())
    if n_missing == 0:
        return vm

    warnings.warn(
        f"{n_missing} NaN samples detected in data ({n_missing / len(vm) * 100:.2f}% of total samples). "
        "Interpolating with cubic splines...",
        stacklevel=stacklevel,
    )

    present = np.flatnonzero(~missing)
    if len(present) < 2:
        raise ValueError("Not enough valid samples to interpolate the missing values.")

    filled = vm.copy()
    spline = CubicSpline(present, vm[present], extrapolate=True)
    filled[missing] = spline(np.flatnonzero(missing))

    return filled


def samples_per_second(sampling_rate_hz: float) -> int:
    """Samples in a one second window. Halves round away from zero, so 62.5 Hz gives 63 samples."""
    return int(np.floor(sampling_rate_hz + 0.5))


def check_sampling_rate(sampling_rate_hz: float, *, lowpass_cutoff_hz: float) -> None:
    """Raise a ValueError for rates that can not be windowed in seconds or lowpass filtered at the cutoff."""

    if sampling_rate_hz <= 0 or samples_per_second(sampling_rate_hz) < 1:
        raise ValueError(
            f"sampling_rate_hz must give at least one sample per second, got {sampling_rate_hz}."
        )
    if sampling_rate_hz <= 2 * lowpass_cutoff_hz:
        raise ValueError(
            f"sampling_rate_hz ({sampling_rate_hz}) must be above twice the lowpass cutoff ({lowpass_cutoff_hz} Hz)."
        )


def warn_noninteger_sampling_rate(sampling_rate_hz: float, *, stacklevel: int = 2) -> None:
    if sampling_rate_hz % 1 != 0:
        warnings.warn(
            f"Noninteger sample frequency of {sampling_rate_hz:.2f}. Examining data in windows of "
            f"{samples_per_second(sampling_rate_hz)} samples. The analysis will work just fine but you may want to "
            "resample your data to an integer sample frequency beforehand.",
            stacklevel=stacklevel,
        )


def reflect_pad(vm: np.ndarray, window_samples: int) -> np.ndarray:
    """
    Pad the signal to an integer multiple of `window_samples` by mirroring its tail.

    The last `leftover` samples are appended in reverse order. A signal that already fits is returned unchanged.
    """

    remainder = len(vm) % window_samples
    if remainder == 0:
        return vm

    leftover = window_samples - remainder
    # The reflected block can not be longer than the signal itself
    if leftover > len(vm):
        raise ValueError(f"Signal of {len(vm)} samples is too short to be reflected by {leftover} samples.")

    return np.concatenate([vm, vm[len(vm) - leftover:][::-1]])


def lowpass_butterworth(vm: np.ndarray, *, cutoff_hz: float, sampling_rate_hz: float, order: int = 2) -> np.ndarray:
    """
    Zero-phase Butterworth lowpass filter.

    The filter is applied forward and backward, so the effective magnitude response is of order ``2 * order``.
    The cutoff is normalised to the Nyquist frequency of the (unrounded) sampling rate.
    """

    filter_chain = [("butter", ButterworthFilter(order=order, cutoff_freq_hz=cutoff_hz, filter_type='lowpass'))]
    return np.asarray(chain_transformers(vm, filter_chain, sampling_rate_hz=sampling_rate_hz), dtype=float).reshape(-1)


def resample_detrended(vm: np.ndarray, *, sampling_rate_hz: float, target_sampling_rate_hz: float) -> np.ndarray:
    """
    Resample around the sample mean.

    The mean is removed before resampling and added back afterwards to avoid edge distortion from non-zero-mean data.
    """

    if sampling_rate_hz == target_sampling_rate_hz:
        return vm.copy()

    samp_mean = np.mean(vm)
    filter_chain = [("resampling", Resample(target_sampling_rate_hz))]
    resampled = chain_transformers(vm - samp_mean, filter_chain, sampling_rate_hz=sampling_rate_hz)

    return np.asarray(resampled, dtype=float).reshape(-1) + samp_mean
