import numpy as np
from carlrun.RBD.utils.energetic_activity import window_peak_to_peak
from carlrun.RBD.utils.preprocessing import (
    as_vector,
    check_sampling_rate,
    fill_missing_spline,
    lowpass_butterworth,
    reflect_pad,
    samples_per_second,
    warn_noninteger_sampling_rate,
)
from carlrun.RBD.utils.wavelet_ridge import wavelet_ridge


def extract_features(
    signal,
    fs1: float,
    fs2: int = 16,
    lowpass_cutoff_hz: float = 8,
    window_seconds: int = 1,
) -> tuple:
    """
    Return the two features used by CARL to identify running.

    Not used by the classifier itself, but useful for debugging or for fitting a new classifier on your own data.

    Parameters
    ----------
    signal : array-like
        Resultant acceleration in g.
    fs1 : float
        Sampling rate of `signal`, in Hz.
    fs2 : int
        Rate for the downsampled wavelet transform (16 Hz for the standard classifier).
    lowpass_cutoff_hz : float
        Cutoff of the Butterworth lowpass applied before the transform (8 Hz for the standard classifier).
    window_seconds : int
        Window size in seconds (1 s for the standard classifier).

    Returns
    -------
    tuple
        ``(dominant_freq_per_window, p2p_per_window)``: wavelet ridge in Hz and peak-to-peak amplitude of the
        filtered signal in g, one value per window.

    Notes
    -----
    The signal is padded by reflection to an integer number of seconds. Data after the last full window is dropped.
    """

    check_sampling_rate(fs1, lowpass_cutoff_hz=lowpass_cutoff_hz)

    vm = as_vector(signal)
    vm = fill_missing_spline(vm, stacklevel=2)
    warn_noninteger_sampling_rate(fs1, stacklevel=2)

    fs = samples_per_second(fs1)
    vm = reflect_pad(vm, fs)

    vm_f = lowpass_butterworth(vm, cutoff_hz=lowpass_cutoff_hz, sampling_rate_hz=fs1)

    p2p = window_peak_to_peak(vm_f, fs * window_seconds)
    dominant_freq, _ = wavelet_ridge(
        vm_f, sampling_rate_hz=fs, target_sampling_rate_hz=fs2, lowpass_cutoff_hz=-1, window_s=window_seconds
    )

    return dominant_freq, p2p
