import logging
import numpy as np
from carlrun.RBD.utils.preprocessing import samples_per_second
from carlrun.RBD.utils.streaks import Streak, find_streaks

logger = logging.getLogger(__name__)


def window_peak_to_peak(signal: np.ndarray, window_samples: int) -> np.ndarray:
    """
    Peak-to-peak amplitude (max - min) of consecutive, non-overlapping windows.

    Samples after the last full window are ignored. A window containing NaN returns NaN.
    """

    signal = np.asarray(signal, dtype=float)
    n_windows = len(signal) // window_samples
    windowed = signal[: n_windows * window_samples].reshape(n_windows, window_samples)
    return windowed.max(axis=1) - windowed.min(axis=1)


def energetic_activity(
    signal: np.ndarray,
    *,
    window_s: int = 1,
    p2p_threshold_g: float,
    continuity_s: int,
    sampling_rate_hz: float,
) -> np.ndarray:
    """
    Apply the amplitude and continuity rules to a resultant acceleration signal.

    Rule 1 (amplitude): a window passes if its peak-to-peak amplitude is strictly above `p2p_threshold_g`.
    Rule 2 (continuity): a streak of passing samples is kept only if it lasts at least `continuity_s` seconds.

    Parameters
    ----------
    signal : np.ndarray
        (Possibly filtered) resultant acceleration in g. NaN samples are allowed and always fail Rule 1.
        The length must be an integer multiple of the window length.
    window_s : int
        Window length in seconds for the peak-to-peak calculation.
    p2p_threshold_g : float
        Minimum peak-to-peak amplitude for a window to pass the amplitude rule.
    continuity_s : int
        Minimum duration of a streak of passing windows, in seconds.
    sampling_rate_hz : float
        Sampling rate of the signal. Rounded to the nearest integer for windowing, halves rounding up.

    Returns
    -------
    np.ndarray
        Boolean mask with the same length as `signal`, True where both rules pass.

    Notes
    -----
    ``energetic_activity(day_of_data, p2p_threshold_g=1.5, continuity_s=5, sampling_rate_hz=100)`` marks
    activity with at least 1.5 g peak-to-peak amplitude in 1 s windows, sustained for at least 5 s.
    """

    signal = np.asarray(signal, dtype=float)
    fs = samples_per_second(sampling_rate_hz)
    window_samples = fs * window_s

    if len(signal) % window_samples != 0:
        raise ValueError(
            f"Signal length ({len(signal)}) is not a multiple of the window length ({window_samples} samples)."
        )

    # Rule 1: peak-to-peak amplitude, broadcast back to sample resolution
    window_passes = window_peak_to_peak(signal, window_samples) > p2p_threshold_g
    p2p_index = np.repeat(window_passes, window_samples)

    if not p2p_index.any():
        return np.zeros(len(signal), dtype=bool)

    if p2p_index.all():
        streaks = [Streak(start=0, end=len(signal) - 1, length=len(signal), value=True)]
    else:
        streaks = find_streaks(p2p_index)

    # Rule 2: continuous activity
    min_length = continuity_s * fs
    ca_rules_index = np.zeros(len(signal), dtype=bool)
    n_kept = 0
    for streak in streaks:
        if streak.value and streak.length >= min_length:
            ca_rules_index[streak.start:streak.end + 1] = True
            n_kept += 1

    logger.debug("%d of %d streaks passed the amplitude and continuity rules", n_kept, len(streaks))

    return ca_rules_index
