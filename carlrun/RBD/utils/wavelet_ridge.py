import logging
import warnings
import numpy as np
import pywt
from scipy.signal import find_peaks
from carlrun.RBD.utils.preprocessing import lowpass_butterworth, resample_detrended, samples_per_second

logger = logging.getLogger(__name__)

# Complex Morlet with bandwidth 2 and centre frequency 6 / (2 * pi): the analytic Morlet with omega0 = 6
WAVELET = "cmor2.0-0.954929658551372"
VOICES_PER_OCTAVE = 48
MAX_OCTAVES = 4


def cwt_frequency_bounds(n_samples: int, sampling_rate_hz: float, *, wavelet: str = WAVELET) -> tuple:
    """
    Minimum and maximum frequency (Hz) the continuous wavelet transform can resolve for a signal.

    The maximum frequency is the one whose wavelet has dropped to 50 % of its peak magnitude response at the Nyquist
    frequency. The minimum frequency is the one whose wavelet spans the signal length with two time standard
    deviations on each side of its centre.

    Parameters
    ----------
    n_samples : int
        Length of the signal.
    sampling_rate_hz : float
        Sampling rate of the signal.
    wavelet : str
        Name of a complex Morlet wavelet in PyWavelets ("cmorB-C").

    Returns
    -------
    tuple
        ``(min_freq_hz, max_freq_hz)``
    """

    cwavelet = pywt.ContinuousWavelet(wavelet)
    bandwidth = cwavelet.bandwidth_frequency
    center = cwavelet.center_frequency

    # Fourier transform of the cmor wavelet at scale s: exp(-pi^2 * B * (f * s - C)^2), f in cycles/sample
    nyquist_offset = np.sqrt(np.log(2) / (np.pi ** 2 * bandwidth))
    min_scale = (center + nyquist_offset) / 0.5

    # |psi(t / s)|^2 is a Gaussian with standard deviation s * sqrt(B) / 2
    max_scale = n_samples / (2 * 2 * np.sqrt(bandwidth) / 2)

    max_freq = center / min_scale * sampling_rate_hz
    min_freq = center / max_scale * sampling_rate_hz

    return min_freq, max_freq


def select_n_octaves(n_samples: int, sampling_rate_hz: float, *, max_octaves: int = MAX_OCTAVES) -> int:
    """
    Number of octaves to use for the transform of a signal of the given length.

    Four octaves are plenty for human movement. Shorter signals fall back to 3, 2 or 1 octave.
    A warning is raised when only one octave is possible.
    """

    min_freq, max_freq = cwt_frequency_bounds(n_samples, sampling_rate_hz)
    available = int(np.floor(np.log2(max_freq / min_freq))) if max_freq > min_freq else 0

    if available >= max_octaves:
        return max_octaves
    if available >= 2:
        return available

    warnings.warn("Signal is very short! Only using one octave for CWT. Results may not be accurate.", stacklevel=2)
    return 1


def cwt_power(signal: np.ndarray, sampling_rate_hz: float, n_octaves: int) -> tuple:
    """
    Squared magnitude of the continuous wavelet transform.

    Returns
    -------
    tuple
        ``(power, frequencies)`` with ``power`` of shape (n_frequencies, n_samples) and frequencies in Hz,
        ordered from high to low.
    """

    cwavelet = pywt.ContinuousWavelet(WAVELET)
    _, max_freq = cwt_frequency_bounds(len(signal), sampling_rate_hz)
    n_scales = n_octaves * VOICES_PER_OCTAVE + 1
    frequencies = max_freq * 2.0 ** (-np.arange(n_scales) / VOICES_PER_OCTAVE)
    # Exact centre frequency of the Morlet rather than pywt's numerical estimate
    scales = cwavelet.center_frequency * sampling_rate_hz / frequencies

    # Symmetric extension against edge effects, cropped again after the transform
    n_pad = len(signal) // 2
    extended = np.pad(signal, n_pad, mode="symmetric")
    coeffs, _ = pywt.cwt(extended, scales, cwavelet, sampling_period=1 / sampling_rate_hz, method="fft")
    coeffs = coeffs[:, n_pad:n_pad + len(signal)]

    return np.abs(coeffs) ** 2, frequencies


def dominant_frequency(summed_amplitudes: np.ndarray, frequencies: np.ndarray) -> float:
    """
    Frequency of the largest local maximum of the time-summed coefficients.

    Returns 0 if there is no local maximum (e.g. a flat signal). NaN would break the logistic classifier.
    """

    locs, _ = find_peaks(summed_amplitudes)
    if len(locs) == 0:
        return 0.0
    return float(frequencies[locs[np.argmax(summed_amplitudes[locs])]])


def wavelet_ridge(
    signal: np.ndarray,
    *,
    sampling_rate_hz: int,
    target_sampling_rate_hz: int = 16,
    lowpass_cutoff_hz: float = -1,
    window_s: int = 1,
) -> tuple:
    """
    Dominant frequency (wavelet ridge) of a signal in fixed-size windows.

    The magnitude of the continuous wavelet transform coefficients is summed across each window before looking for
    the maximum. Averaging over the window, rather than per sample, is what allows very short bouts to be resolved.

    Parameters
    ----------
    signal : np.ndarray
        (Possibly filtered) resultant acceleration in g. Should be an integer number of seconds long.
    sampling_rate_hz : int
        Sampling rate of `signal`.
    target_sampling_rate_hz : int
        Rate the signal is downsampled to before the transform. Use 16 Hz (twice the lowpass cutoff) for running.
    lowpass_cutoff_hz : float
        Cutoff of a 2nd order zero-phase Butterworth lowpass applied before downsampling. -1 skips the filter.
    window_s : int
        Window length in seconds.

    Returns
    -------
    tuple
        ``(ridge_per_window, ridge_per_sample)``: dominant frequency in Hz per window, and the same values repeated
        at the original sampling rate for plotting alongside the signal.

    Notes
    -----
    Data after the last full window is not processed.
    """

    signal = np.asarray(signal, dtype=float)

    if lowpass_cutoff_hz != -1:
        signal = lowpass_butterworth(signal, cutoff_hz=lowpass_cutoff_hz, sampling_rate_hz=sampling_rate_hz)

    downsampled = resample_detrended(
        signal, sampling_rate_hz=sampling_rate_hz, target_sampling_rate_hz=target_sampling_rate_hz
    )

    window_samples = samples_per_second(target_sampling_rate_hz * window_s)
    n_windows = len(downsampled) // window_samples
    ridge_per_window = np.zeros(n_windows)

    if n_windows == 0:
        return ridge_per_window, np.zeros(0)

    n_octaves = select_n_octaves(len(downsampled), target_sampling_rate_hz)
    logger.debug("CWT over %d samples with %d octaves", len(downsampled), n_octaves)

    power, frequencies = cwt_power(downsampled, target_sampling_rate_hz, n_octaves)

    for i in range(n_windows):
        summed_amplitudes = power[:, i * window_samples:(i + 1) * window_samples].sum(axis=1)
        ridge_per_window[i] = dominant_frequency(summed_amplitudes, frequencies)

    ridge_per_sample = np.repeat(ridge_per_window, samples_per_second(sampling_rate_hz) * window_s)

    return ridge_per_window, ridge_per_sample
