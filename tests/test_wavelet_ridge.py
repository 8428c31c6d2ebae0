import warnings
import pytest
import numpy as np
from carlrun.RBD.utils.wavelet_ridge import (
    cwt_frequency_bounds,
    dominant_frequency,
    select_n_octaves,
    wavelet_ridge,
)
from conftest import _synthesize_run


@pytest.mark.parametrize("n_samples,expected", [(32, 2), (64, 3), (128, 4), (16 * 3600, 4)])
def test_select_n_octaves(n_samples, expected):
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        assert select_n_octaves(n_samples, 16) == expected


def test_select_n_octaves_warns_at_one_octave():
    with pytest.warns(UserWarning, match="very short"):
        assert select_n_octaves(16, 16) == 1


def test_select_n_octaves_is_monotone():
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        octaves = [select_n_octaves(n, 16) for n in range(16, 400, 8)]
    assert octaves == sorted(octaves)
    assert min(octaves) >= 1 and max(octaves) <= 4


def test_frequency_bounds_below_nyquist():
    min_freq, max_freq = cwt_frequency_bounds(160, 16)
    assert 0 < min_freq < max_freq < 8


def test_dominant_frequency_picks_largest_local_maximum():
    frequencies = np.array([8.0, 6.0, 4.0, 3.0, 2.0, 1.0])
    summed = np.array([0.0, 5.0, 1.0, 9.0, 2.0, 20.0])
    # 20.0 sits on the edge and is not a local maximum
    assert dominant_frequency(summed, frequencies) == 3.0


def test_dominant_frequency_without_local_maximum_is_zero():
    assert dominant_frequency(np.linspace(0, 1, 10), np.linspace(8, 1, 10)) == 0.0


def test_wavelet_ridge_finds_step_frequency():
    vm = _synthesize_run(n_seconds=10, sampling_rate_hz=100, step_freq_hz=2.5)
    ridge, ridge_per_sample = wavelet_ridge(vm, sampling_rate_hz=100, target_sampling_rate_hz=16)

    assert len(ridge) == 10
    assert len(ridge_per_sample) == 1000
    np.testing.assert_allclose(ridge[2:8], 2.5, atol=0.3)
    np.testing.assert_array_equal(ridge_per_sample[:100], ridge[0])


def test_wavelet_ridge_with_filter():
    fs = 100
    t = np.arange(10 * fs) / fs
    vm = 1 + np.sin(2 * np.pi * 2 * t) + 0.5 * np.sin(2 * np.pi * 20 * t)
    ridge, _ = wavelet_ridge(vm, sampling_rate_hz=fs, target_sampling_rate_hz=16, lowpass_cutoff_hz=8)
    np.testing.assert_allclose(ridge[2:8], 2.0, atol=0.3)


def test_wavelet_ridge_flat_signal_is_zero_not_nan():
    ridge, _ = wavelet_ridge(np.zeros(500), sampling_rate_hz=100, target_sampling_rate_hz=16)
    assert len(ridge) == 5
    assert not np.isnan(ridge).any()
    np.testing.assert_array_equal(ridge, 0.0)


def test_wavelet_ridge_discards_partial_window():
    vm = _synthesize_run(n_seconds=6, sampling_rate_hz=100)
    ridge, ridge_per_sample = wavelet_ridge(vm, sampling_rate_hz=100, target_sampling_rate_hz=16, window_s=4)
    assert len(ridge) == 1
    assert len(ridge_per_sample) == 400
