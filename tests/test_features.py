import pytest
import numpy as np
from conftest import _synthesize_run, _synthesize_rest
from carlrun.RBD.features import extract_features


def test_features_of_running():
    vm = _synthesize_run(n_seconds=10, sampling_rate_hz=100, step_freq_hz=2.5, amplitude_g=1.5)
    dominant_freq, p2p = extract_features(vm, 100, 16, 8, 1)

    assert len(dominant_freq) == len(p2p) == 10
    np.testing.assert_allclose(dominant_freq[2:8], 2.5, atol=0.3)
    np.testing.assert_allclose(p2p[1:-1], 3.0, atol=0.15)


def test_features_of_rest_have_low_amplitude():
    _, p2p = extract_features(_synthesize_rest(n_seconds=10), 100)
    assert np.all(p2p < 0.2)


def test_features_pad_to_whole_seconds():
    vm = _synthesize_run(n_seconds=10, sampling_rate_hz=100)[:950]
    dominant_freq, p2p = extract_features(vm, 100)
    assert len(dominant_freq) == len(p2p) == 10


def test_features_longer_windows():
    vm = _synthesize_run(n_seconds=10, sampling_rate_hz=100)
    dominant_freq, p2p = extract_features(vm, 100, window_seconds=2)
    assert len(dominant_freq) == len(p2p) == 5


def test_features_warn_for_missing_values():
    vm = _synthesize_run(n_seconds=10, sampling_rate_hz=100)
    vm[10] = np.nan
    with pytest.warns(UserWarning, match="NaN samples"):
        dominant_freq, _ = extract_features(vm, 100)
    assert not np.isnan(dominant_freq).any()


def test_features_reject_matrix():
    with pytest.raises(ValueError):
        extract_features(np.ones((1000, 3)), 100)


@pytest.mark.parametrize("fs1", [0, 0.4, 16])
def test_features_reject_unusable_sampling_rate(fs1):
    with pytest.raises(ValueError):
        extract_features(np.ones(10), fs1)


def test_features_half_sample_rate_windows():
    vm = _synthesize_run(n_seconds=10, sampling_rate_hz=62.5)
    assert len(vm) == 625
    with pytest.warns(UserWarning, match="63 samples"):
        dominant_freq, p2p = extract_features(vm, 62.5)
    # Padded to 630 samples, ten windows of 63
    assert len(dominant_freq) == len(p2p) == 10
