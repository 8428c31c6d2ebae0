import logging
import warnings
import numpy as np
import pandas as pd
from typing import Literal, Union
from typing_extensions import Self
from carlrun.RBD.utils.energetic_activity import energetic_activity, window_peak_to_peak
from carlrun.RBD.utils.logistic import LogisticBoutClassifier, check_device_location
from carlrun.RBD.utils.preprocessing import (
    as_vector,
    check_sampling_rate,
    fill_missing_spline,
    lowpass_butterworth,
    reflect_pad,
    samples_per_second,
    warn_noninteger_sampling_rate,
)
from carlrun.RBD.utils.squash import build_squash_map, squash, unsquash
from carlrun.RBD.utils.streaks import Streak, bouts_to_dataframe, find_streaks
from carlrun.RBD.utils.wavelet_ridge import wavelet_ridge
from carlrun.utils.parameters import CarlParameters, ClassifierParameters

logger = logging.getLogger(__name__)


class CarlRBD:
    """
    Implementation of the CARL (Continuous Amplitude Running Logistic) running bout detection algorithm [1].

    The algorithm detects bouts of running in resultant (vector magnitude) acceleration from a wearable sensor.
    It uses the peak-to-peak amplitude and the dominant frequency, computed with the continuous wavelet transform,
    of one second windows.

    Steps:
    1. Validate the input, interpolate missing samples and pad to an integer number of seconds by reflection.
    2. Lowpass filter (2nd order zero-phase Butterworth, 8 Hz cutoff).
    3. Apply the amplitude (1 g peak-to-peak per second) and continuity rules.
    4. Squash the surviving samples into one contiguous signal.
    5. Calculate peak-to-peak amplitude and wavelet ridge (dominant frequency) per second on the squashed signal.
    6. Classify each second with a location-specific logistic regression and scatter the result back.
    7. Apply the amplitude and continuity rules again on the samples classified as running.

    [1] Davis, J. J., Straczkiewicz, M., Harezlak, J., & Gruber, A. H. (2021).
    CARL: a running recognition algorithm for free-living accelerometer data.
    Physiological Measurement, 42(11), 115001.

    Parameters
    ----------
    device_location : {"torso", "wrist"}
        Use "torso" for low back, hip, waist, chest or head sensors and "wrist" for wrist or forearm sensors.
        Foot, ankle, shin and thigh locations are not supported.
    continuity_s : int
        Minimum running bout duration in seconds. Bouts as short as three seconds are supported; one or two seconds
        work but raise a warning because the dominant frequency becomes less precise.
    parameters : CarlParameters or ClassifierParameters
        Fitted logistic parameters. If a CarlParameters is passed, the set for `device_location` is used.

    Attributes
    ----------
    rb_mask_ : np.ndarray
        Boolean mask, same length as the input, True during running.
    rb_list_ : pd.DataFrame
        Start and end (exclusive) sample of each running bout.
    energetic_mask_ : np.ndarray
        Samples that passed the amplitude and continuity rules before classification.
    dominant_freq_per_window_ : np.ndarray
        Wavelet ridge (Hz) of each second of the squashed signal.
    p2p_per_window_ : np.ndarray
        Peak-to-peak amplitude (g) of each second of the squashed signal.
    squash_map_ : list
        Original and squashed position of each energetic streak.

    Notes
    -----
    - Validated on data from 20 to 205 Hz. Non-integer sampling rates work with windows of fs samples rounded to the
      nearest integer, halves rounding up (62.5 Hz gives 63 samples).
    - Jump-roping and elliptical machine use are the typical sources of false positives.
    - Very slow running, or holding a treadmill rail with a wrist sensor, may be missed.
    """

    rb_mask_: np.ndarray
    rb_list_: pd.DataFrame

    def __init__(
        self,
        *,
        device_location: Literal["torso", "wrist"] = "torso",
        continuity_s: int = 5,
        parameters: Union[CarlParameters, ClassifierParameters],
        p2p_threshold_g: float = 1.0,
        lowpass_cutoff_hz: float = 8,
        downsample_rate_hz: int = 16,
        filter_order: int = 2,
    ) -> None:
        self.device_location = check_device_location(device_location)

        if int(continuity_s) != continuity_s or continuity_s < 1:
            raise ValueError(f"continuity_s must be a positive integer number of seconds, got {continuity_s}.")
        if continuity_s < 3:
            warnings.warn(
                f"Bouts as short as {continuity_s} s will be detected, but the dominant frequency is less precise "
                "for bouts shorter than 3 s.",
                stacklevel=2,
            )
        self.continuity_s = int(continuity_s)

        if isinstance(parameters, CarlParameters):
            parameters = parameters.for_location(self.device_location)
        self.parameters = parameters
        self.classifier = LogisticBoutClassifier(device_location=self.device_location, parameters=parameters)

        self.p2p_threshold_g = p2p_threshold_g
        self.lowpass_cutoff_hz = lowpass_cutoff_hz
        self.downsample_rate_hz = downsample_rate_hz
        self.filter_order = filter_order

    def _validate(self, data, sampling_rate_hz: float) -> np.ndarray:
        check_sampling_rate(sampling_rate_hz, lowpass_cutoff_hz=self.lowpass_cutoff_hz)

        vm = as_vector(data)

        min_samples = samples_per_second(sampling_rate_hz) * self.continuity_s
        if len(vm) < min_samples:
            raise ValueError(
                f"vm is length {len(vm)} but your desired continuity length expects bouts of at least "
                f"{min_samples} samples of running."
            )

        # Wrong units or non-resultant data
        mean_vm = np.nanmean(vm)
        if mean_vm > 7.0:
            warnings.warn(
                f"Acceleration data had a mean of {mean_vm:.2f}. Are you sure that your data are in g-units?",
                stacklevel=3,
            )

        vm = fill_missing_spline(vm, stacklevel=3)
        warn_noninteger_sampling_rate(sampling_rate_hz, stacklevel=3)

        return vm

    def _set_no_running(self, n_samples: int, energetic_mask: np.ndarray) -> None:
        self.rb_mask_ = np.zeros(n_samples, dtype=bool)
        self.rb_list_ = bouts_to_dataframe(self.rb_mask_)
        self.energetic_mask_ = energetic_mask
        self.dominant_freq_per_window_ = np.zeros(0)
        self.p2p_per_window_ = np.zeros(0)
        self.squash_map_ = []

    def detect(self, data, *, sampling_rate_hz: float) -> Self:
        """
        Detect running bouts in resultant acceleration.

        Parameters
        ----------
        data : array-like
            Resultant acceleration in g. A 1-D array, list, pd.Series, single-column pd.DataFrame or row vector.
        sampling_rate_hz : float
            Sampling rate of the data.

        Returns
        -------
        Self
            The instance with the running mask in `rb_mask_` and the bouts in `rb_list_`.
        """

        self.data = data
        self.sampling_rate_hz = sampling_rate_hz

        vm = self._validate(data, sampling_rate_hz)
        fs = samples_per_second(sampling_rate_hz)
        vm_orig_len = len(vm)

        # Pad to an integer number of seconds, truncated again at the end
        vm = reflect_pad(vm, fs)

        vm_f = lowpass_butterworth(
            vm, cutoff_hz=self.lowpass_cutoff_hz, sampling_rate_hz=sampling_rate_hz, order=self.filter_order
        )

        # Amplitude and continuity rules
        ec_logical = energetic_activity(
            vm_f,
            window_s=1,
            p2p_threshold_g=self.p2p_threshold_g,
            continuity_s=self.continuity_s,
            sampling_rate_hz=sampling_rate_hz,
        )

        if not ec_logical.any():
            logger.debug("No energetic activity found, skipping classification")
            self._set_no_running(vm_orig_len, ec_logical[:vm_orig_len])
            return self

        if ec_logical.all():
            ec_streaks = [Streak(start=0, end=len(vm_f) - 1, length=len(vm_f), value=True)]
        else:
            ec_streaks = [s for s in find_streaks(ec_logical) if s.value]

        # Squash the energetic activity into one continuous signal to compute the features.
        # Every streak is made of whole seconds, so the squashed signal is too.
        squash_map = build_squash_map(ec_streaks)
        squashed = squash(vm_f, squash_map)
        logger.debug("Squashed %d energetic streaks into %d samples", len(squash_map), len(squashed))

        p2p = window_peak_to_peak(squashed, fs)
        # Already filtered, so no lowpass here
        dominant_freq, _ = wavelet_ridge(
            squashed,
            sampling_rate_hz=fs,
            target_sampling_rate_hz=self.downsample_rate_hz,
            lowpass_cutoff_hz=-1,
            window_s=1,
        )

        lr_squashed = self.classifier.predict_samples(dominant_freq, p2p, fs)
        lr_logical = unsquash(lr_squashed, squash_map, len(vm_f), fill_value=False)

        # Apply the rules again on what was classified as running
        vm_ec_lr = np.where(ec_logical & lr_logical, vm_f, np.nan)
        ec_lr_cont_logical = energetic_activity(
            vm_ec_lr,
            window_s=1,
            p2p_threshold_g=self.p2p_threshold_g,
            continuity_s=self.continuity_s,
            sampling_rate_hz=sampling_rate_hz,
        )

        final_logical = ec_logical & lr_logical & ec_lr_cont_logical

        self.rb_mask_ = final_logical[:vm_orig_len]
        self.rb_list_ = bouts_to_dataframe(self.rb_mask_)
        self.energetic_mask_ = ec_logical[:vm_orig_len]
        self.dominant_freq_per_window_ = dominant_freq
        self.p2p_per_window_ = p2p
        self.squash_map_ = squash_map

        return self


def classify(
    signal,
    device_location: Literal["torso", "wrist"],
    continuity_seconds: int,
    sampling_rate_hz: float,
    *,
    parameters: Union[CarlParameters, ClassifierParameters],
) -> np.ndarray:
    """
    Detect bouts of running in resultant acceleration.

    Returns a boolean array the same length as `signal`, True during running bouts of at least
    `continuity_seconds`. See CarlRBD for the details.
    """

    return CarlRBD(
        device_location=device_location, continuity_s=continuity_seconds, parameters=parameters
    ).detect(signal, sampling_rate_hz=sampling_rate_hz).rb_mask_
