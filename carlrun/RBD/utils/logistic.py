import numpy as np
from typing import Literal
from carlrun.utils.parameters import ClassifierParameters, check_device_location


def sigmoid(z: np.ndarray) -> np.ndarray:
    """Logistic function mapping the linear score to a probability in (0, 1)."""
    return 1.0 / (1.0 + np.exp(-z))


class LogisticBoutClassifier:
    """
    Logistic regression on per-window dominant frequency and peak-to-peak amplitude.

    The wrist version adds the squared dominant frequency as a feature: for wrist-worn sensors the relationship
    between frequency and the probability of running is not monotonic.

    Parameters
    ----------
    device_location : {"torso", "wrist"}
        Sensor location the weights were fitted for.
    parameters : ClassifierParameters
        Fitted weights (intercept first) and decision threshold for that location.
    """

    def __init__(self, *, device_location: Literal["torso", "wrist"], parameters: ClassifierParameters) -> None:
        self.device_location = check_device_location(device_location)
        self.parameters = parameters

        n_features = 4 if self.device_location == "wrist" else 3
        if len(parameters.theta) != n_features:
            raise ValueError(
                f"The {self.device_location} classifier expects {n_features} weights, got {len(parameters.theta)}."
            )

    def build_feature_matrix(self, dominant_freq: np.ndarray, p2p: np.ndarray) -> np.ndarray:
        """Stack ``[1, f, (f^2 for wrist), p2p]`` as one row per window."""

        dominant_freq = np.asarray(dominant_freq, dtype=float)
        p2p = np.asarray(p2p, dtype=float)
        if dominant_freq.shape != p2p.shape:
            raise ValueError("Dominant frequency and peak-to-peak amplitude must have one value per window each.")

        columns = [np.ones_like(dominant_freq), dominant_freq]
        if self.device_location == "wrist":
            columns.append(dominant_freq ** 2)
        columns.append(p2p)

        return np.column_stack(columns)

    def predict_proba(self, features: np.ndarray) -> np.ndarray:
        return sigmoid(features @ self.parameters.theta)

    def predict(self, features: np.ndarray) -> np.ndarray:
        """True for windows whose predicted probability is strictly above the decision threshold."""
        return self.predict_proba(features) > self.parameters.threshold

    def predict_samples(self, dominant_freq: np.ndarray, p2p: np.ndarray, window_samples: int) -> np.ndarray:
        """Per-window predictions repeated to sample resolution."""
        features = self.build_feature_matrix(dominant_freq, p2p)
        return np.repeat(self.predict(features), window_samples)
