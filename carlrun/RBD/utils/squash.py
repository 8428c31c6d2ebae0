import numpy as np
from dataclasses import dataclass


@dataclass(frozen=True)
class SquashSegment:
    """Where a streak of the original signal sits in the squashed buffer."""

    original: range
    compact: range


def build_squash_map(streaks) -> list:
    """
    Place the given streaks back to back in a compact buffer.

    Parameters
    ----------
    streaks : list of Streak
        Streaks to keep, in increasing order.

    Returns
    -------
    list of SquashSegment
    """

    squash_map = []
    offset = 0
    for streak in streaks:
        squash_map.append(
            SquashSegment(
                original=range(streak.start, streak.end + 1),
                compact=range(offset, offset + streak.length),
            )
        )
        offset += streak.length
    return squash_map


def squash(signal: np.ndarray, squash_map: list) -> np.ndarray:
    """Concatenate the mapped regions of `signal` into one contiguous buffer."""
    if not squash_map:
        return np.zeros(0, dtype=np.asarray(signal).dtype)
    return np.concatenate([signal[seg.original.start:seg.original.stop] for seg in squash_map])


def unsquash(values: np.ndarray, squash_map: list, n_samples: int, fill_value=False) -> np.ndarray:
    """
    Scatter a squashed buffer back to the original sample positions.

    Samples outside the mapped regions are set to `fill_value`.
    """

    values = np.asarray(values)
    out = np.full(n_samples, fill_value, dtype=values.dtype)
    for seg in squash_map:
        out[seg.original.start:seg.original.stop] = values[seg.compact.start:seg.compact.stop]
    return out
