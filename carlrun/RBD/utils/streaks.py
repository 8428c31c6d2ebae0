import numpy as np
import pandas as pd
from dataclasses import dataclass


@dataclass(frozen=True)
class Streak:
    """
    A maximal run of identical values in a boolean sequence.

    Indices are 0-based and inclusive, so the streak covers ``values[start:end + 1]``.
    """

    start: int
    end: int
    length: int
    value: bool


def _as_bool_vector(values) -> np.ndarray:
    """Flatten row/column vectors to 1-D and reject anything with more than one non-singleton dimension."""
    arr = np.asarray(values)
    if sum(dim != 1 for dim in arr.shape) > 1:
        raise ValueError("Only vector inputs are accepted. Did you pass a matrix instead?")
    return arr.reshape(-1).astype(bool)


def find_streaks(values) -> list:
    """
    Split a boolean sequence into its maximal streaks.

    Parameters
    ----------
    values : array-like of bool
        Boolean vector of length >= 1.

    Returns
    -------
    list of Streak
        Streaks in increasing order. Together they cover every index exactly once.
    """

    v = _as_bool_vector(values)
    n = len(v)
    if n == 0:
        raise ValueError("Can not find streaks in an empty sequence.")

    # Indices where a streak ends: every position followed by a change, plus the last sample
    ends = np.flatnonzero(v[1:] != v[:-1])
    ends = np.append(ends, n - 1)
    starts = np.concatenate(([0], ends[:-1] + 1))

    return [
        Streak(start=int(s), end=int(e), length=int(e - s + 1), value=bool(v[s]))
        for s, e in zip(starts, ends)
    ]


def find_bouts(mask):
    """
    Count bouts (uninterrupted streaks) of True values in a boolean vector.

    Parameters
    ----------
    mask : array-like of bool
        Vector in which bouts of True are searched. Row vectors are accepted.

    Returns
    -------
    tuple
        ``(n_bouts, starts, ends, lengths)``. ``starts`` and ``ends`` are inclusive 0-based indices,
        ``lengths`` are in samples. All three arrays are empty when ``n_bouts == 0``.
    """

    v = _as_bool_vector(mask)

    if not v.any():
        empty = np.array([], dtype=int)
        return 0, empty, empty.copy(), empty.copy()

    if v.all():
        n = len(v)
        return 1, np.array([0]), np.array([n - 1]), np.array([n])

    true_streaks = [s for s in find_streaks(v) if s.value]
    starts = np.array([s.start for s in true_streaks], dtype=int)
    ends = np.array([s.end for s in true_streaks], dtype=int)
    lengths = np.array([s.length for s in true_streaks], dtype=int)

    return len(true_streaks), starts, ends, lengths


def bouts_to_dataframe(mask) -> pd.DataFrame:
    """
    Bouts of True values as a DataFrame with ``start`` and ``end`` columns.

    ``end`` is exclusive so that ``signal[start:end]`` returns the bout.
    """

    _, starts, ends, _ = find_bouts(mask)
    rb_list = pd.DataFrame({"start": starts.astype(int), "end": (ends + 1).astype(int)})
    rb_list.index.name = "rb_id"
    return rb_list
