# src/fftcorr/core/modes.py
"""Output modes: lengths, slicing of the full correlation, and lag axes."""
from __future__ import annotations

from enum import Enum
from typing import Union

import numpy as np

from fftcorr.core.fft import full_length
from fftcorr.errors import InvalidModeError

__all__ = ["Mode", "ModeLike", "output_length", "mode_bounds", "slice_mode", "lag_axis"]


class Mode(str, Enum):
    """Which part of the full correlation is returned."""
    FULL = "full"
    SAME = "same"
    VALID = "valid"

    @classmethod
    def coerce(cls, value: "ModeLike") -> "Mode":
        """Accept a :class:`Mode` or its name/value in any letter case."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            for member in cls:
                if member.value == key:
                    return member
        raise InvalidModeError("mode", value, [m.value for m in cls])


ModeLike = Union[Mode, str]


def mode_bounds(n: int, m: int, mode: ModeLike) -> tuple[int, int]:
    """
    Start offset and length of ``mode`` inside the full correlation.

    Parameters
    ----------
    n, m : int
        Signal and template lengths.
    mode : Mode or str

    Returns
    -------
    (start, length) : tuple[int, int]
        Both 0 when either input is empty.
    """
    mode = Mode.coerce(mode)
    L = full_length(n, m)
    if L == 0:
        return 0, 0
    if mode is Mode.FULL:
        return 0, L
    if mode is Mode.SAME:
        return (L - n) // 2, n
    return m - 1, max(n - m + 1, 0)


def output_length(n: int, m: int, mode: ModeLike) -> int:
    """Length of the correlation returned for ``mode``."""
    return mode_bounds(n, m, mode)[1]


def slice_mode(full: np.ndarray, n: int, m: int, mode: ModeLike) -> np.ndarray:
    """
    Select the ``mode`` window from a full correlation.

    Parameters
    ----------
    full : ndarray, shape (n + m - 1,)
        Full correlation of a length-``n`` signal with a length-``m`` template.
    n, m : int
        Signal and template lengths.
    mode : Mode or str

    Returns
    -------
    ndarray
        A copy of the selected range; ``full`` itself is never returned.
    """
    full = np.asarray(full)
    if full.shape != (full_length(n, m),):
        raise ValueError(
            f"Full correlation of lengths {n} and {m} must have shape "
            f"({full_length(n, m)},), got {full.shape}"
        )
    start, length = mode_bounds(n, m, mode)
    return full[start : start + length].copy()


def lag_axis(n: int, m: int, mode: ModeLike) -> np.ndarray:
    """
    Lag of every output sample for ``mode``.

    Lag ``k`` means ``template[0]`` sits over ``signal[k]``; the first
    full-mode sample has lag ``-(m - 1)``.

    Returns
    -------
    ndarray of int64
    """
    start, length = mode_bounds(n, m, mode)
    return np.arange(length, dtype=np.int64) + (start - (m - 1))
