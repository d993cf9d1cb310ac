# src/fftcorr/core/scaling.py
"""Constant amplitude scaling of correlation output."""
from __future__ import annotations

from typing import Optional

import numpy as np

from fftcorr.errors import InvalidModeError

SCALINGS = ("none", "peak", "energy")

__all__ = ["SCALINGS", "peak_scale", "energy_scale", "apply_scaling"]


def peak_scale(y: np.ndarray) -> np.ndarray:
    """
    Scale so that the largest absolute value is 1.

    Returns ``y`` as float64 unchanged when it is empty or all zero.
    Non-finite samples are ignored when finding the peak.
    """
    y = np.asarray(y, dtype=np.float64)
    finite = y[np.isfinite(y)]
    m = float(np.max(np.abs(finite))) if finite.size > 0 else 0.0
    if m <= 0.0:
        return y
    return y / m


def energy_scale(y: np.ndarray, signal: np.ndarray, template: np.ndarray) -> np.ndarray:
    """
    Divide by ``sqrt(sum(signal**2) * sum(template**2))``.

    For full overlap this bounds every sample to [-1, 1] (Cauchy-Schwarz).
    No-op when either input has zero energy.
    """
    y = np.asarray(y, dtype=np.float64)
    e = float(np.sum(np.square(signal))) * float(np.sum(np.square(template)))
    if not e > 0.0:
        return y
    return y / np.sqrt(e)


def apply_scaling(
    y: np.ndarray,
    signal: np.ndarray,
    template: np.ndarray,
    mode: Optional[str],
) -> np.ndarray:
    """
    Dispatch amplitude scaling by name.

    Parameters
    ----------
    y : ndarray
        Correlation output.
    signal, template : ndarray
        The inputs ``y`` was computed from.
    mode : {"peak", "energy", "none", None}

    Raises
    ------
    InvalidModeError
        For unknown names.
    """
    if mode is None:
        return np.asarray(y, dtype=np.float64)
    m = str(mode).strip().lower()
    if m in ("none", ""):
        return np.asarray(y, dtype=np.float64)
    if m == "peak":
        return peak_scale(y)
    if m == "energy":
        return energy_scale(y, signal, template)
    raise InvalidModeError("normalization", mode, SCALINGS)
