# src/fftcorr/xcorr/correlate.py
"""1D cross-correlation via FFT with full/same/valid output modes."""
from __future__ import annotations

from typing import Literal, Optional

import numpy as np

from fftcorr.core.fft import SIZE_POLICIES, SizePolicy, full_length, transform_size, zero_pad
from fftcorr.core.modes import Mode, ModeLike, slice_mode
from fftcorr.core.plans import PlanCache, get_plan_cache
from fftcorr.core.scaling import SCALINGS, apply_scaling
from fftcorr.errors import EmptyInputError, InputError, InvalidModeError, TransformAllocationError
from fftcorr.log import get_logger

Method = Literal["fft", "direct"]

METHODS = ("fft", "direct")

__all__ = [
    "Method",
    "METHODS",
    "as_series",
    "correlate_full",
    "direct_correlate_full",
    "correlate",
    "autocorrelate",
]

logger = get_logger(__name__)


# ---------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------

def as_series(x, name: str = "input") -> np.ndarray:
    """
    Convert ``x`` to a fresh 1D float64 array.

    Raises
    ------
    InputError
        If ``x`` is not one-dimensional or holds complex values.
    """
    try:
        arr = np.asarray(x)
    except (TypeError, ValueError) as exc:
        raise InputError(f"{name} must be a 1D sequence: {exc}") from exc
    if np.iscomplexobj(arr):
        raise InputError(f"{name} must be real-valued, got dtype {arr.dtype}")
    if arr.ndim != 1:
        raise InputError(f"{name} must be 1D, got shape {arr.shape}")
    try:
        return np.array(arr, dtype=np.float64, copy=True)
    except (TypeError, ValueError) as exc:
        raise InputError(f"{name} must hold real numbers: {exc}") from exc


# ---------------------------------------------------------------------
# Kernels
# ---------------------------------------------------------------------

def _fft_full(
    x: np.ndarray,
    h: np.ndarray,
    size_policy: SizePolicy,
    cache: Optional[PlanCache],
) -> np.ndarray:
    n, m = x.size, h.size
    L = full_length(n, m)
    if L == 0:
        return np.zeros(0, dtype=np.float64)

    size = transform_size(n, m, size_policy)
    try:
        plan = (cache if cache is not None else get_plan_cache()).get_or_create(size)
        X = plan.forward(zero_pad(x, size))
        H = plan.forward(zero_pad(h, size, reverse=True))
        y = plan.inverse(X * H)
    except MemoryError as exc:
        raise TransformAllocationError(size) from exc

    y /= size
    return np.array(y[:L], dtype=np.float64, copy=True)


def _direct_full(x: np.ndarray, h: np.ndarray) -> np.ndarray:
    n, m = x.size, h.size
    L = full_length(n, m)
    out = np.zeros(L, dtype=np.float64)
    if L == 0:
        return out
    # output index k collects template[j] * signal[k - (m - 1 - j)]
    for j, t in enumerate(h[::-1]):
        out[j : j + n] += t * x
    return out


def correlate_full(
    signal,
    template,
    *,
    size_policy: SizePolicy = "fast",
    cache: Optional[PlanCache] = None,
) -> np.ndarray:
    """
    Full cross-correlation computed with real FFTs.

    The template is reversed before padding, turning correlation into a
    linear convolution that the transform evaluates without wrap-around as
    long as the transform size is at least ``N + M - 1``.

    Parameters
    ----------
    signal : array_like, shape (N,)
    template : array_like, shape (M,)
    size_policy : {"fast", "pow2"}
        Transform size selection, see :func:`fftcorr.core.fft.transform_size`.
    cache : PlanCache or None
        Plan cache to use. Defaults to the calling thread's cache.

    Returns
    -------
    ndarray, shape (N + M - 1,)
        ``out[k] = sum_i signal[i] * template[i - k + M - 1]``. Empty when
        either input is empty.

    Raises
    ------
    TransformAllocationError
        Plan or transform buffers could not be allocated.
    """
    if size_policy not in SIZE_POLICIES:
        raise InvalidModeError("size policy", size_policy, SIZE_POLICIES)
    x = as_series(signal, "signal")
    h = as_series(template, "template")
    return _fft_full(x, h, size_policy, cache)


def direct_correlate_full(signal, template) -> np.ndarray:
    """
    Full cross-correlation by direct summation, O(N*M).

    Same indexing as :func:`correlate_full`; useful for short templates and
    as a reference for the FFT path.
    """
    return _direct_full(as_series(signal, "signal"), as_series(template, "template"))


# ---------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------

def correlate(
    signal,
    template,
    mode: ModeLike = Mode.FULL,
    *,
    method: Method = "fft",
    size_policy: SizePolicy = "fast",
    normalize: Optional[str] = None,
    allow_empty: bool = True,
    cache: Optional[PlanCache] = None,
) -> np.ndarray:
    """
    Cross-correlate two 1D real sequences.

    Parameters
    ----------
    signal : array_like, shape (N,)
        Reference sequence; defines the ``"same"`` output length.
    template : array_like, shape (M,)
        Sequence slid across ``signal``.
    mode : {"full", "same", "valid"} or Mode
        - ``"full"``: every lag with any overlap, length ``N + M - 1``.
        - ``"same"``: centered window of ``"full"``, length ``N``.
        - ``"valid"``: lags with complete overlap, length ``max(N - M + 1, 0)``.
    method : {"fft", "direct"}
        Computation path. Both follow the same indexing.
    size_policy : {"fast", "pow2"}
        Transform size selection for ``method="fft"``.
    normalize : {"peak", "energy", "none", None}
        Constant amplitude scaling of the output, see :mod:`fftcorr.core.scaling`.
    allow_empty : bool, default=True
        If False, an empty ``signal`` or ``template`` raises
        :class:`EmptyInputError`. Otherwise every mode yields an empty array.
    cache : PlanCache or None
        Plan cache for the FFT path. Defaults to the calling thread's cache.

    Returns
    -------
    ndarray of float64
        Freshly allocated result.

    Raises
    ------
    InvalidModeError
        Unknown ``mode``, ``method``, ``size_policy`` or ``normalize``.
    InputError
        Input is not 1D or is complex.
    EmptyInputError
        Empty input with ``allow_empty=False``.
    TransformAllocationError
        Transform buffers could not be allocated.
    """
    mode = Mode.coerce(mode)
    if method not in METHODS:
        raise InvalidModeError("method", method, METHODS)
    if size_policy not in SIZE_POLICIES:
        raise InvalidModeError("size policy", size_policy, SIZE_POLICIES)
    if normalize is not None and str(normalize).strip().lower() not in SCALINGS + ("",):
        raise InvalidModeError("normalization", normalize, SCALINGS)

    x = as_series(signal, "signal")
    h = as_series(template, "template")
    n, m = x.size, h.size

    if n == 0 or m == 0:
        if not allow_empty:
            raise EmptyInputError(n, m)
        return np.zeros(0, dtype=np.float64)

    if method == "fft":
        full = _fft_full(x, h, size_policy, cache)
    else:
        full = _direct_full(x, h)

    out = slice_mode(full, n, m, mode)
    out = apply_scaling(out, x, h, normalize)
    logger.debug(
        "correlation_computed",
        n=n,
        m=m,
        mode=mode.value,
        method=method,
        length=int(out.size),
    )
    return out


def autocorrelate(signal, mode: ModeLike = Mode.SAME, **kwargs) -> np.ndarray:
    """
    Correlate ``signal`` with itself.

    In ``"same"`` mode the zero-lag peak lands at index ``N // 2``.
    Keyword arguments are forwarded to :func:`correlate`.
    """
    x = as_series(signal, "signal")
    return correlate(x, x, mode, **kwargs)
