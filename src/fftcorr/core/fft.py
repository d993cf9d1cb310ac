# src/fftcorr/core/fft.py
"""Transform sizing and size-bound real FFTW plans."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Literal, Optional

import numpy as np
import pyfftw
import pyfftw.builders
from scipy import fft as sp_fft

from fftcorr.errors import InvalidModeError, InvalidSizeError

SizePolicy = Literal["fast", "pow2"]

SIZE_POLICIES = ("fast", "pow2")

__all__ = [
    "SizePolicy",
    "SIZE_POLICIES",
    "full_length",
    "next_fast_len_ge",
    "next_pow2_ge",
    "transform_size",
    "zero_pad",
    "TransformPlan",
]

# ---------------------------------------------------------------------------
# Sizing
# ---------------------------------------------------------------------------

def full_length(n: int, m: int) -> int:
    """Length of the full linear correlation; 0 if either input is empty."""
    n, m = int(n), int(m)
    if n <= 0 or m <= 0:
        return 0
    return n + m - 1


def next_fast_len_ge(n: int) -> int:
    """
    Return a 5-smooth length >= n suited to a real-input FFT.

    Parameters
    ----------
    n : int
        Minimum length.

    Returns
    -------
    int
        Fast length >= n (1 for n <= 1).
    """
    if n <= 1:
        return 1
    return int(sp_fft.next_fast_len(int(n), real=True))


def next_pow2_ge(n: int) -> int:
    """Return the smallest power of two >= n (1 for n <= 1)."""
    m = 1
    while m < n:
        m <<= 1
    return m


def transform_size(n: int, m: int, policy: SizePolicy = "fast") -> int:
    """
    Choose the transform size for correlating lengths ``n`` and ``m``.

    The result is never smaller than ``n + m - 1``; a shorter transform
    would wrap the tail of the correlation around onto its head.

    Parameters
    ----------
    n, m : int
        Signal and template lengths.
    policy : {"fast", "pow2"}
        ``"fast"`` picks the next 5-smooth composite, ``"pow2"`` the next
        power of two.

    Returns
    -------
    int
        Transform size (>= 1).
    """
    target = full_length(n, m)
    if policy == "fast":
        size = next_fast_len_ge(target)
    elif policy == "pow2":
        size = next_pow2_ge(target)
    else:
        raise InvalidModeError("size policy", policy, SIZE_POLICIES)
    return size


def zero_pad(x: np.ndarray, size: int, *, reverse: bool = False) -> np.ndarray:
    """
    Copy ``x`` (optionally reversed) into a new zero buffer of length ``size``.

    Parameters
    ----------
    x : ndarray, shape (L,)
        Real input with L <= size.
    size : int
        Output length.
    reverse : bool, default=False
        Write ``x[::-1]`` instead of ``x``.

    Returns
    -------
    ndarray, shape (size,)
        Freshly allocated float64 buffer.
    """
    x = np.asarray(x, dtype=np.float64)
    if x.size > size:
        raise ValueError(f"Cannot pad length {x.size} into size {size}")
    out = np.zeros(int(size), dtype=np.float64)
    out[: x.size] = x[::-1] if reverse else x
    return out


# ---------------------------------------------------------------------------
# Plans
# ---------------------------------------------------------------------------

PLANNER_EFFORT = "FFTW_MEASURE"


def _thread_count(workers: Optional[int]) -> int:
    """Map a scipy-style ``workers`` value to an FFTW thread count."""
    if workers is None:
        return 1
    workers = int(workers)
    if workers > 0:
        return workers
    if workers == 0:
        raise ValueError("workers must be nonzero")
    # negative counts wrap around like scipy.fft: -1 is every CPU
    return max(1, (os.cpu_count() or 1) + 1 + workers)


@dataclass(frozen=True)
class TransformPlan:
    """
    Forward/inverse real FFTW plans bound to one transform size.

    The plans are built once, at construction, on aligned buffers of the
    exact transform shapes; calls only copy data in and out. Both
    directions are un-normalized, so a forward/inverse round trip scales
    the data by ``size``. The caller divides by ``size`` once.

    FFTW plan objects reuse internal buffers and must not be executed from
    two threads at the same time, which is why caches are per thread.

    Attributes
    ----------
    size : int
        Transform length.
    workers : int or None
        Worker count; None runs single-threaded, negative values count back
        from the number of CPUs.
    n_bins : int
        Number of frequency bins of the half spectrum, ``size // 2 + 1``.
    """
    size: int
    workers: Optional[int] = None
    n_bins: int = field(init=False)
    _rfft: object = field(init=False, repr=False, compare=False)
    _irfft: object = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if isinstance(self.size, bool) or int(self.size) != self.size or self.size <= 0:
            raise InvalidSizeError(f"Transform size must be a positive integer, got {self.size!r}")
        size = int(self.size)
        threads = _thread_count(self.workers)
        object.__setattr__(self, "size", size)
        object.__setattr__(self, "n_bins", size // 2 + 1)

        real_buf = pyfftw.empty_aligned(size, dtype="float64")
        spec_buf = pyfftw.empty_aligned(size // 2 + 1, dtype="complex128")
        object.__setattr__(
            self,
            "_rfft",
            pyfftw.builders.rfft(
                real_buf,
                n=size,
                threads=threads,
                planner_effort=PLANNER_EFFORT,
                overwrite_input=False,
                auto_align_input=True,
                auto_contiguous=True,
            ),
        )
        object.__setattr__(
            self,
            "_irfft",
            pyfftw.builders.irfft(
                spec_buf,
                n=size,
                threads=threads,
                planner_effort=PLANNER_EFFORT,
                auto_align_input=True,
                auto_contiguous=True,
            ),
        )

    def forward(self, x: np.ndarray) -> np.ndarray:
        """Half-spectrum of a real buffer of length ``size``."""
        x = np.asarray(x, dtype=np.float64)
        if x.shape != (self.size,):
            raise ValueError(f"Plan of size {self.size} got input of shape {x.shape}")
        # the plan's output buffer is overwritten by the next call
        return np.array(self._rfft(x), copy=True)

    def inverse(self, X: np.ndarray) -> np.ndarray:
        """Real time-domain buffer of length ``size`` from a half spectrum."""
        X = np.asarray(X, dtype=np.complex128)
        if X.shape != (self.n_bins,):
            raise ValueError(f"Plan of size {self.size} expects {self.n_bins} bins, got {X.shape}")
        return np.array(self._irfft(X, normalise_idft=False), copy=True)
