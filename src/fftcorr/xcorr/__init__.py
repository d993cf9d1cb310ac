"""
fftcorr.xcorr
=============

1D cross-correlation of real sequences.

Submodules
----------
- :mod:`fftcorr.xcorr.correlate` : FFT and direct kernels, public entry points.
"""

from .correlate import (
    METHODS,
    correlate,
    correlate_full,
    direct_correlate_full,
    autocorrelate,
)

__all__ = [
    "METHODS",
    "correlate",
    "correlate_full",
    "direct_correlate_full",
    "autocorrelate",
]
