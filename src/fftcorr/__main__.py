"""
Diagnostics entry for the fftcorr package.

Usage
-----
$ python -m fftcorr
"""

import numpy as np

from . import __version__
from .core import get_plan_cache, lag_axis
from .xcorr import correlate, direct_correlate_full


def _diagnostics():
    print(f"fftcorr FFT cross-correlation v{__version__}\n")

    rng = np.random.default_rng(0)
    x = rng.standard_normal(64)
    h = rng.standard_normal(9)

    print("FFT vs direct check:")
    full = correlate(x, h, "full")
    ref = direct_correlate_full(x, h)
    print(f"  full length: {full.size} (expected {x.size + h.size - 1})")
    print(f"  max abs error: {np.max(np.abs(full - ref)):.2e}")

    print("\nMode lengths:")
    for mode in ("full", "same", "valid"):
        print(f"  {mode:5s}: {correlate(x, h, mode).size}")

    print("\nDelay recovery:")
    shifted = np.roll(np.pad(h, (0, 55)), 20)
    lags = lag_axis(shifted.size, h.size, "full")
    peak = int(np.argmax(correlate(shifted, h, "full")))
    print(f"  recovered lag: {int(lags[peak])} (expected 20)")

    print(f"\nPlan cache: {get_plan_cache()!r}")


if __name__ == "__main__":
    _diagnostics()
