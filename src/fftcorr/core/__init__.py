"""
fftcorr.core
============

Building blocks of the correlation engine.

Submodules
----------
- :mod:`fftcorr.core.fft`     : transform sizing and size-bound FFT plans.
- :mod:`fftcorr.core.plans`   : per-thread plan cache.
- :mod:`fftcorr.core.modes`   : full/same/valid slicing and lag axes.
- :mod:`fftcorr.core.scaling` : amplitude scaling of the output.
"""

from .fft import (
    SIZE_POLICIES,
    full_length,
    next_fast_len_ge,
    next_pow2_ge,
    transform_size,
    zero_pad,
    TransformPlan,
)
from .plans import PlanCache, get_plan_cache, reset_plan_cache
from .modes import Mode, output_length, mode_bounds, slice_mode, lag_axis
from .scaling import SCALINGS, peak_scale, energy_scale, apply_scaling

__all__ = [
    # fft
    "SIZE_POLICIES",
    "full_length",
    "next_fast_len_ge",
    "next_pow2_ge",
    "transform_size",
    "zero_pad",
    "TransformPlan",
    # plans
    "PlanCache",
    "get_plan_cache",
    "reset_plan_cache",
    # modes
    "Mode",
    "output_length",
    "mode_bounds",
    "slice_mode",
    "lag_axis",
    # scaling
    "SCALINGS",
    "peak_scale",
    "energy_scale",
    "apply_scaling",
]
