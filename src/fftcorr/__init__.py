"""
fftcorr
FFT-based cross-correlation of 1D real sequences.
"""

try:
    from importlib import metadata as _metadata
except ImportError:
    _metadata = None  # type: ignore

try:
    __version__ = _metadata.version("fftcorr") if _metadata else "0.0.0.dev0"
except Exception:
    # Not installed (dev mode) or no metadata available
    __version__ = "0.0.0.dev0"

from .errors import (  # noqa: E402
    CorrelationError,
    EmptyInputError,
    InputError,
    InvalidModeError,
    InvalidSizeError,
    TransformAllocationError,
    SettingsError,
)
from .core import Mode, PlanCache, get_plan_cache, reset_plan_cache, lag_axis, output_length  # noqa: E402
from .xcorr import correlate, correlate_full, autocorrelate  # noqa: E402

__all__ = [
    "__version__",
    "Mode",
    "correlate",
    "correlate_full",
    "autocorrelate",
    "lag_axis",
    "output_length",
    "PlanCache",
    "get_plan_cache",
    "reset_plan_cache",
    "CorrelationError",
    "EmptyInputError",
    "InputError",
    "InvalidModeError",
    "InvalidSizeError",
    "TransformAllocationError",
    "SettingsError",
]
