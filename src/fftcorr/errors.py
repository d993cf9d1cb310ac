"""
Exception hierarchy for fftcorr.

Every error raised on purpose by the package derives from
:class:`CorrelationError`. Most also derive from a builtin (``ValueError``,
``MemoryError``) so callers that already catch those keep working.
"""
from __future__ import annotations

__all__ = [
    "CorrelationError",
    "EmptyInputError",
    "InputError",
    "InvalidModeError",
    "InvalidSizeError",
    "TransformAllocationError",
    "SettingsError",
]


class CorrelationError(Exception):
    """Base class for all fftcorr errors."""


class EmptyInputError(CorrelationError, ValueError):
    """Signal or template is empty and empty inputs were not allowed."""

    def __init__(self, n_signal: int, n_template: int):
        self.n_signal = int(n_signal)
        self.n_template = int(n_template)
        super().__init__(
            f"Empty input (signal length {self.n_signal}, "
            f"template length {self.n_template})."
        )


class InputError(CorrelationError, ValueError):
    """Input is not a one-dimensional real-valued sequence."""


class InvalidModeError(CorrelationError, ValueError):
    """A mode, method or policy name outside its closed set."""

    def __init__(self, kind: str, value: object, allowed):
        self.kind = kind
        self.value = value
        self.allowed = tuple(allowed)
        super().__init__(
            f"Unknown {kind} {value!r}; expected one of {', '.join(map(repr, self.allowed))}."
        )


class InvalidSizeError(CorrelationError, ValueError):
    """Transform size is not a positive integer."""


class TransformAllocationError(CorrelationError, MemoryError):
    """Buffers for the requested transform size could not be allocated."""

    def __init__(self, size: int):
        self.size = int(size)
        super().__init__(f"Could not allocate transform buffers of size {self.size}.")


class SettingsError(CorrelationError, ValueError):
    """Settings file is missing, malformed or names unknown keys."""
