"""
fftcorr.io
==========

Reading and writing of 1D series for the command line.

Submodules:
- fftcorr.io.series
"""

from .series import (
    AUDIO_EXTS,
    TEXT_EXTS,
    read_series,
    read_audio,
    to_mono,
    write_series,
)

__all__ = [
    "AUDIO_EXTS",
    "TEXT_EXTS",
    "read_series",
    "read_audio",
    "to_mono",
    "write_series",
]
