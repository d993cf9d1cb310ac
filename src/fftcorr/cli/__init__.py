"""Command-line interface for fftcorr."""

from .main import main

__all__ = ["main"]
