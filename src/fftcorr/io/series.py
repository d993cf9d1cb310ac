# fftcorr/io/series.py
"""
Reading and writing 1D series: audio via soundfile, .npy, and text/CSV."""
from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple, Union

import numpy as np
import soundfile as sf

PathLike = Union[str, Path]

AUDIO_EXTS = (".wav", ".flac", ".aiff", ".aif", ".ogg")
TEXT_EXTS = (".csv", ".txt", ".tsv")

__all__ = [
    "AUDIO_EXTS",
    "TEXT_EXTS",
    "read_series",
    "read_audio",
    "to_mono",
    "write_series",
]


def _pathify(path: PathLike) -> str:
    return str(Path(path))


def to_mono(x: np.ndarray) -> np.ndarray:
    """
    Average channels of an (N, C) array into shape (N,).

    1D input is returned unchanged.
    """
    arr = np.asarray(x)
    if arr.ndim == 1:
        return arr
    if arr.ndim != 2:
        raise ValueError(f"Expected 1D or 2D array, got {arr.shape}")
    if arr.shape[1] == 1:
        return arr[:, 0]
    return arr.mean(axis=1)


def read_audio(path: PathLike, *, channel: Optional[int] = None) -> Tuple[np.ndarray, int]:
    """
    Read an audio file as a float64 1D series.

    Parameters
    ----------
    path : str or Path
        Any file libsndfile can read.
    channel : int or None
        Channel to keep. None averages all channels.

    Returns
    -------
    data : ndarray, shape (N,)
    sr : int
        Sample rate in Hz.
    """
    data, sr = sf.read(_pathify(path), dtype="float64", always_2d=True)
    if channel is None:
        out = to_mono(data)
    else:
        if not 0 <= channel < data.shape[1]:
            raise ValueError(f"Channel {channel} out of range for {data.shape[1]} channels")
        out = data[:, channel]
    return np.ascontiguousarray(out, dtype=np.float64), int(sr)


def _read_text(path: Path) -> np.ndarray:
    delimiter = "\t" if path.suffix.lower() == ".tsv" else ","
    text = path.read_text(encoding="utf-8")
    values: list[float] = []
    for line in text.splitlines():
        line = line.split("#", 1)[0].strip()
        if not line:
            continue
        parts = line.split(delimiter) if delimiter in line else line.split()
        for p in parts:
            p = p.strip()
            if p:
                values.append(float(p))
    return np.asarray(values, dtype=np.float64)


def read_series(path: PathLike, *, channel: Optional[int] = None) -> np.ndarray:
    """
    Read a 1D series from ``path``, dispatching on the extension.

    - audio (``.wav``, ``.flac``, ...): samples via soundfile, see
      :func:`read_audio`.
    - ``.npy``: a 1D array (2D arrays are averaged across columns).
    - ``.csv``/``.txt``/``.tsv``: numbers separated by the delimiter,
      whitespace or newlines; ``#`` starts a comment.

    Returns
    -------
    ndarray of float64, shape (N,)
    """
    p = Path(path)
    suffix = p.suffix.lower()
    if suffix in AUDIO_EXTS:
        return read_audio(p, channel=channel)[0]
    if suffix == ".npy":
        arr = np.load(p, allow_pickle=False)
        if arr.ndim == 2 and channel is not None:
            if not 0 <= channel < arr.shape[1]:
                raise ValueError(f"Channel {channel} out of range for {arr.shape[1]} columns in {p}")
            arr = arr[:, channel]
        return np.asarray(to_mono(arr), dtype=np.float64)
    if suffix in TEXT_EXTS:
        return _read_text(p)
    raise ValueError(f"Unsupported series format {suffix!r} for {p}")


def write_series(
    path: PathLike,
    data: np.ndarray,
    *,
    lags: Optional[np.ndarray] = None,
) -> None:
    """
    Write a 1D series to ``.npy`` or text (``.csv``/``.txt``/``.tsv``).

    Parameters
    ----------
    path : str or Path
        Output file; parent directories are created.
    data : ndarray, shape (N,)
    lags : ndarray or None
        For text output, an integer lag column written before the values.
        Ignored for ``.npy``.
    """
    p = Path(path)
    arr = np.asarray(data, dtype=np.float64)
    if arr.ndim != 1:
        raise ValueError(f"Expected 1D array, got {arr.shape}")
    p.parent.mkdir(parents=True, exist_ok=True)

    suffix = p.suffix.lower()
    if suffix == ".npy":
        np.save(p, arr, allow_pickle=False)
        return
    if suffix not in TEXT_EXTS:
        raise ValueError(f"Unsupported output format {suffix!r} for {p}")

    delimiter = "\t" if suffix == ".tsv" else ","
    with p.open("w", encoding="utf-8") as handle:
        if lags is None:
            for v in arr:
                handle.write(f"{float(v)!r}\n")
        else:
            lags = np.asarray(lags)
            if lags.shape != arr.shape:
                raise ValueError(f"lags shape {lags.shape} does not match data {arr.shape}")
            for lag, v in zip(lags, arr):
                handle.write(f"{int(lag)}{delimiter}{float(v)!r}\n")
