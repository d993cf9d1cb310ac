"""
Correlation settings and settings files.

Settings files are either a JSON object or a two-column ``key,value`` CSV.
A JSON file may hold one flat object or several objects keyed by CLI
command, with ``"default"`` as the fallback section.
"""
from __future__ import annotations

import csv
import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional

from fftcorr.core.fft import SIZE_POLICIES
from fftcorr.core.modes import Mode
from fftcorr.core.plans import PlanCache
from fftcorr.core.scaling import SCALINGS
from fftcorr.errors import InvalidModeError, SettingsError
from fftcorr.xcorr.correlate import METHODS

__all__ = [
    "CorrelateSettings",
    "load_settings",
    "select_settings",
    "save_settings",
]


@dataclass
class CorrelateSettings:
    """
    Options of a correlation run.

    Attributes
    ----------
    mode : str
        "full", "same" or "valid".
    method : str
        "fft" or "direct".
    size_policy : str
        "fast" or "pow2".
    normalize : str or None
        "peak", "energy", "none" or None.
    plan_cache_size : int or None
        LRU capacity of the plan cache; None for unbounded.
    workers : int or None
        Thread count of the FFTW plans.
    """
    mode: str = "full"
    method: str = "fft"
    size_policy: str = "fast"
    normalize: Optional[str] = None
    plan_cache_size: Optional[int] = None
    workers: Optional[int] = None

    def __post_init__(self):
        try:
            self.mode = Mode.coerce(self.mode).value
        except InvalidModeError as exc:
            raise SettingsError(str(exc)) from exc
        if self.method not in METHODS:
            raise SettingsError(f"Unknown method {self.method!r}")
        if self.size_policy not in SIZE_POLICIES:
            raise SettingsError(f"Unknown size_policy {self.size_policy!r}")
        if self.normalize is not None and self.normalize not in SCALINGS:
            raise SettingsError(f"Unknown normalize {self.normalize!r}")
        self.plan_cache_size = _optional_positive_int("plan_cache_size", self.plan_cache_size)
        self.workers = _optional_int("workers", self.workers)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CorrelateSettings":
        """Build settings from a mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise SettingsError(f"Unknown settings: {', '.join(unknown)}")
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def correlate_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for :func:`fftcorr.correlate` (without ``cache``)."""
        return {
            "mode": self.mode,
            "method": self.method,
            "size_policy": self.size_policy,
            "normalize": self.normalize,
        }

    def make_cache(self) -> PlanCache:
        return PlanCache(max_entries=self.plan_cache_size, workers=self.workers)


def _optional_int(name: str, value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise SettingsError(f"{name} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise SettingsError(f"{name} must be an integer, got {value!r}") from exc


def _optional_positive_int(name: str, value: Any) -> Optional[int]:
    out = _optional_int(name, value)
    if out is not None and out < 1:
        raise SettingsError(f"{name} must be >= 1, got {out}")
    return out


# ---------------------------------------------------------------------------
# Settings files
# ---------------------------------------------------------------------------

def _parse_csv_value(raw: str) -> Any:
    text = raw.strip()
    if text == "":
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def _load_csv(path: Path) -> dict[str, Any]:
    data: dict[str, Any] = {}
    with path.open("r", newline="", encoding="utf-8") as handle:
        for row in csv.reader(handle):
            if not row or not row[0].strip():
                continue
            key = row[0].strip()
            # header row
            if key.lower() == "key" and len(row) > 1 and row[1].strip().lower() == "value":
                continue
            data[key] = _parse_csv_value(row[1]) if len(row) > 1 else None
    return data


def load_settings(path: str | Path) -> dict[str, Any]:
    """
    Read a settings file into a dict.

    Raises
    ------
    SettingsError
        If the file is missing, unparsable, or not a JSON object.
    """
    path = Path(path)
    if not path.exists():
        raise SettingsError(f"Settings file not found: {path}")
    if path.suffix.lower() == ".csv":
        return _load_csv(path)

    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except json.JSONDecodeError as exc:
        raise SettingsError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise SettingsError(f"Settings file must be a JSON object: {path}")
    return data


def select_settings(data: Mapping[str, Any], command: str | None = None) -> dict[str, Any]:
    """
    Pick the section for ``command`` from loaded settings.

    Order: the ``command`` section, then ``"default"``, then the whole
    mapping when it is flat (no nested objects).
    """
    if command and isinstance(data.get(command), dict):
        return dict(data[command])
    if isinstance(data.get("default"), dict):
        return dict(data["default"])
    if all(not isinstance(v, dict) for v in data.values()):
        return dict(data)
    return {}


def save_settings(
    path: str | Path,
    settings: CorrelateSettings,
    *,
    command: str | None = None,
) -> None:
    """
    Write ``settings`` to a JSON or CSV file.

    For JSON with ``command`` given, the section of that command is
    replaced and other sections in an existing file are kept.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    values = settings.to_dict()

    if path.suffix.lower() == ".csv":
        with path.open("w", newline="", encoding="utf-8") as handle:
            writer = csv.writer(handle)
            writer.writerow(["key", "value"])
            for key in sorted(values):
                writer.writerow([key, json.dumps(values[key])])
        return

    data: dict[str, Any] = {}
    if command:
        if path.exists():
            data = load_settings(path)
            if data and all(not isinstance(v, dict) for v in data.values()):
                data = {"default": data}
        data[command] = values
    else:
        data = values

    with path.open("w", encoding="utf-8") as handle:
        json.dump(data, handle, indent=2, sort_keys=True)
        handle.write("\n")
