from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Iterable, Optional

import numpy as np

from fftcorr import __version__
from fftcorr.config import (
    CorrelateSettings,
    load_settings,
    save_settings,
    select_settings,
)
from fftcorr.core.fft import SIZE_POLICIES
from fftcorr.core.modes import Mode, lag_axis
from fftcorr.core.scaling import SCALINGS
from fftcorr.errors import CorrelationError
from fftcorr.io import read_series, write_series
from fftcorr.log import configure_logging, get_logger
from fftcorr.xcorr import METHODS, correlate

logger = get_logger(__name__)

SETTINGS_DESTS = ("mode", "method", "size_policy", "normalize", "plan_cache_size", "workers")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _path(p: str | Path) -> Path:
    return Path(p).expanduser().resolve()


def strip_settings_args(argv: Iterable[str]) -> tuple[list[str], str | None, str | None]:
    """Remove ``--settings``/``--save-settings`` (and their values) from argv."""
    cleaned: list[str] = []
    settings_path: str | None = None
    save_path: str | None = None

    it = list(argv)
    i = 0
    while i < len(it):
        arg = it[i]
        for flag in ("--settings", "--save-settings"):
            if arg == flag:
                if i + 1 >= len(it):
                    raise SystemExit(f"{flag} requires a path.")
                value = it[i + 1]
                i += 2
                break
            if arg.startswith(flag + "="):
                value = arg.split("=", 1)[1]
                i += 1
                break
        else:
            cleaned.append(arg)
            i += 1
            continue
        if flag == "--settings":
            settings_path = value
        else:
            save_path = value

    return cleaned, settings_path, save_path


def detect_command(argv: Iterable[str]) -> str | None:
    skip_next = False
    for arg in argv:
        if skip_next:
            skip_next = False
            continue
        if arg in ("--log-level",):
            skip_next = True
            continue
        if not arg.startswith("-"):
            return arg
    return None


def _find_subparser(parser: argparse.ArgumentParser, command: str | None) -> argparse.ArgumentParser | None:
    if not command:
        return None
    for action in parser._actions:
        if isinstance(action, argparse._SubParsersAction):
            return action.choices.get(command)
    return None


def _apply_defaults(parser: argparse.ArgumentParser, data: dict) -> None:
    values = CorrelateSettings.from_mapping(data).to_dict()
    parser.set_defaults(**{k: values[k] for k in SETTINGS_DESTS if k in data})


def _settings_from_args(args: argparse.Namespace) -> CorrelateSettings:
    return CorrelateSettings.from_mapping({k: getattr(args, k) for k in SETTINGS_DESTS})


def _emit(result: np.ndarray, lags: Optional[np.ndarray], out: Optional[str]) -> None:
    if out:
        write_series(_path(out), result, lags=lags)
        logger.info("result_written", path=str(_path(out)), length=int(result.size))
        return
    if lags is None:
        for v in result:
            print(repr(float(v)))
    else:
        for lag, v in zip(lags, result):
            print(f"{int(lag)},{float(v)!r}")


# ---------------------------------------------------------------------------
# Subcommand implementations
# ---------------------------------------------------------------------------

def _cmd_correlate(args: argparse.Namespace) -> int:
    settings = _settings_from_args(args)
    signal = read_series(_path(args.signal), channel=args.channel)
    template = read_series(_path(args.template), channel=args.channel)
    result = correlate(signal, template, cache=settings.make_cache(), **settings.correlate_kwargs())
    lags = lag_axis(signal.size, template.size, settings.mode) if args.lags else None
    _emit(result, lags, args.out)
    return 0


def _cmd_autocorr(args: argparse.Namespace) -> int:
    settings = _settings_from_args(args)
    signal = read_series(_path(args.signal), channel=args.channel)
    result = correlate(signal, signal, cache=settings.make_cache(), **settings.correlate_kwargs())
    lags = lag_axis(signal.size, signal.size, settings.mode) if args.lags else None
    _emit(result, lags, args.out)
    return 0


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _add_common_options(p: argparse.ArgumentParser, default_mode: str) -> None:
    p.add_argument(
        "--mode",
        choices=[m.value for m in Mode],
        default=default_mode,
        help="Output mode (default: %(default)s).",
    )
    p.add_argument(
        "--method",
        choices=METHODS,
        default="fft",
        help="Computation path (default: %(default)s).",
    )
    p.add_argument(
        "--size-policy",
        dest="size_policy",
        choices=SIZE_POLICIES,
        default="fast",
        help="Transform size selection (default: %(default)s).",
    )
    p.add_argument(
        "--normalize",
        choices=SCALINGS,
        default=None,
        help="Amplitude scaling of the output (default: none).",
    )
    p.add_argument(
        "--plan-cache-size",
        dest="plan_cache_size",
        type=int,
        default=None,
        help="LRU capacity of the transform plan cache (default: unbounded).",
    )
    p.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker threads of the FFTW plans.",
    )
    p.add_argument(
        "--channel",
        type=int,
        default=None,
        help="Channel of multi-channel inputs (default: average all channels).",
    )
    p.add_argument(
        "--lags",
        action="store_true",
        help="Prefix each output value with its lag.",
    )
    p.add_argument(
        "-o",
        "--out",
        default=None,
        help="Output file (.npy, .csv, .txt, .tsv). Prints to stdout if omitted.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fftcorr",
        description="Cross-correlate 1D series (audio, .npy, text) via FFT.",
    )
    parser.add_argument(
        "--settings",
        dest="settings_path",
        default=None,
        help="Load option defaults from a settings file (json or csv).",
    )
    parser.add_argument(
        "--save-settings",
        dest="save_settings_path",
        default=None,
        help="Save the effective options to a settings file (json or csv).",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (default: %(default)s).",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit log events as JSON lines.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # ---- correlate ----
    p_corr = subparsers.add_parser(
        "correlate",
        help="Cross-correlate SIGNAL with TEMPLATE.",
    )
    p_corr.add_argument("signal", help="Signal file.")
    p_corr.add_argument("template", help="Template file.")
    _add_common_options(p_corr, default_mode="full")
    p_corr.set_defaults(func=_cmd_correlate)

    # ---- autocorr ----
    p_auto = subparsers.add_parser(
        "autocorr",
        help="Correlate SIGNAL with itself.",
    )
    p_auto.add_argument("signal", help="Signal file.")
    _add_common_options(p_auto, default_mode="same")
    p_auto.set_defaults(func=_cmd_autocorr)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = _build_parser()
    raw_argv = list(argv) if argv is not None else sys.argv[1:]
    cleaned_argv, settings_path, save_path = strip_settings_args(raw_argv)
    command = detect_command(cleaned_argv)

    try:
        if settings_path:
            data = select_settings(load_settings(_path(settings_path)), command)
            target = _find_subparser(parser, command) or parser
            _apply_defaults(target, data)

        args = parser.parse_args(cleaned_argv)
        configure_logging(level=args.log_level, format_json=args.log_json)

        if save_path:
            save_settings(_path(save_path), _settings_from_args(args), command=args.command)

        return args.func(args)
    except (CorrelationError, ValueError, OSError, RuntimeError) as exc:
        logger.error("command_failed", command=command, error=str(exc))
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
