"""
Logging configuration for fftcorr.

The library only *emits* structured events through :func:`get_logger`;
configuring handlers and renderers is left to applications (the CLI calls
:func:`configure_logging`).
"""
from __future__ import annotations

import logging
import sys
from typing import Optional

import structlog

__all__ = ["configure_logging", "get_logger", "LevelGatedLogger"]


def configure_logging(
    level: str = "WARNING",
    format_json: bool = False,
    include_timestamp: bool = True,
    extra_processors: Optional[list] = None,
) -> None:
    """
    Configure structlog on top of the standard library logging module.

    Parameters
    ----------
    level : str, default="WARNING"
        Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    format_json : bool, default=False
        Render events as JSON lines instead of the console renderer.
    include_timestamp : bool, default=True
        Add an ISO timestamp to every event.
    extra_processors : list or None
        Additional structlog processors inserted before rendering.
    """
    log_level = getattr(logging, str(level).upper(), None)
    if not isinstance(log_level, int):
        raise ValueError(f"Unknown logging level {level!r}")

    logging.basicConfig(
        level=log_level,
        stream=sys.stderr,
        format="%(message)s",
        force=True,
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))
    if extra_processors:
        processors.extend(extra_processors)

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class LevelGatedLogger(structlog.stdlib.BoundLogger):
    """
    Stdlib-backed bound logger that drops disabled debug/info events
    before they reach the processor chain.
    """

    def debug(self, event: Optional[str] = None, *args, **kw):
        if not self._logger.isEnabledFor(logging.DEBUG):
            return None
        return super().debug(event, *args, **kw)

    def info(self, event: Optional[str] = None, *args, **kw):
        if not self._logger.isEnabledFor(logging.INFO):
            return None
        return super().info(event, *args, **kw)


def get_logger(name: str) -> LevelGatedLogger:
    """
    Return a structlog logger named ``name`` (typically ``__name__``).

    Events are routed through the standard library logger of the same name,
    so an unconfigured application only sees warnings and errors. Debug and
    info events below that logger's effective level are neither processed
    nor rendered.
    """
    return structlog.wrap_logger(
        logging.getLogger(name),
        wrapper_class=LevelGatedLogger,
    )
