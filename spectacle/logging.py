"""Logging for Spectacle on top of femtologging.

Spectacle keeps no build history beyond its log, so every webhook request
and every build ends in one structured event line::

    [build.failed] repository=acme/widgets branch=main commit=9fceb02 ...

:func:`log_event` renders those lines. Values that are empty, contain
whitespace, quotes or control characters are quoted with ``repr`` so a
crafted ref or repository name cannot forge extra fields or lines, and
fields that may carry credentials are always redacted.

Free-form operational messages (startup, configuration errors) go through
the percent-style :func:`log_info`, :func:`log_warning` and
:func:`log_error` helpers.

Example:
>>> from spectacle.logging import format_event
>>> format_event("hook.queued", repository="acme/widgets", ref="refs/heads/main")
'[hook.queued] repository=acme/widgets ref=refs/heads/main'

"""

from __future__ import annotations

import re
import typing as typ

from femtologging import basicConfig, get_logger

# Level names femtologging accepts.
LOG_LEVELS = frozenset(
    {"TRACE", "DEBUG", "INFO", "WARN", "WARNING", "ERROR", "CRITICAL"}
)
DEFAULT_LOG_LEVEL = "INFO"

REDACTED = "[redacted]"
REDACTED_FIELDS = frozenset({"secret", "signature", "token", "password"})

_BARE_VALUE = re.compile(r"[^\s'\"=\x00-\x1f\x7f]+")


class SupportsLog(typ.Protocol):
    """Protocol for femtologging-compatible loggers."""

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str | None: ...


def normalize_log_level(level: str | None) -> tuple[str, bool]:
    """Return the upper-cased level and whether *level* had to be replaced.

    Unknown or blank levels fall back to ``INFO``.
    """
    normalized = (level or "").strip().upper()
    if normalized in LOG_LEVELS:
        return (normalized, False)
    return (DEFAULT_LOG_LEVEL, True)


def configure_logging(level: str, *, force: bool = False) -> tuple[str, bool]:
    """Configure femtologging and return the normalized level.

    Parameters
    ----------
    level : str
        Raw level, usually ``SPECTACLE_LOG_LEVEL``.
    force : bool, optional
        Whether to replace any existing handler configuration.

    Returns
    -------
    tuple[str, bool]
        The level applied and a flag telling the caller *level* was invalid.

    """
    normalized, invalid = normalize_log_level(level)
    basicConfig(level=normalized, force=force)
    return (normalized, invalid)


def render_value(value: object) -> str:
    """Render one event field value.

    >>> render_value(None)
    '-'
    >>> render_value(1.5)
    '1.500'
    >>> render_value("refs/heads/x\\x00main")
    "'refs/heads/x\\\\x00main'"

    """
    if value is None:
        return "-"
    if isinstance(value, float):
        return f"{value:.3f}"
    text = str(value)
    if _BARE_VALUE.fullmatch(text):
        return text
    return repr(text)


def format_event(event: str, /, **fields: object) -> str:
    """Build a ``[event] key=value ...`` line from *fields* in order."""
    rendered = [
        f"{key}={REDACTED if key in REDACTED_FIELDS else render_value(value)}"
        for key, value in fields.items()
    ]
    return " ".join([f"[{event}]", *rendered])


def log_event(
    logger: SupportsLog,
    level: str,
    event: str,
    /,
    **fields: object,
) -> None:
    """Log a structured event line at *level*."""
    logger.log(level, format_event(event, **fields), exc_info=None, stack_info=False)


def _log(
    logger: SupportsLog, level: str, template: str, args: tuple[object, ...]
) -> None:
    logger.log(level, template % args, exc_info=None, stack_info=False)


def log_info(logger: SupportsLog, template: str, *args: object) -> None:
    """Log an INFO message with percent-style formatting."""
    _log(logger, "INFO", template, args)


def log_warning(logger: SupportsLog, template: str, *args: object) -> None:
    """Log a WARNING message with percent-style formatting."""
    _log(logger, "WARNING", template, args)


def log_error(logger: SupportsLog, template: str, *args: object) -> None:
    """Log an ERROR message with percent-style formatting."""
    _log(logger, "ERROR", template, args)


def log_exception(logger: SupportsLog, message: str, exc: BaseException) -> None:
    """Log *message* at ERROR with *exc* attached as the traceback."""
    logger.log("ERROR", message, exc_info=exc, stack_info=False)


__all__ = [
    "DEFAULT_LOG_LEVEL",
    "LOG_LEVELS",
    "REDACTED",
    "REDACTED_FIELDS",
    "SupportsLog",
    "configure_logging",
    "format_event",
    "get_logger",
    "log_error",
    "log_event",
    "log_exception",
    "log_info",
    "log_warning",
    "normalize_log_level",
    "render_value",
]
