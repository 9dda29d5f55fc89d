"""Unit tests for the femtologging helpers in spectacle.logging.

Run with:
    pytest tests/unit/test_logging.py
"""

from __future__ import annotations

import pytest

from spectacle.logging import (
    REDACTED,
    configure_logging,
    format_event,
    log_error,
    log_event,
    log_exception,
    log_info,
    log_warning,
    normalize_log_level,
    render_value,
)
from tests.helpers.fakes import FakeLogger


@pytest.mark.parametrize(
    ("raw", "expected", "invalid"),
    [
        ("debug", "DEBUG", False),
        (" Warn ", "WARN", False),
        ("TRACE", "TRACE", False),
        (None, "INFO", True),
        ("", "INFO", True),
        ("verbose", "INFO", True),
    ],
)
def test_normalize_log_level(raw: str | None, expected: str, *, invalid: bool) -> None:
    """Known levels are upper-cased; anything else falls back to INFO."""
    assert normalize_log_level(raw) == (expected, invalid), (
        f"Expected {raw!r} to normalize to {expected} (invalid={invalid})."
    )


@pytest.mark.parametrize(
    ("value", "rendered"),
    [
        (None, "-"),
        ("acme/widgets", "acme/widgets"),
        (3, "3"),
        (12.5, "12.500"),
        ("", "''"),
        ("exit status 1", "'exit status 1'"),
        ("x\x00main", r"'x\x00main'"),
        ("a\nb", r"'a\nb'"),
        ("outcome=queued", "'outcome=queued'"),
    ],
)
def test_render_value(value: object, rendered: str) -> None:
    """Values that could split or forge a field are quoted."""
    assert render_value(value) == rendered


def test_format_event_keeps_field_order() -> None:
    """Fields appear in the order they were given."""
    line = format_event(
        "hook.queued", repository="acme/widgets", ref="refs/heads/main", commit=None
    )

    assert line == "[hook.queued] repository=acme/widgets ref=refs/heads/main commit=-"


def test_format_event_redacts_credentials() -> None:
    """Credential fields never reach the log line."""
    line = format_event("hook.rejected", secret="hunter2", signature="sha256=abc")

    assert line == f"[hook.rejected] secret={REDACTED} signature={REDACTED}"
    assert "hunter2" not in line


def test_format_event_without_fields() -> None:
    """An event with no fields is just its tag."""
    assert format_event("build.started") == "[build.started]"


def test_log_event_uses_requested_level() -> None:
    """log_event logs the rendered line at the given level."""
    logger = FakeLogger()

    log_event(logger, "WARNING", "hook.busy", repository="acme/widgets", capacity=8)

    assert logger.calls == [
        ("WARNING", "[hook.busy] repository=acme/widgets capacity=8", None, False)
    ]


@pytest.mark.parametrize(
    ("helper", "level"),
    [
        (log_info, "INFO"),
        (log_warning, "WARNING"),
        (log_error, "ERROR"),
    ],
)
def test_level_helpers_emit_formatted_message(
    helper: object, level: str
) -> None:
    """Each helper formats its template and logs at its own level."""
    logger = FakeLogger()

    helper(logger, "repos: %s (%d)", "acme/widgets", 1)  # type: ignore[operator]

    assert logger.calls == [(level, "repos: acme/widgets (1)", None, False)]


def test_log_exception_attaches_exception() -> None:
    """log_exception logs at ERROR with the exception as exc_info."""
    logger = FakeLogger()
    exc = RuntimeError("worker crashed")

    log_exception(logger, "unexpected error while building acme/widgets", exc)

    assert logger.calls == [
        ("ERROR", "unexpected error while building acme/widgets", exc, False)
    ]


@pytest.mark.parametrize(
    ("raw", "expected", "invalid"),
    [("debug", "DEBUG", False), ("chatty", "INFO", True)],
)
def test_configure_logging_passes_normalized_level(
    monkeypatch: pytest.MonkeyPatch,
    raw: str,
    expected: str,
    *,
    invalid: bool,
) -> None:
    """configure_logging hands the normalized level to femtologging."""
    captured: dict[str, object] = {}

    def fake_basic_config(**kwargs: object) -> None:
        captured.update(kwargs)

    monkeypatch.setattr("spectacle.logging.basicConfig", fake_basic_config)

    assert configure_logging(raw) == (expected, invalid)
    assert captured == {"level": expected, "force": False}
