"""Tests for the structured build log lines."""

from __future__ import annotations

import datetime as dt
import typing as typ

from spectacle.builds import (
    BuildEventLogger,
    BuildExecutionError,
    BuildJob,
    BuildResult,
    BuildStatus,
    FailureCategory,
    WorkerState,
    WorkspacePreparationError,
    categorize_failure,
)

if typ.TYPE_CHECKING:
    from tests.helpers.fakes import FakeLogger

_JOB = BuildJob("acme/widgets", "file:///widgets", "main", "abc1234")


def test_started_line(fake_logger: FakeLogger) -> None:
    """The start line names the job and the remaining queue depth."""
    BuildEventLogger(fake_logger).log_started(_JOB, 3)

    assert fake_logger.calls == [
        (
            "INFO",
            "[build.started] repository=acme/widgets branch=main commit=abc1234 "
            "queued=3",
            None,
            False,
        )
    ]


def test_completed_line(fake_logger: FakeLogger) -> None:
    """A successful build logs its duration and OK status."""
    result = BuildResult(_JOB, BuildStatus.OK, dt.timedelta(seconds=12.5))

    BuildEventLogger(fake_logger).log_result(result)

    [(level, message, _, _)] = fake_logger.calls
    assert level == "INFO"
    assert message == (
        "[build.completed] repository=acme/widgets branch=main commit=abc1234 "
        "duration_seconds=12.500 status=OK"
    )


def test_failed_line(fake_logger: FakeLogger) -> None:
    """A failed build logs the failing state and error category."""
    result = BuildResult(
        _JOB,
        BuildStatus.FAIL,
        dt.timedelta(seconds=1),
        failure=BuildExecutionError(1),
        failed_state=WorkerState.EXECUTING,
    )

    BuildEventLogger(fake_logger).log_result(result)

    [(level, message, _, _)] = fake_logger.calls
    assert level == "ERROR"
    assert "status=FAIL failed_state=executing" in message
    assert "error_type=BuildExecutionError error_category=execution" in message
    assert "error_message='build script exited with status 1'" in message


def test_state_transitions_are_debug(fake_logger: FakeLogger) -> None:
    """State changes are only visible at debug level."""
    BuildEventLogger(fake_logger).log_state(_JOB, WorkerState.FETCHING)

    assert fake_logger.calls == [
        ("DEBUG", "[build.state] repository=acme/widgets state=fetching", None, False)
    ]


def test_blank_output_is_not_logged(fake_logger: FakeLogger) -> None:
    """Empty output produces no line."""
    BuildEventLogger(fake_logger).log_output(_JOB, "  \n")

    assert fake_logger.calls == []


def test_output_is_truncated_to_tail(fake_logger: FakeLogger) -> None:
    """Long output is cut to its last characters."""
    BuildEventLogger(fake_logger).log_output(_JOB, "compiling widgets " * 300 + "END")

    [message] = fake_logger.messages
    assert message.endswith("END'")
    assert len(message) < 2200


def test_workspace_kept_line(fake_logger: FakeLogger) -> None:
    """A kept workspace is logged with its path."""
    BuildEventLogger(fake_logger).log_workspace_kept(
        _JOB, "/srv/ws/spectacle-acme-widgets"
    )

    assert fake_logger.calls == [
        (
            "INFO",
            "[build.workspace.kept] repository=acme/widgets "
            "path=/srv/ws/spectacle-acme-widgets",
            None,
            False,
        )
    ]


def test_categorize_failure() -> None:
    """Non-build exceptions are uncategorised."""
    error = WorkspacePreparationError("create workspace", "/tmp/x", OSError("nope"))

    assert categorize_failure(error) is FailureCategory.WORKSPACE
    assert categorize_failure(ValueError()) is FailureCategory.UNKNOWN
