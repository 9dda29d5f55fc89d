"""Structured log events for build execution.

Each build produces exactly one outcome line, ``build.completed`` or
``build.failed``, carrying the repository, branch, commit, wall-clock
duration and status. That line is the only build history Spectacle keeps.
"""

from __future__ import annotations

import enum
import typing as typ

from spectacle.logging import get_logger, log_event

from .errors import categorize_failure
from .models import BuildStatus

if typ.TYPE_CHECKING:
    from spectacle.logging import SupportsLog

    from .models import BuildJob, BuildResult, WorkerState

_OUTPUT_TAIL_CHARS = 2000


class BuildEventType(enum.StrEnum):
    """Structured log event types for builds."""

    STARTED = "build.started"
    STATE = "build.state"
    COMPLETED = "build.completed"
    FAILED = "build.failed"
    OUTPUT = "build.output"
    WORKSPACE_KEPT = "build.workspace.kept"


class BuildEventLogger:
    """Emit structured build events through femtologging."""

    def __init__(self, logger: SupportsLog | None = None) -> None:
        """Use *logger*, or this module's logger when omitted."""
        self._logger = logger or get_logger(__name__)

    def log_started(self, job: BuildJob, queued: int) -> None:
        """Log that the worker picked up *job*."""
        log_event(
            self._logger,
            "INFO",
            BuildEventType.STARTED,
            repository=job.repository,
            branch=job.branch,
            commit=job.commit,
            queued=queued,
        )

    def log_state(self, job: BuildJob, state: WorkerState) -> None:
        """Log a worker state transition at debug level."""
        log_event(
            self._logger,
            "DEBUG",
            BuildEventType.STATE,
            repository=job.repository,
            state=state,
        )

    def log_result(self, result: BuildResult) -> None:
        """Log the single outcome line for a finished build."""
        job = result.job
        outcome = {
            "repository": job.repository,
            "branch": job.branch,
            "commit": job.commit,
            "duration_seconds": result.duration.total_seconds(),
            "status": result.status,
        }
        if result.status is BuildStatus.OK:
            log_event(self._logger, "INFO", BuildEventType.COMPLETED, **outcome)
            return

        failure = result.failure
        error: dict[str, object] = {
            "error_type": None,
            "error_category": None,
            "error_message": None,
        }
        if failure is not None:
            error = {
                "error_type": type(failure).__name__,
                "error_category": categorize_failure(failure),
                "error_message": str(failure),
            }
        log_event(
            self._logger,
            "ERROR",
            BuildEventType.FAILED,
            **outcome,
            failed_state=result.failed_state,
            **error,
        )

    def log_output(self, job: BuildJob, output: str) -> None:
        """Log the tail of a failed step's output."""
        if not output.strip():
            return
        log_event(
            self._logger,
            "WARNING",
            BuildEventType.OUTPUT,
            repository=job.repository,
            output_tail=output[-_OUTPUT_TAIL_CHARS:],
        )

    def log_workspace_kept(self, job: BuildJob, path: object) -> None:
        """Log that a failed build's workspace was left for inspection."""
        log_event(
            self._logger,
            "INFO",
            BuildEventType.WORKSPACE_KEPT,
            repository=job.repository,
            path=path,
        )
