"""Build queue, workspaces, restricted subprocesses and the build worker.

Queue a job and process it synchronously::

    >>> from spectacle.builds import BuildJob, BuildQueue
    >>> build_queue = BuildQueue(capacity=8)
    >>> build_queue.submit(
    ...     BuildJob("acme/widgets", "https://github.com/acme/widgets.git", "main")
    ... )
"""

from __future__ import annotations

from .errors import (
    BuildError,
    BuildExecutionError,
    BuildQueueFullError,
    BuildScriptMissingError,
    BuildTimeoutError,
    FailureCategory,
    FetchError,
    IdentityError,
    ProcessTimeoutError,
    WorkspacePreparationError,
    categorize_failure,
)
from .models import BuildJob, BuildResult, BuildStatus, WorkerState, Workspace
from .observability import BuildEventLogger, BuildEventType
from .process import (
    PosixProcessRunner,
    ProcessResult,
    ProcessSpec,
    RestrictedIdentity,
    RestrictedProcessRunner,
)
from .queue import BuildQueue
from .worker import BuildWorker, WorkerSettings, build_environment
from .workspace import WorkspaceManager

__all__ = [
    "BuildError",
    "BuildEventLogger",
    "BuildEventType",
    "BuildExecutionError",
    "BuildJob",
    "BuildQueue",
    "BuildQueueFullError",
    "BuildResult",
    "BuildScriptMissingError",
    "BuildStatus",
    "BuildTimeoutError",
    "BuildWorker",
    "FailureCategory",
    "FetchError",
    "IdentityError",
    "PosixProcessRunner",
    "ProcessResult",
    "ProcessSpec",
    "ProcessTimeoutError",
    "RestrictedIdentity",
    "RestrictedProcessRunner",
    "WorkerSettings",
    "WorkerState",
    "Workspace",
    "WorkspaceManager",
    "WorkspacePreparationError",
    "build_environment",
    "categorize_failure",
]
