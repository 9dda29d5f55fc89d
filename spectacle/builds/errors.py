"""Build pipeline errors.

Each failure is terminal for its job only; the worker logs it and moves on
to the next job.
"""

from __future__ import annotations

import enum


class FailureCategory(enum.StrEnum):
    """Categories reported in build log lines."""

    WORKSPACE = "workspace"
    FETCH = "fetch"
    CONFIGURATION = "configuration"
    EXECUTION = "execution"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


class BuildQueueFullError(RuntimeError):
    """Raised when a job is submitted while the queue is at capacity."""

    def __init__(self, capacity: int) -> None:
        """Initialise with the queue capacity that was exceeded."""
        self.capacity = capacity
        super().__init__(f"build system busy: {capacity} jobs already queued")


class BuildError(RuntimeError):
    """Base class for failures while processing a build job."""

    category = FailureCategory.UNKNOWN


class WorkspacePreparationError(BuildError):
    """Raised when a filesystem step of workspace preparation fails."""

    category = FailureCategory.WORKSPACE

    def __init__(self, operation: str, path: object, cause: BaseException) -> None:
        """Initialise with the failing operation, its target and the cause."""
        self.operation = operation
        self.path = path
        super().__init__(f"{operation} failed for {path}: {cause}")


class ProcessTimeoutError(RuntimeError):
    """Raised by a process runner when a subprocess outlives its timeout."""

    def __init__(self, argv: list[str], timeout: float, output: str = "") -> None:
        """Initialise with the command, its timeout and any partial output."""
        self.argv = argv
        self.timeout = timeout
        self.output = output
        super().__init__(f"{argv[0]} exceeded {timeout:g}s and was killed")


class FetchError(BuildError):
    """Raised when cloning or checking out the source fails."""

    category = FailureCategory.FETCH

    def __init__(self, message: str, *, output: str = "") -> None:
        """Initialise with a summary and the captured git output."""
        self.output = output
        detail = f"{message}: {output.strip()}" if output.strip() else message
        super().__init__(detail)

    @classmethod
    def exit_status(cls, step: str, returncode: int, output: str) -> FetchError:
        """Return an error for a git command that exited non-zero."""
        return cls(f"git {step} exited with status {returncode}", output=output)

    @classmethod
    def not_started(cls, step: str, exc: OSError) -> FetchError:
        """Return an error for a git command that could not be spawned."""
        return cls(f"git {step} could not be started: {exc}")

    @classmethod
    def invalid_commit(cls, commit: str) -> FetchError:
        """Return an error for a commit id that is not a hex object name."""
        return cls(f"refusing to check out invalid commit id {commit!r}")


class BuildScriptMissingError(BuildError):
    """Raised when the fetched tree has no build script at the expected path."""

    category = FailureCategory.CONFIGURATION

    def __init__(self, script: str) -> None:
        """Initialise with the script path relative to the checkout."""
        self.script = script
        super().__init__(f"build script {script!r} not found in checkout")


class BuildExecutionError(BuildError):
    """Raised when the build script exits with a non-zero status."""

    category = FailureCategory.EXECUTION

    def __init__(
        self,
        returncode: int | None,
        output: str = "",
        *,
        message: str | None = None,
    ) -> None:
        """Initialise with the exit status and the captured output."""
        self.returncode = returncode
        self.output = output
        super().__init__(message or f"build script exited with status {returncode}")

    @classmethod
    def not_started(cls, exc: OSError) -> BuildExecutionError:
        """Return an error for a build script that could not be spawned."""
        return cls(None, message=f"build script could not be started: {exc}")


class BuildTimeoutError(BuildError):
    """Raised when a fetch or build step is killed for exceeding its timeout."""

    category = FailureCategory.TIMEOUT

    def __init__(self, step: str, timeout: float) -> None:
        """Initialise with the step that timed out and its limit."""
        self.step = step
        self.timeout = timeout
        super().__init__(f"{step} timed out after {timeout:g}s")


class IdentityError(RuntimeError):
    """Raised when the restricted build identity cannot be resolved."""

    @classmethod
    def unknown_user(cls, user: str) -> IdentityError:
        """Return an error for a build user missing from the passwd database."""
        return cls(f"unknown build user: {user!r}")

    @classmethod
    def unknown_group(cls, group: str) -> IdentityError:
        """Return an error for a build group missing from the group database."""
        return cls(f"unknown build group: {group!r}")


def categorize_failure(exc: BaseException) -> FailureCategory:
    """Return the log category for a build failure."""
    if isinstance(exc, BuildError):
        return exc.category
    return FailureCategory.UNKNOWN
