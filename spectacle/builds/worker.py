"""The serialized build worker.

A single :class:`BuildWorker` drains the :class:`~spectacle.builds.queue.BuildQueue`
one job at a time. For each job it moves through
``IDLE → PREPARING → FETCHING → EXECUTING → IDLE``; a failure in any of the
middle states passes through ``FAILED``, is logged, and returns the worker to
``IDLE`` so the next job is served. Builds for different repositories never
overlap.

Usage
-----
Start the worker on a daemon thread::

    worker = BuildWorker(build_queue, workspaces, PosixProcessRunner())
    worker.start()
    ...
    worker.stop()

"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import re
import threading
import time
import typing as typ

from spectacle.logging import get_logger, log_exception, log_info, log_warning

from .errors import (
    BuildError,
    BuildExecutionError,
    BuildScriptMissingError,
    BuildTimeoutError,
    FetchError,
    ProcessTimeoutError,
    WorkspacePreparationError,
)
from .models import BuildResult, BuildStatus, WorkerState
from .observability import BuildEventLogger
from .process import ProcessResult, ProcessSpec

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from .models import BuildJob, Workspace
    from .process import RestrictedProcessRunner
    from .queue import BuildQueue
    from .workspace import WorkspaceManager

logger = get_logger(__name__)

DEFAULT_BUILD_PATH = "/usr/local/bin:/usr/bin:/bin"
BUILD_SHELL = "/bin/sh"

_COMMIT_PATTERN = re.compile(r"^[0-9a-fA-F]{7,64}$")


@dc.dataclass(frozen=True, slots=True)
class WorkerSettings:
    """Execution limits and environment for fetch and build subprocesses."""

    fetch_timeout: float = 600.0
    build_timeout: float = 3600.0
    build_path: str = DEFAULT_BUILD_PATH
    git_executable: str = "git"


def build_environment(
    job: BuildJob, workspace: Workspace, search_path: str
) -> dict[str, str]:
    """Return the complete environment for a job's subprocesses.

    Nothing is inherited from the service process.
    """
    return {
        "HOME": str(workspace.home_dir),
        "USER": workspace.owner.user,
        "LOGNAME": workspace.owner.user,
        "GOPATH": str(workspace.root),
        "PATH": search_path,
        "LANG": "C.UTF-8",
        "GIT_TERMINAL_PROMPT": "0",
        "SPECTACLE_REPOSITORY": job.repository,
        "SPECTACLE_BRANCH": job.branch,
        "SPECTACLE_COMMIT": job.commit or "",
    }


class BuildWorker:
    """Single consumer that fetches and builds queued jobs in order."""

    def __init__(  # noqa: PLR0913 - collaborators are injected for testing
        self,
        queue: BuildQueue,
        workspaces: WorkspaceManager,
        runner: RestrictedProcessRunner,
        *,
        settings: WorkerSettings | None = None,
        event_logger: BuildEventLogger | None = None,
        clock: cabc.Callable[[], float] = time.monotonic,
    ) -> None:
        """Wire the worker to its queue and collaborators."""
        self._queue = queue
        self._workspaces = workspaces
        self._runner = runner
        self._settings = settings or WorkerSettings()
        self._events = event_logger or BuildEventLogger()
        self._clock = clock
        self._state = WorkerState.IDLE
        self._thread: threading.Thread | None = None

    @property
    def state(self) -> WorkerState:
        """Return the current state of the worker."""
        return self._state

    def is_alive(self) -> bool:
        """Return True while the worker thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> threading.Thread:
        """Run :meth:`run` on a daemon thread and return the thread."""
        if self.is_alive():
            message = "build worker already running"
            raise RuntimeError(message)
        self._thread = threading.Thread(
            target=self.run, name="spectacle-build-worker", daemon=True
        )
        self._thread.start()
        return self._thread

    def stop(self, timeout: float | None = None) -> None:
        """Ask the worker to exit once queued jobs are done, and wait for it."""
        self._queue.close()
        if self._thread is not None:
            self._thread.join(timeout)

    def run(self) -> None:
        """Process jobs until the queue is closed.

        Taking the next job is the only point where the loop blocks waiting.
        An unexpected exception is logged and the loop carries on with the
        next job.
        """
        log_info(logger, "build worker started")
        while (job := self._queue.take()) is not None:
            try:
                self.process(job)
            except Exception as exc:  # noqa: BLE001 - the worker must outlive any job
                log_exception(
                    logger, f"unexpected error while building {job.repository}", exc
                )
                self._state = WorkerState.IDLE
            finally:
                self._queue.task_done()
        log_info(logger, "build worker stopped")

    def process(self, job: BuildJob) -> BuildResult:
        """Prepare, fetch and build *job*, returning its outcome."""
        started = self._clock()
        self._events.log_started(job, self._queue.depth)
        workspace: Workspace | None = None
        try:
            self._enter(job, WorkerState.PREPARING)
            workspace = self._workspaces.prepare(job)

            self._enter(job, WorkerState.FETCHING)
            self._fetch(job, workspace)
            script = self._locate_script(job, workspace)

            self._enter(job, WorkerState.EXECUTING)
            self._execute(job, workspace, script)
        except BuildError as exc:
            self._log_failure_output(job, exc)
            result = self._fail(job, started, exc)
        except Exception as exc:  # noqa: BLE001 - any job failure ends as FAIL
            log_exception(
                logger, f"unexpected error while building {job.repository}", exc
            )
            result = self._fail(job, started, exc)
        else:
            result = BuildResult(
                job=job, status=BuildStatus.OK, duration=self._elapsed(started)
            )

        if workspace is not None:
            self._release(job, workspace, succeeded=result.succeeded)

        self._events.log_result(result)
        self._enter(job, WorkerState.IDLE)
        return result

    def _enter(self, job: BuildJob, state: WorkerState) -> None:
        self._state = state
        self._events.log_state(job, state)

    def _elapsed(self, started: float) -> dt.timedelta:
        return dt.timedelta(seconds=self._clock() - started)

    def _fail(self, job: BuildJob, started: float, exc: Exception) -> BuildResult:
        failed_state = self._state
        self._enter(job, WorkerState.FAILED)
        return BuildResult(
            job=job,
            status=BuildStatus.FAIL,
            duration=self._elapsed(started),
            failure=exc,
            failed_state=failed_state,
        )

    def _spec(
        self,
        argv: list[str],
        workspace: Workspace,
        job: BuildJob,
        *,
        cwd: Path,
        timeout: float,
    ) -> ProcessSpec:
        return ProcessSpec(
            argv=argv,
            cwd=cwd,
            env=build_environment(job, workspace, self._settings.build_path),
            identity=workspace.owner,
            timeout=timeout,
        )

    def _run_git(
        self, step: str, argv: list[str], job: BuildJob, workspace: Workspace
    ) -> None:
        spec = self._spec(
            [self._settings.git_executable, *argv],
            workspace,
            job,
            cwd=workspace.root,
            timeout=self._settings.fetch_timeout,
        )
        result = self._run(step, spec, job, on_error=FetchError.not_started)
        if not result.ok:
            raise FetchError.exit_status(step, result.returncode, result.tail())

    def _fetch(self, job: BuildJob, workspace: Workspace) -> None:
        checkout = str(workspace.checkout_dir)
        self._run_git(
            "clone",
            ["clone", "--quiet", "--branch", job.branch, "--", job.clone_url, checkout],
            job,
            workspace,
        )
        if job.commit is None:
            return
        if not _COMMIT_PATTERN.match(job.commit):
            raise FetchError.invalid_commit(job.commit)
        self._run_git(
            "checkout",
            ["-C", checkout, "checkout", "--quiet", "--detach", job.commit],
            job,
            workspace,
        )

    def _locate_script(self, job: BuildJob, workspace: Workspace) -> Path:
        script = workspace.checkout_dir / job.script
        if not script.is_file():
            raise BuildScriptMissingError(job.script)
        return script

    def _execute(self, job: BuildJob, workspace: Workspace, script: Path) -> None:
        spec = self._spec(
            [BUILD_SHELL, str(script)],
            workspace,
            job,
            cwd=workspace.checkout_dir,
            timeout=self._settings.build_timeout,
        )
        result = self._run("build", spec, job, on_error=_build_not_started)
        if not result.ok:
            raise BuildExecutionError(result.returncode, result.tail())

    def _run(
        self,
        step: str,
        spec: ProcessSpec,
        job: BuildJob,
        *,
        on_error: cabc.Callable[[str, OSError], BuildError],
    ) -> ProcessResult:
        try:
            return self._runner.run(spec)
        except ProcessTimeoutError as exc:
            self._events.log_output(job, exc.output)
            raise BuildTimeoutError(step, exc.timeout) from exc
        except OSError as exc:
            raise on_error(step, exc) from exc

    def _log_failure_output(self, job: BuildJob, exc: BuildError) -> None:
        if isinstance(exc, BuildExecutionError):
            self._events.log_output(job, exc.output)

    def _release(self, job: BuildJob, workspace: Workspace, *, succeeded: bool) -> None:
        try:
            removed = self._workspaces.release(workspace, succeeded=succeeded)
        except WorkspacePreparationError as exc:
            log_warning(logger, "could not clean up workspace: %s", exc)
            return
        if not removed:
            self._events.log_workspace_kept(job, workspace.root)


def _build_not_started(_step: str, exc: OSError) -> BuildError:
    return BuildExecutionError.not_started(exc)
