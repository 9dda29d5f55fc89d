"""Value types exchanged between webhook intake and the build worker."""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ

if typ.TYPE_CHECKING:
    import datetime as dt
    from pathlib import Path

    from .process import RestrictedIdentity


@dc.dataclass(frozen=True, slots=True)
class BuildJob:
    """A request to fetch one branch or commit and run its build script.

    Jobs are immutable; once submitted to the queue the worker is their only
    consumer.

    Attributes
    ----------
    repository
        ``owner/name`` of the configured repository.
    clone_url
        URL the worker clones from.
    branch
        Branch (or tag) name the push updated, without the ``refs/heads/``
        prefix.
    commit
        Commit SHA to check out after cloning, when known.
    script
        Build script path relative to the checkout root.

    """

    repository: str
    clone_url: str
    branch: str
    commit: str | None = None
    script: str = "spectacle.sh"


@dc.dataclass(frozen=True, slots=True)
class Workspace:
    """Directory tree owned by one job.

    Attributes
    ----------
    root
        Top of the tree; removed before and after the job.
    checkout_dir
        Where the repository is cloned.
    home_dir
        ``HOME`` for the fetch and build subprocesses.
    owner
        Identity the tree is chowned to.

    """

    root: Path
    checkout_dir: Path
    home_dir: Path
    owner: RestrictedIdentity


class WorkerState(enum.StrEnum):
    """States of the build worker."""

    IDLE = "idle"
    PREPARING = "preparing"
    FETCHING = "fetching"
    EXECUTING = "executing"
    FAILED = "failed"


class BuildStatus(enum.StrEnum):
    """Terminal outcome of a build."""

    OK = "OK"
    FAIL = "FAIL"


@dc.dataclass(frozen=True, slots=True)
class BuildResult:
    """Outcome of processing one job."""

    job: BuildJob
    status: BuildStatus
    duration: dt.timedelta
    failure: Exception | None = None
    failed_state: WorkerState | None = None

    @property
    def succeeded(self) -> bool:
        """Return True when the build script exited with status 0."""
        return self.status is BuildStatus.OK
