"""Run subprocesses under a restricted identity with an explicit environment.

Build scripts are arbitrary code from the repositories being built, so they
never run with the service's own privileges or environment. A
:class:`RestrictedProcessRunner` receives a fully specified
:class:`ProcessSpec` (argv, working directory, environment mapping, target
identity and timeout), drops to the target identity before ``exec``, waits for
the exit status, and returns the combined stdout/stderr.

Examples
--------
Run a command as the current user with a minimal environment::

    runner = PosixProcessRunner()
    result = runner.run(
        ProcessSpec(
            argv=["git", "--version"],
            cwd=Path("/tmp"),
            env={"PATH": "/usr/bin:/bin", "HOME": "/tmp"},
            identity=RestrictedIdentity.current(),
            timeout=5,
        )
    )

"""

from __future__ import annotations

import contextlib
import dataclasses as dc
import grp
import os
import pwd
import signal
import subprocess
import typing as typ

from .errors import IdentityError, ProcessTimeoutError

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

_OUTPUT_TAIL_CHARS = 4000


@dc.dataclass(frozen=True, slots=True)
class RestrictedIdentity:
    """Unprivileged user and group that fetches and builds run as."""

    user: str
    uid: int
    gid: int

    @classmethod
    def resolve(cls, user: str, group: str | None = None) -> RestrictedIdentity:
        """Look up *user* (and optionally *group*) in the system databases.

        Raises
        ------
        IdentityError
            If the user or group does not exist.

        """
        try:
            entry = pwd.getpwnam(user)
        except KeyError as exc:
            raise IdentityError.unknown_user(user) from exc

        gid = entry.pw_gid
        if group is not None:
            try:
                gid = grp.getgrnam(group).gr_gid
            except KeyError as exc:
                raise IdentityError.unknown_group(group) from exc

        return cls(user=user, uid=entry.pw_uid, gid=gid)

    @classmethod
    def current(cls) -> RestrictedIdentity:
        """Return the effective identity of this process."""
        uid = os.geteuid()
        try:
            user = pwd.getpwuid(uid).pw_name
        except KeyError:
            user = str(uid)
        return cls(user=user, uid=uid, gid=os.getegid())

    def is_current_process(self) -> bool:
        """Return True when no credential change is needed to act as this identity."""
        return self.uid == os.geteuid() and self.gid == os.getegid()


@dc.dataclass(frozen=True, slots=True)
class ProcessSpec:
    """Everything needed to start one restricted subprocess."""

    argv: list[str]
    cwd: Path
    env: cabc.Mapping[str, str]
    identity: RestrictedIdentity
    timeout: float | None = None


@dc.dataclass(frozen=True, slots=True)
class ProcessResult:
    """Exit status and combined output of a finished subprocess."""

    returncode: int
    output: str = ""

    @property
    def ok(self) -> bool:
        """Return True for a zero exit status."""
        return self.returncode == 0

    def tail(self, limit: int = _OUTPUT_TAIL_CHARS) -> str:
        """Return at most the last *limit* characters of the output."""
        return self.output[-limit:]


class RestrictedProcessRunner(typ.Protocol):
    """Capability to run a subprocess as a restricted identity.

    Implementations must drop privileges before ``exec``, pass exactly the
    given environment, wait for the exit status, and raise
    :class:`~spectacle.builds.errors.ProcessTimeoutError` after killing a
    process that exceeds its timeout.
    """

    def run(self, spec: ProcessSpec) -> ProcessResult: ...


class PosixProcessRunner:
    """Runner using POSIX credential switching in the forked child."""

    def run(self, spec: ProcessSpec) -> ProcessResult:
        """Run *spec* to completion and return its exit status and output.

        Raises
        ------
        OSError
            If the process cannot be started (missing executable, or the
            credential change is refused).
        ProcessTimeoutError
            If the process outlives ``spec.timeout``; its whole process group
            is killed first.

        """
        process = subprocess.Popen(  # noqa: S603 - argv built by the worker, no shell
            spec.argv,
            cwd=spec.cwd,
            env=dict(spec.env),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            errors="replace",
            start_new_session=True,
            **_credential_kwargs(spec.identity),
        )
        try:
            output, _ = process.communicate(timeout=spec.timeout)
        except subprocess.TimeoutExpired:
            _kill_process_group(process)
            output, _ = process.communicate()
            raise ProcessTimeoutError(
                spec.argv, spec.timeout or 0.0, output or ""
            ) from None
        return ProcessResult(returncode=process.returncode, output=output or "")


def _credential_kwargs(identity: RestrictedIdentity) -> dict[str, typ.Any]:
    """Return the ``Popen`` arguments that switch to *identity*.

    Supplementary groups are cleared so the child keeps none of the
    service's group memberships.
    """
    if identity.is_current_process():
        return {}
    return {"user": identity.uid, "group": identity.gid, "extra_groups": []}


def _kill_process_group(process: subprocess.Popen[str]) -> None:
    with contextlib.suppress(ProcessLookupError):
        os.killpg(process.pid, signal.SIGKILL)
