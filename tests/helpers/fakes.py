"""Test doubles for loggers and subprocess runners."""

from __future__ import annotations

import threading
import typing as typ
from pathlib import Path

from spectacle.builds.process import ProcessResult
from spectacle.builds.worker import BUILD_SHELL

if typ.TYPE_CHECKING:
    from spectacle.builds.process import ProcessSpec


class FakeLogger:
    """Collects log calls for assertions."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, object | None, bool]] = []

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str:
        self.calls.append((level, message, exc_info, stack_info))
        return message

    @property
    def messages(self) -> list[str]:
        """Return every logged message in order."""
        return [message for _, message, _, _ in self.calls]

    def matching(self, fragment: str) -> list[str]:
        """Return the logged messages containing *fragment*."""
        return [message for message in self.messages if fragment in message]


def step_for(argv: list[str]) -> str:
    """Name the worker step an argv belongs to."""
    if argv[0] == BUILD_SHELL:
        return "build"
    if "clone" in argv:
        return "clone"
    return "checkout"


class ScriptedRunner:
    """Runner that fakes git and the build script.

    ``clone`` creates the checkout directory and, unless *with_script* is
    false, a build script inside it. Every step succeeds unless an outcome
    (a result or an exception to raise) is registered for it.
    """

    def __init__(
        self,
        *,
        with_script: bool = True,
        outcomes: dict[str, ProcessResult | BaseException] | None = None,
    ) -> None:
        self.with_script = with_script
        self.outcomes = dict(outcomes or {})
        self.specs: list[ProcessSpec] = []
        self.checkout_listings: list[list[str]] = []
        self.max_active = 0
        self._active = 0
        self._lock = threading.Lock()

    def run(self, spec: ProcessSpec) -> ProcessResult:
        with self._lock:
            self._active += 1
            self.max_active = max(self.max_active, self._active)
            self.specs.append(spec)
        try:
            return self._run(spec)
        finally:
            with self._lock:
                self._active -= 1

    def _run(self, spec: ProcessSpec) -> ProcessResult:
        step = step_for(spec.argv)
        if step == "clone":
            checkout = Path(spec.argv[-1])
            self.checkout_listings.append(
                sorted(p.name for p in checkout.iterdir()) if checkout.exists() else []
            )
            checkout.mkdir(parents=True, exist_ok=True)
            if self.with_script:
                (checkout / "spectacle.sh").write_text("exit 0\n", encoding="utf-8")
            (checkout / "artifact.o").write_text("stale", encoding="utf-8")

        outcome = self.outcomes.get(step, ProcessResult(returncode=0))
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def steps(self) -> list[str]:
        """Return the steps run so far, in order."""
        return [step_for(spec.argv) for spec in self.specs]

    def builds(self) -> list[str]:
        """Return the repositories whose build script ran, in order."""
        return [
            spec.env["SPECTACLE_REPOSITORY"]
            for spec in self.specs
            if step_for(spec.argv) == "build"
        ]
