"""Structured log events for webhook intake.

Every request produces exactly one line summarising the repository, the
event kind and the outcome. Secrets and signatures never appear in it.
"""

from __future__ import annotations

import enum
import typing as typ

from spectacle.logging import get_logger, log_event

if typ.TYPE_CHECKING:
    from spectacle.logging import SupportsLog

    from .errors import HookRejectedError
    from .router import RouteDecision


class HookEventType(enum.StrEnum):
    """Structured log event types for webhook requests."""

    QUEUED = "hook.queued"
    IGNORED = "hook.ignored"
    UNHANDLED = "hook.unhandled"
    REJECTED = "hook.rejected"
    BUSY = "hook.busy"


class HookEventLogger:
    """Emit one structured line per webhook request."""

    def __init__(self, logger: SupportsLog | None = None) -> None:
        """Use *logger*, or this module's logger when omitted."""
        self._logger = logger or get_logger(__name__)

    def log_decision(self, decision: RouteDecision) -> None:
        """Log an accepted request with its routing outcome."""
        event = decision.event
        log_event(
            self._logger,
            "INFO",
            HookEventType(f"hook.{decision.outcome}"),
            repository=decision.repository,
            event=event.event_name,
            kind=event.kind,
            ref=event.ref or None,
            commit=event.head_commit,
            outcome=decision.outcome,
        )

    def log_busy(self, decision: RouteDecision, capacity: int) -> None:
        """Log a push refused because the build queue is full."""
        log_event(
            self._logger,
            "WARNING",
            HookEventType.BUSY,
            repository=decision.repository,
            event=decision.event.event_name,
            ref=decision.event.ref or None,
            outcome="busy",
            capacity=capacity,
        )

    def log_rejected(
        self, error: HookRejectedError, event_name: str | None = None
    ) -> None:
        """Log a request rejected before routing completed.

        The repository is only known for rejections raised after the payload
        was decoded.
        """
        log_event(
            self._logger,
            "WARNING",
            HookEventType.REJECTED,
            reason=error.reason,
            repository=error.repository,
            event=event_name,
            outcome="rejected",
            detail=str(error),
        )
