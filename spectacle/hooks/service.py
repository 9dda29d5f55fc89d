"""Webhook intake: route a request, queue its build, log the outcome."""

from __future__ import annotations

import typing as typ

from spectacle.builds.errors import BuildQueueFullError

from .errors import HookRejectedError
from .observability import HookEventLogger
from .router import RouteOutcome

if typ.TYPE_CHECKING:
    from spectacle.builds.queue import BuildQueue

    from .router import EventRouter, HookRequest, RouteDecision


class HookIntake:
    """Accept webhook requests on behalf of the HTTP layer.

    The intake returns as soon as a job is queued; it never waits for the
    build. Rejections and a full queue are re-raised after being logged so
    the HTTP layer can map them to status codes.
    """

    def __init__(
        self,
        router: EventRouter,
        queue: BuildQueue,
        event_logger: HookEventLogger | None = None,
    ) -> None:
        """Configure the intake with its router, queue and event logger."""
        self.router = router
        self.queue = queue
        self._events = event_logger or HookEventLogger()

    def handle(self, request: HookRequest) -> RouteDecision:
        """Route *request* and queue the resulting job, if any.

        Raises
        ------
        HookRejectedError
            Any rejection raised by the router.
        BuildQueueFullError
            If a build was due but the queue is at capacity.

        """
        try:
            decision = self.router.route(request)
        except HookRejectedError as exc:
            self._events.log_rejected(exc, request.event)
            raise

        if decision.outcome is RouteOutcome.QUEUED and decision.job is not None:
            try:
                self.queue.submit(decision.job)
            except BuildQueueFullError as exc:
                self._events.log_busy(decision, exc.capacity)
                raise

        self._events.log_decision(decision)
        return decision
