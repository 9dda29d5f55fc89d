"""Request timing middleware for the Falcon ASGI application.

Every response is stamped with ``Server: spectacle`` and each request logs
its method, path, status and elapsed time.

Usage
-----
Register the middleware when creating the Falcon app::

    from spectacle.api.middleware import RequestTimingMiddleware

    app = falcon.asgi.App(middleware=[RequestTimingMiddleware()])

"""

from __future__ import annotations

import time
import typing as typ

from spectacle.logging import get_logger, log_info

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from falcon.asgi import Request, Response

    from spectacle.logging import SupportsLog

__all__ = ["SERVER_NAME", "RequestTimingMiddleware"]

SERVER_NAME = "spectacle"


class RequestTimingMiddleware:
    """Falcon middleware that times requests and sets the ``Server`` header.

    Parameters
    ----------
    logger
        Logger receiving one line per request; this module's logger when
        omitted.
    clock
        Monotonic clock returning seconds.

    """

    def __init__(
        self,
        logger: SupportsLog | None = None,
        clock: cabc.Callable[[], float] = time.perf_counter,
    ) -> None:
        """Initialize the middleware with its logger and clock."""
        self._logger = logger or get_logger(__name__)
        self._clock = clock

    async def process_request(self, req: Request, _resp: Response) -> None:
        """Record the time the request arrived on ``req.context``."""
        req.context.started_at = self._clock()

    async def process_response(
        self,
        req: Request,
        resp: Response,
        _resource: object,
        req_succeeded: bool,  # noqa: ARG002, FBT001 - Falcon middleware signature
    ) -> None:
        """Set the ``Server`` header and log the elapsed time."""
        resp.set_header("Server", SERVER_NAME)
        started_at: float | None = getattr(req.context, "started_at", None)
        if started_at is None:
            return
        elapsed_ms = (self._clock() - started_at) * 1000
        log_info(
            self._logger,
            "%s %s -> %s in %.2fms",
            req.method,
            req.path,
            resp.status_code,
            elapsed_ms,
        )
