"""Health probe resources for liveness and readiness checks.

Liveness only shows the process is serving HTTP. Readiness additionally
requires the build worker thread to be running, since an intake without a
worker would queue jobs that are never built.

Usage
-----
Register health endpoints on the Falcon app::

    from spectacle.api.health.resources import HealthResource, ReadyResource

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource(worker, build_queue))

"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from spectacle.builds.queue import BuildQueue
    from spectacle.builds.worker import BuildWorker

__all__ = ["HealthResource", "ReadyResource"]


class HealthResource:
    """Liveness probe resource returning ``{"status": "ok"}``."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /health requests."""
        resp.media = {"status": "ok"}
        resp.status = HTTPStatus.OK


class ReadyResource:
    """Readiness probe reporting the worker's health and the queue depth.

    Responds with HTTP 200 and ``{"status": "ready", "queued": n}`` while
    the worker thread is alive, and HTTP 503 otherwise. Without a worker
    (an app built only for health checks) the resource is always ready.

    """

    def __init__(
        self,
        worker: BuildWorker | None = None,
        queue: BuildQueue | None = None,
    ) -> None:
        """Configure the probe with the worker and queue to inspect."""
        self._worker = worker
        self._queue = queue

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /ready requests.

        Parameters
        ----------
        _req
            Falcon request (unused).
        resp
            Falcon response populated with readiness status.

        """
        queued = self._queue.depth if self._queue is not None else 0
        if self._worker is not None and not self._worker.is_alive():
            resp.media = {"status": "unavailable", "queued": queued}
            resp.status = HTTPStatus.SERVICE_UNAVAILABLE
            return
        resp.media = {"status": "ready", "queued": queued}
        resp.status = HTTPStatus.OK
