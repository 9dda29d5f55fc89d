"""Application factory for the Spectacle Falcon ASGI application.

This module provides ``create_app()`` which builds the Falcon ASGI
application with health endpoints and, when an intake is supplied, the
webhook endpoint.

Usage
-----
Create a health-only app::

    app = create_app()

Create the full app::

    from spectacle.api.app import AppDependencies, create_app

    deps = AppDependencies(intake=intake, worker=worker)
    app = create_app(deps)

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import falcon.asgi

from spectacle.api.errors import register_error_handlers
from spectacle.api.health.resources import HealthResource, ReadyResource
from spectacle.api.middleware import RequestTimingMiddleware
from spectacle.hooks.router import HOOK_PATH

if typ.TYPE_CHECKING:
    from spectacle.builds.worker import BuildWorker
    from spectacle.hooks.service import HookIntake

__all__ = ["AppDependencies", "create_app"]


@dc.dataclass(frozen=True, slots=True)
class AppDependencies:
    """Dependencies for the Falcon ASGI application.

    Attributes
    ----------
    intake
        Webhook intake. When ``None`` only health endpoints are registered.
    worker
        Build worker whose liveness gates readiness.

    """

    intake: HookIntake | None = None
    worker: BuildWorker | None = None


def create_app(
    dependencies: AppDependencies | None = None,
) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Parameters
    ----------
    dependencies
        Optional application dependencies. When ``None`` or without an
        intake, only ``/health`` and ``/ready`` are available.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    deps = dependencies or AppDependencies()
    app = falcon.asgi.App(middleware=[RequestTimingMiddleware()])  # type: ignore[no-matching-overload]  # Falcon stubs

    queue = deps.intake.queue if deps.intake is not None else None
    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource(deps.worker, queue))

    if deps.intake is not None:
        from spectacle.api.hooks.resources import HookResource

        app.add_route(HOOK_PATH, HookResource(deps.intake))

    register_error_handlers(app)
    return app
