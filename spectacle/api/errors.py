"""Falcon error handlers for webhook rejections.

Each handler translates one rejection raised by
:class:`~spectacle.hooks.service.HookIntake` into an HTTP response. The
intake has already logged the rejection, so handlers only shape the
response.

Usage
-----
Register every handler on the Falcon app::

    from spectacle.api.errors import register_error_handlers

    register_error_handlers(app)

"""

from __future__ import annotations

import typing as typ

import falcon

from spectacle.builds.errors import BuildQueueFullError
from spectacle.hooks.errors import (
    MalformedRequestError,
    MethodNotAllowedError,
    RouteNotFoundError,
    SignatureMismatchError,
    UnknownRepositoryError,
)

if typ.TYPE_CHECKING:
    from falcon.asgi import App, Request, Response

__all__ = [
    "BAD_REQUEST_MEDIA",
    "RETRY_AFTER_SECONDS",
    "handle_bad_request",
    "handle_busy",
    "handle_forbidden",
    "handle_method_not_allowed",
    "handle_not_found",
    "register_error_handlers",
]

RETRY_AFTER_SECONDS = 30

# Shared by malformed requests and unknown repositories.
BAD_REQUEST_MEDIA: typ.Final[dict[str, str]] = {
    "title": "Bad request",
    "description": "The webhook request could not be processed.",
}


async def handle_bad_request(
    _req: Request,
    resp: Response,
    _ex: MalformedRequestError | UnknownRepositoryError,
    _params: dict[str, typ.Any],
) -> None:
    """Map malformed requests and unknown repositories to HTTP 400.

    Both produce the same body so a caller cannot tell whether a repository
    is configured.
    """
    resp.status = falcon.HTTP_400
    resp.media = dict(BAD_REQUEST_MEDIA)


async def handle_forbidden(
    _req: Request,
    resp: Response,
    _ex: SignatureMismatchError,
    _params: dict[str, typ.Any],
) -> None:
    """Map a signature mismatch to HTTP 403."""
    resp.status = falcon.HTTP_403
    resp.media = {
        "title": "Forbidden",
        "description": "The webhook signature did not match.",
    }


async def handle_not_found(
    _req: Request,
    resp: Response,
    _ex: RouteNotFoundError,
    _params: dict[str, typ.Any],
) -> None:
    """Map a request for an unknown path to HTTP 404."""
    resp.status = falcon.HTTP_404
    resp.media = {"title": "Not found"}


async def handle_method_not_allowed(
    _req: Request,
    resp: Response,
    _ex: MethodNotAllowedError,
    _params: dict[str, typ.Any],
) -> None:
    """Map a non-POST request to the hook endpoint to HTTP 405."""
    resp.status = falcon.HTTP_405
    resp.set_header("Allow", "POST")
    resp.media = {"title": "Method not allowed"}


async def handle_busy(
    _req: Request,
    resp: Response,
    ex: BuildQueueFullError,
    _params: dict[str, typ.Any],
) -> None:
    """Map a full build queue to HTTP 503 with a ``Retry-After`` hint.

    Parameters
    ----------
    _req
        Falcon request (unused).
    resp
        Falcon response whose status, headers and media are set.
    ex
        The queue error carrying the exceeded capacity.
    _params
        URI template parameters (unused).

    """
    resp.status = falcon.HTTP_503
    resp.set_header("Retry-After", str(RETRY_AFTER_SECONDS))
    resp.media = {
        "title": "Service unavailable",
        "description": "build system busy",
        "capacity": ex.capacity,
    }


def register_error_handlers(app: App) -> None:
    """Register the webhook rejection handlers on *app*."""
    app.add_error_handler(MalformedRequestError, handle_bad_request)
    app.add_error_handler(UnknownRepositoryError, handle_bad_request)
    app.add_error_handler(SignatureMismatchError, handle_forbidden)
    app.add_error_handler(RouteNotFoundError, handle_not_found)
    app.add_error_handler(MethodNotAllowedError, handle_method_not_allowed)
    app.add_error_handler(BuildQueueFullError, handle_busy)
