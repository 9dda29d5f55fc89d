"""Unit tests for the Falcon error handlers in spectacle.api.errors."""

from __future__ import annotations

import falcon
import falcon.asgi
import pytest

from spectacle.api.errors import (
    BAD_REQUEST_MEDIA,
    handle_bad_request,
    handle_busy,
    handle_forbidden,
    handle_method_not_allowed,
    handle_not_found,
)
from spectacle.builds import BuildQueueFullError
from spectacle.hooks import (
    MalformedRequestError,
    MethodNotAllowedError,
    RouteNotFoundError,
    SignatureMismatchError,
    UnknownRepositoryError,
)


def _response() -> falcon.asgi.Response:
    return falcon.asgi.Response()


@pytest.mark.asyncio
async def test_bad_request_body_hides_the_cause() -> None:
    """Malformed and unknown-repository responses are byte-identical."""
    malformed, unknown = _response(), _response()

    await handle_bad_request(
        None,  # type: ignore[arg-type]
        malformed,
        MalformedRequestError.invalid_payload("missing repository"),
        {},
    )
    await handle_bad_request(
        None,  # type: ignore[arg-type]
        unknown,
        UnknownRepositoryError("evil/corp"),
        {},
    )

    assert malformed.status == unknown.status == falcon.HTTP_400
    assert malformed.media == unknown.media == BAD_REQUEST_MEDIA
    assert "evil/corp" not in str(unknown.media)


@pytest.mark.asyncio
async def test_forbidden() -> None:
    """Signature mismatches map to 403 without naming the repository."""
    resp = _response()

    await handle_forbidden(None, resp, SignatureMismatchError("acme/widgets"), {})  # type: ignore[arg-type]

    assert resp.status == falcon.HTTP_403
    assert "acme/widgets" not in str(resp.media)


@pytest.mark.asyncio
async def test_routing_errors() -> None:
    """Route and method rejections map to 404 and 405."""
    not_found, not_allowed = _response(), _response()

    await handle_not_found(None, not_found, RouteNotFoundError("/x"), {})  # type: ignore[arg-type]
    await handle_method_not_allowed(
        None,  # type: ignore[arg-type]
        not_allowed,
        MethodNotAllowedError("PUT"),
        {},
    )

    assert not_found.status == falcon.HTTP_404
    assert not_allowed.status == falcon.HTTP_405
    assert not_allowed.get_header("Allow") == "POST"


@pytest.mark.asyncio
async def test_busy_sets_retry_after() -> None:
    """A full queue maps to 503 with Retry-After."""
    resp = _response()

    await handle_busy(None, resp, BuildQueueFullError(8), {})  # type: ignore[arg-type]

    assert resp.status == falcon.HTTP_503
    assert resp.get_header("Retry-After") == "30"
    assert resp.media == {
        "title": "Service unavailable",
        "description": "build system busy",
        "capacity": 8,
    }
