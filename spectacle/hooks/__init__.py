"""Authenticated intake of GitHub webhook requests.

Route a request and queue its build::

    >>> from spectacle.hooks import EventRouter, HookIntake, SignatureVerifier
    >>> router = EventRouter(registry, SignatureVerifier())
    >>> decision = HookIntake(router, build_queue).handle(request)
    >>> decision.outcome
    <RouteOutcome.QUEUED: 'queued'>
"""

from __future__ import annotations

from .signature import SignatureAlgorithm, SignatureVerifier, sign, verify  # noqa: I001
from .errors import (
    HookRejectedError,
    MalformedRequestError,
    MethodNotAllowedError,
    RouteNotFoundError,
    SignatureMismatchError,
    UnknownRepositoryError,
)
from .events import EventKind, InboundEvent, WebhookPayload, decode_payload
from .observability import HookEventLogger, HookEventType
from .router import (
    EVENT_HEADER,
    HOOK_PATH,
    EventRouter,
    HookRequest,
    RouteDecision,
    RouteOutcome,
    branch_from_ref,
)
from .service import HookIntake

__all__ = [
    "EVENT_HEADER",
    "HOOK_PATH",
    "EventKind",
    "EventRouter",
    "HookEventLogger",
    "HookEventType",
    "HookIntake",
    "HookRejectedError",
    "HookRequest",
    "InboundEvent",
    "MalformedRequestError",
    "MethodNotAllowedError",
    "RouteDecision",
    "RouteNotFoundError",
    "RouteOutcome",
    "SignatureAlgorithm",
    "SignatureMismatchError",
    "SignatureVerifier",
    "UnknownRepositoryError",
    "WebhookPayload",
    "branch_from_ref",
    "decode_payload",
    "sign",
    "verify",
]
