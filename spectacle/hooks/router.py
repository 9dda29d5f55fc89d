"""Resolve authenticated webhook requests into build decisions.

The router is independent of the HTTP framework: it takes the pieces of a
request it needs as a :class:`HookRequest` and either returns a
:class:`RouteDecision` or raises one of the rejection errors from
:mod:`spectacle.hooks.errors`. Checks run in a fixed order so that nothing
derived from the body is acted upon before the signature has been verified
against the raw bytes.
"""

from __future__ import annotations

import dataclasses as dc
import enum
import re
import typing as typ

from spectacle.builds.models import BuildJob

from .errors import (
    MalformedRequestError,
    MethodNotAllowedError,
    RouteNotFoundError,
    SignatureMismatchError,
    UnknownRepositoryError,
)
from .events import EventKind, InboundEvent, decode_payload

if typ.TYPE_CHECKING:
    from spectacle.config.models import RepositoryConfig
    from spectacle.registry import RepositoryRegistry

    from .signature import SignatureVerifier

HOOK_PATH = "/hook"
JSON_MEDIA_TYPE = "application/json"
EVENT_HEADER = "X-GitHub-Event"

_REF_PREFIXES = ("refs/heads/", "refs/tags/")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


class RouteOutcome(enum.StrEnum):
    """Non-error outcomes of routing a request."""

    QUEUED = "queued"
    IGNORED = "ignored"
    UNHANDLED = "unhandled"


@dc.dataclass(frozen=True, slots=True)
class HookRequest:
    """Framework-neutral view of an inbound webhook request."""

    path: str
    method: str
    content_type: str | None
    signature: str | None
    event: str | None
    body: bytes


@dc.dataclass(frozen=True, slots=True)
class RouteDecision:
    """Result of routing an authenticated request.

    ``job`` is set only when ``outcome`` is ``QUEUED``.
    """

    outcome: RouteOutcome
    repository: str
    event: InboundEvent
    job: BuildJob | None = None


def branch_from_ref(ref: str) -> str:
    """Strip the ``refs/heads/`` or ``refs/tags/`` prefix from *ref*.

    >>> branch_from_ref("refs/heads/main")
    'main'
    >>> branch_from_ref("main")
    'main'

    """
    for prefix in _REF_PREFIXES:
        if ref.startswith(prefix):
            return ref.removeprefix(prefix)
    return ref


def is_json_media_type(content_type: str | None) -> bool:
    """Return True when *content_type* names JSON, ignoring parameters."""
    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == JSON_MEDIA_TYPE


class EventRouter:
    """Turn webhook requests for configured repositories into build jobs."""

    def __init__(
        self,
        registry: RepositoryRegistry,
        verifier: SignatureVerifier,
    ) -> None:
        """Configure the router with the registry and signature verifier."""
        self._registry = registry
        self._verifier = verifier

    @property
    def signature_header(self) -> str:
        """Return the header signatures are read from."""
        return self._verifier.header

    def route(self, request: HookRequest) -> RouteDecision:
        """Validate, authenticate and dispatch *request*.

        Raises
        ------
        RouteNotFoundError
            If the path is not the hook endpoint.
        MethodNotAllowedError
            If the method is not POST.
        MalformedRequestError
            For a non-JSON content type, a missing or implausible signature
            header, an undecodable body, or a missing event header.
        UnknownRepositoryError
            If the payload names a repository that is not configured.
        SignatureMismatchError
            If the body was not signed with the repository's secret.

        """
        if request.path != HOOK_PATH:
            raise RouteNotFoundError(request.path)
        if request.method.upper() != "POST":
            raise MethodNotAllowedError(request.method)
        if not is_json_media_type(request.content_type):
            raise MalformedRequestError.unsupported_content_type(request.content_type)

        digest = self._verifier.extract_digest(request.signature)
        payload = decode_payload(request.body)

        repository = self._registry.get(payload.repository.full_name)
        if repository is None:
            raise UnknownRepositoryError(payload.repository.full_name)

        if not self._verifier.verify(request.body, digest, repository.secret):
            raise SignatureMismatchError(repository.name)

        if not request.event:
            raise MalformedRequestError.missing_header(EVENT_HEADER)

        event = InboundEvent.from_payload(payload, request.event)
        return self.dispatch(event, repository)

    def dispatch(
        self, event: InboundEvent, repository: RepositoryConfig
    ) -> RouteDecision:
        """Decide what an authenticated event for *repository* triggers."""
        if event.kind is not EventKind.PUSH:
            return RouteDecision(RouteOutcome.UNHANDLED, repository.name, event)

        if (
            event.deleted
            or _CONTROL_CHARS.search(event.ref)
            or not event.ref.endswith(repository.branch)
        ):
            return RouteDecision(RouteOutcome.IGNORED, repository.name, event)

        job = BuildJob(
            repository=repository.name,
            clone_url=repository.clone_url,
            branch=branch_from_ref(event.ref),
            commit=event.head_commit,
            script=repository.script,
        )
        return RouteDecision(RouteOutcome.QUEUED, repository.name, event, job)
