"""Typed webhook payloads and the inbound event model.

Only the fields Spectacle routes on are declared; msgspec ignores every other
field GitHub sends, so payload additions never break decoding.
"""

from __future__ import annotations

import dataclasses as dc
import enum

import msgspec

from .errors import MalformedRequestError

NULL_SHA = "0" * 40


class EventKind(enum.StrEnum):
    """Event kinds Spectacle distinguishes."""

    PUSH = "push"
    WATCH = "watch"
    OTHER = "other"

    @classmethod
    def from_header(cls, event_name: str) -> EventKind:
        """Map an ``X-GitHub-Event`` value onto a kind."""
        try:
            kind = cls(event_name.strip().lower())
        except ValueError:
            return cls.OTHER
        return kind


class RepositoryPayload(msgspec.Struct):
    """``repository`` object of a webhook payload."""

    full_name: str
    name: str | None = None


class CommitPayload(msgspec.Struct):
    """``head_commit`` object of a push payload."""

    id: str


class WebhookPayload(msgspec.Struct):
    """Subset of a GitHub webhook body used for routing."""

    repository: RepositoryPayload
    ref: str = ""
    after: str | None = None
    deleted: bool = False
    head_commit: CommitPayload | None = None


_PAYLOAD_DECODER = msgspec.json.Decoder(WebhookPayload)


def decode_payload(raw_body: bytes) -> WebhookPayload:
    """Decode an untrusted request body.

    Raises
    ------
    MalformedRequestError
        If the body is not JSON or lacks ``repository.full_name``.

    """
    try:
        return _PAYLOAD_DECODER.decode(raw_body)
    except msgspec.DecodeError as exc:
        raise MalformedRequestError.invalid_payload(str(exc)) from exc


@dc.dataclass(frozen=True, slots=True)
class InboundEvent:
    """Webhook event after its signature has been verified.

    Attributes
    ----------
    kind
        Routed event kind.
    event_name
        Raw ``X-GitHub-Event`` value, kept for logging.
    ref
        Git ref the event refers to; empty for events without one.
    repository_full_name
        ``owner/name`` of the repository as sent by GitHub.
    head_commit
        Commit SHA the push moved the ref to, when known.
    deleted
        True for pushes that delete the ref.

    """

    kind: EventKind
    event_name: str
    ref: str
    repository_full_name: str
    head_commit: str | None = None
    deleted: bool = False

    @classmethod
    def from_payload(cls, payload: WebhookPayload, event_name: str) -> InboundEvent:
        """Build an event from a decoded payload and its event header."""
        head_commit: str | None = None
        if payload.head_commit is not None:
            head_commit = payload.head_commit.id
        elif payload.after and payload.after != NULL_SHA:
            head_commit = payload.after

        return cls(
            kind=EventKind.from_header(event_name),
            event_name=event_name,
            ref=payload.ref,
            repository_full_name=payload.repository.full_name,
            head_commit=head_commit,
            deleted=payload.deleted,
        )
