"""Rejection reasons for inbound webhook requests.

Each class is a distinct rejection outcome of routing. The HTTP layer maps
them onto status codes in :mod:`spectacle.api.errors`.
"""

from __future__ import annotations


class HookRejectedError(Exception):
    """Base class for requests refused before any build is queued."""

    reason = "rejected"
    repository: str | None = None


class RouteNotFoundError(HookRejectedError):
    """Raised when a request targets a path other than the hook endpoint."""

    reason = "not_found"

    def __init__(self, path: str) -> None:
        """Initialise with the requested path."""
        self.path = path
        super().__init__(f"No hook endpoint at {path!r}")


class MethodNotAllowedError(HookRejectedError):
    """Raised when the hook endpoint is called with a method other than POST."""

    reason = "method_not_allowed"

    def __init__(self, method: str) -> None:
        """Initialise with the offending method."""
        self.method = method
        super().__init__(f"Method {method} is not allowed on the hook endpoint")


class MalformedRequestError(HookRejectedError):
    """Raised for requests whose headers or body cannot be processed."""

    reason = "malformed"

    @classmethod
    def unsupported_content_type(cls, content_type: str | None) -> MalformedRequestError:
        """Return an error for a body that is not declared as JSON."""
        return cls(f"Unsupported content type: {content_type!r}")

    @classmethod
    def missing_header(cls, header: str) -> MalformedRequestError:
        """Return an error for a required header that was not sent."""
        return cls(f"Missing required header {header}")

    @classmethod
    def short_signature(cls, header: str) -> MalformedRequestError:
        """Return an error for a signature header too short to hold a digest."""
        return cls(f"Header {header} is too short to carry a signature")

    @classmethod
    def wrong_signature_prefix(cls, header: str, prefix: str) -> MalformedRequestError:
        """Return an error for a signature made with an unexpected algorithm."""
        return cls(f"Header {header} must start with {prefix!r}")

    @classmethod
    def invalid_payload(cls, detail: str) -> MalformedRequestError:
        """Return an error for a body that does not decode into an event."""
        return cls(f"Malformed payload: {detail}")


class UnknownRepositoryError(HookRejectedError):
    """Raised when the payload names a repository that is not configured.

    The HTTP response is identical to :class:`MalformedRequestError` so
    callers cannot probe which repositories are registered.
    """

    reason = "unknown_repository"

    def __init__(self, repository: str) -> None:
        """Initialise with the repository named in the payload."""
        self.repository = repository
        super().__init__(f"Repository is not configured: {repository}")


class SignatureMismatchError(HookRejectedError):
    """Raised when the body does not match the signature for its repository."""

    reason = "forbidden"

    def __init__(self, repository: str) -> None:
        """Initialise with the repository whose secret was used."""
        self.repository = repository
        super().__init__(f"Signature mismatch for {repository}")
