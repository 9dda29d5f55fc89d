"""Typed repository configuration structures."""

from __future__ import annotations

import dataclasses as dc

import msgspec

DEFAULT_BRANCH = "main"
DEFAULT_BUILD_SCRIPT = "spectacle.sh"


class RepositoryEntry(msgspec.Struct, kw_only=True, forbid_unknown_fields=True):
    """Repository entry as written in the YAML configuration file.

    Attributes
    ----------
    name : str
        GitHub ``owner/name`` identifier, matched against
        ``repository.full_name`` in webhook payloads.
    secret : str, optional
        Shared webhook secret given inline.
    secret_env : str, optional
        Name of an environment variable holding the shared secret.
    branch : str
        Branch whose pushes trigger a build. Matched as a ref suffix.
    clone_url : str, optional
        Explicit clone URL; derived from the service template when omitted.
    script : str
        Build script path relative to the checkout root.

    """

    name: str
    secret: str | None = None
    secret_env: str | None = None
    branch: str = DEFAULT_BRANCH
    clone_url: str | None = None
    script: str = DEFAULT_BUILD_SCRIPT


class ConfigFile(msgspec.Struct, kw_only=True, forbid_unknown_fields=True):
    """Top-level structure of the Spectacle configuration file."""

    repositories: list[RepositoryEntry] = msgspec.field(default_factory=list)


@dc.dataclass(frozen=True, slots=True)
class RepositoryConfig:
    """Resolved, immutable configuration for one repository.

    The secret is excluded from ``repr`` so configuration objects can be
    logged without leaking it.
    """

    name: str
    secret: bytes = dc.field(repr=False)
    branch: str = DEFAULT_BRANCH
    clone_url: str = ""
    script: str = DEFAULT_BUILD_SCRIPT
