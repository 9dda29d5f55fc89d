"""Validation rules for the repository configuration file."""

from __future__ import annotations

import typing as typ
from pathlib import PurePosixPath

from spectacle.common.slug import is_valid_repo_slug

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .models import ConfigFile, RepositoryEntry


class ConfigValidationError(ValueError):
    """Raised when a configuration file fails structural validation."""

    def __init__(self, issues: list[str]) -> None:
        """Capture validation issues whilst preserving the aggregated message."""
        message = "\n".join(issues)
        super().__init__(message)
        self.issues = issues


def validate_config(
    config: ConfigFile,
    environ: cabc.Mapping[str, str],
) -> ConfigFile:
    """Validate a configuration file, returning it when all checks pass.

    Duplicate repository names are rejected rather than resolved by
    position, so a typo cannot silently shadow an earlier entry.
    """
    issues: list[str] = []
    seen: set[str] = set()

    for entry in config.repositories:
        if entry.name in seen:
            issues.append(f"duplicate repository '{entry.name}'")
        seen.add(entry.name)
        _validate_entry(entry, environ, issues)

    if issues:
        raise ConfigValidationError(issues)

    return config


def _validate_entry(
    entry: RepositoryEntry,
    environ: cabc.Mapping[str, str],
    issues: list[str],
) -> None:
    if not is_valid_repo_slug(entry.name):
        issues.append(
            f"repository name '{entry.name}' must be 'owner/name' using only "
            "letters, digits, dots, underscores, or dashes"
        )

    _validate_secret(entry, environ, issues)

    if not entry.branch.strip() or entry.branch != entry.branch.strip():
        issues.append(f"repository {entry.name} branch must be a non-empty name")

    script = PurePosixPath(entry.script)
    if not entry.script.strip() or script.is_absolute() or ".." in script.parts:
        issues.append(
            f"repository {entry.name} script '{entry.script}' must be a "
            "relative path inside the checkout"
        )

    if entry.clone_url is not None and not entry.clone_url.strip():
        issues.append(f"repository {entry.name} clone_url must not be empty")


def _validate_secret(
    entry: RepositoryEntry,
    environ: cabc.Mapping[str, str],
    issues: list[str],
) -> None:
    if (entry.secret is None) == (entry.secret_env is None):
        issues.append(
            f"repository {entry.name} must set exactly one of secret or secret_env"
        )
        return

    if entry.secret is not None and not entry.secret:
        issues.append(f"repository {entry.name} secret must not be empty")

    if entry.secret_env is not None and not environ.get(entry.secret_env):
        issues.append(
            f"repository {entry.name} secret_env {entry.secret_env} is unset or empty"
        )
