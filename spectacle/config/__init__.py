"""Repository configuration loading, validation and service settings.

Validate a configuration file::

    >>> from spectacle.config import load_repositories
    >>> repositories = load_repositories("spectacle.yaml")

Read service settings from the environment::

    >>> from spectacle.config import HookSettings
    >>> settings = HookSettings.from_env()
"""

from __future__ import annotations

from .loader import (
    DEFAULT_CLONE_URL_TEMPLATE,
    check_clone_url_template,
    load_config_file,
    load_repositories,
    resolve_repository,
)
from .models import ConfigFile, RepositoryConfig, RepositoryEntry
from .validation import ConfigValidationError, validate_config
from .settings import HookSettings  # noqa: I001 - imports hooks, keep last

__all__ = [
    "DEFAULT_CLONE_URL_TEMPLATE",
    "ConfigFile",
    "ConfigValidationError",
    "HookSettings",
    "RepositoryConfig",
    "RepositoryEntry",
    "check_clone_url_template",
    "load_config_file",
    "load_repositories",
    "resolve_repository",
    "validate_config",
]
