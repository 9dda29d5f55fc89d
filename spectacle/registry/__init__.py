"""Registry of repositories allowed to trigger builds."""

from __future__ import annotations

from .errors import DuplicateRepositoryError, RegistryError
from .service import RepositoryRegistry

__all__ = ["DuplicateRepositoryError", "RegistryError", "RepositoryRegistry"]
