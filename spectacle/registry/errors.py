"""Errors specific to the repository registry."""

from __future__ import annotations


class RegistryError(Exception):
    """Base class for registry errors."""


class DuplicateRepositoryError(RegistryError):
    """Raised when two configuration entries share a repository name."""

    def __init__(self, name: str) -> None:
        """Initialise with the duplicated repository name."""
        self.name = name
        super().__init__(f"Repository configured more than once: {name}")
