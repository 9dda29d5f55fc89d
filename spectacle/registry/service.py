"""Process-lifetime lookup of configured repositories."""

from __future__ import annotations

import types
import typing as typ

from .errors import DuplicateRepositoryError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from spectacle.config.models import RepositoryConfig


class RepositoryRegistry:
    """Immutable mapping from ``owner/name`` to ``RepositoryConfig``.

    The registry is built once at startup and only read afterwards, so it is
    shared between request handlers without locking. Lookups are exact and
    case-sensitive on the full repository name.
    """

    __slots__ = ("_repositories",)

    def __init__(self, repositories: cabc.Iterable[RepositoryConfig] = ()) -> None:
        """Index *repositories* by name, rejecting duplicates."""
        index: dict[str, RepositoryConfig] = {}
        for repository in repositories:
            if repository.name in index:
                raise DuplicateRepositoryError(repository.name)
            index[repository.name] = repository
        self._repositories = types.MappingProxyType(index)

    def get(self, name: str) -> RepositoryConfig | None:
        """Return the configuration for *name*, or ``None`` when unknown."""
        return self._repositories.get(name)

    @property
    def names(self) -> tuple[str, ...]:
        """Return the registered repository names in configuration order."""
        return tuple(self._repositories)

    def __contains__(self, name: object) -> bool:
        return name in self._repositories

    def __len__(self) -> int:
        return len(self._repositories)

    def __iter__(self) -> cabc.Iterator[RepositoryConfig]:
        return iter(self._repositories.values())
