"""Repository slug utilities.

Repository slugs are GitHub identifiers in ``owner/name`` format. They are not
filesystem paths, even though they use ``/`` as a separator, so they should be
parsed using these helpers rather than ``pathlib``.
"""

from __future__ import annotations

import re

REPO_SEGMENT_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")
_UNSAFE_PATH_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def parse_repo_slug(slug: str) -> tuple[str, str]:
    """Parse a repository slug into owner and name.

    Parameters
    ----------
    slug:
        Repository slug in ``owner/name`` format.

    Returns
    -------
    tuple[str, str]
        ``(owner, name)``.

    Raises
    ------
    ValueError
        If the slug is not in ``owner/name`` format.

    Examples
    --------
    >>> parse_repo_slug("acme/widgets")
    ('acme', 'widgets')

    """
    if slug.count("/") != 1:
        msg = f"Invalid repository slug: expected 'owner/name', got {slug!r}"
        raise ValueError(msg)

    owner, name = slug.split("/")
    if not owner or not name:
        msg = f"Invalid repository slug: expected 'owner/name', got {slug!r}"
        raise ValueError(msg)

    return owner, name


def is_valid_repo_slug(slug: str) -> bool:
    """Return True when both slug segments use GitHub-safe characters.

    ``.`` and ``..`` are rejected even though the characters are allowed,
    because they would escape the workspace tree.
    """
    try:
        owner, name = parse_repo_slug(slug)
    except ValueError:
        return False
    return all(
        REPO_SEGMENT_PATTERN.match(segment) and segment not in {".", ".."}
        for segment in (owner, name)
    )


def workspace_dirname(slug: str, *, prefix: str = "spectacle") -> str:
    """Return a single path component derived from a repository slug.

    Path separators and any character outside ``[A-Za-z0-9._-]`` are
    replaced with ``-`` so the result never nests or traverses.

    Examples
    --------
    >>> workspace_dirname("acme/widgets")
    'spectacle-acme-widgets'
    >>> workspace_dirname("../etc")
    'spectacle-..-etc'

    """
    return f"{prefix}-{_UNSAFE_PATH_CHARS.sub('-', slug)}"
