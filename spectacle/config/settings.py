"""Service settings for the webhook intake and build worker.

This module provides the ``HookSettings`` dataclass, which controls where
the repository configuration lives, how webhooks are authenticated and how
builds are sandboxed.

Usage
-----
Create settings with defaults:

>>> settings = HookSettings()
>>> settings.queue_capacity
8

Or load from environment variables:

>>> import os
>>> os.environ["SPECTACLE_QUEUE_CAPACITY"] = "16"
>>> settings = HookSettings.from_env()
>>> settings.queue_capacity
16

"""

from __future__ import annotations

import dataclasses as dc
import os
import tempfile
import typing as typ
from pathlib import Path

from spectacle.builds.worker import DEFAULT_BUILD_PATH
from spectacle.hooks.signature import SignatureAlgorithm

from .loader import DEFAULT_CLONE_URL_TEMPLATE, check_clone_url_template

if typ.TYPE_CHECKING:
    import collections.abc as cabc

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off"})


@dc.dataclass(frozen=True, slots=True)
class HookSettings:
    """Configuration for webhook intake and build execution.

    Attributes
    ----------
    config_path
        YAML file listing the repositories that may trigger builds.
    workspace_root
        Directory under which per-repository workspaces are created.
    build_user
        Name of the unprivileged account builds run as.
    build_group
        Group builds run as; the build user's primary group when ``None``.
    signature_algorithm
        HMAC hash used to authenticate webhooks. ``sha1`` only for legacy
        senders.
    queue_capacity
        Number of jobs that may wait behind the running build before new
        pushes are rejected as busy.
    fetch_timeout
        Seconds allowed for the clone and checkout.
    build_timeout
        Seconds allowed for the build script.
    build_path
        ``PATH`` given to fetch and build subprocesses.
    clone_url_template
        Format string with a ``{name}`` placeholder used when a repository
        has no explicit ``clone_url``.
    keep_failed_workspaces
        Leave a failed build's workspace on disk for inspection.

    """

    config_path: Path = Path("spectacle.yaml")
    workspace_root: Path = dc.field(
        default_factory=lambda: Path(tempfile.gettempdir())
    )
    build_user: str = "nobody"
    build_group: str | None = None
    signature_algorithm: SignatureAlgorithm = SignatureAlgorithm.SHA256
    queue_capacity: int = 8
    fetch_timeout: float = 600.0
    build_timeout: float = 3600.0
    build_path: str = DEFAULT_BUILD_PATH
    clone_url_template: str = DEFAULT_CLONE_URL_TEMPLATE
    keep_failed_workspaces: bool = True

    @staticmethod
    def _parse_positive_int(
        environ: cabc.Mapping[str, str], env_var: str, default: int
    ) -> int:
        """Read a positive integer env var, falling back to a default."""
        raw = environ.get(env_var, "")
        if not raw.strip():
            return default
        try:
            value = int(raw)
        except ValueError as exc:
            msg = f"{env_var} must be an integer, got: {raw!r}"
            raise ValueError(msg) from exc
        if value < 1:
            msg = f"{env_var} must be positive, got: {value}"
            raise ValueError(msg)
        return value

    @staticmethod
    def _parse_positive_float(
        environ: cabc.Mapping[str, str], env_var: str, default: float
    ) -> float:
        """Read a positive number of seconds, falling back to a default."""
        raw = environ.get(env_var, "")
        if not raw.strip():
            return default
        try:
            value = float(raw)
        except ValueError as exc:
            msg = f"{env_var} must be a number of seconds, got: {raw!r}"
            raise ValueError(msg) from exc
        if value <= 0:
            msg = f"{env_var} must be positive, got: {value}"
            raise ValueError(msg)
        return value

    @staticmethod
    def _parse_bool(
        environ: cabc.Mapping[str, str], env_var: str, *, default: bool
    ) -> bool:
        raw = environ.get(env_var, "").strip().lower()
        if not raw:
            return default
        if raw in _TRUTHY:
            return True
        if raw in _FALSY:
            return False
        msg = f"{env_var} must be a boolean flag, got: {raw!r}"
        raise ValueError(msg)

    @staticmethod
    def _parse_algorithm(environ: cabc.Mapping[str, str]) -> SignatureAlgorithm:
        raw = environ.get("SPECTACLE_SIGNATURE_ALGORITHM", "").strip().lower()
        if not raw:
            return SignatureAlgorithm.SHA256
        try:
            return SignatureAlgorithm(raw)
        except ValueError as exc:
            choices = ", ".join(member.value for member in SignatureAlgorithm)
            msg = (
                f"SPECTACLE_SIGNATURE_ALGORITHM must be one of {choices}, "
                f"got: {raw!r}"
            )
            raise ValueError(msg) from exc

    @staticmethod
    def _parse_clone_url_template(environ: cabc.Mapping[str, str]) -> str:
        raw = environ.get("SPECTACLE_CLONE_URL_TEMPLATE", "").strip()
        if not raw:
            return DEFAULT_CLONE_URL_TEMPLATE
        try:
            return check_clone_url_template(raw)
        except ValueError as exc:
            msg = f"SPECTACLE_CLONE_URL_TEMPLATE is invalid: {exc}, got: {raw!r}"
            raise ValueError(msg) from exc

    @classmethod
    def from_env(cls, environ: cabc.Mapping[str, str] | None = None) -> HookSettings:
        """Create settings from environment variables.

        Reads ``SPECTACLE_CONFIG``, ``SPECTACLE_WORKSPACE_ROOT``,
        ``SPECTACLE_BUILD_USER``, ``SPECTACLE_BUILD_GROUP``,
        ``SPECTACLE_SIGNATURE_ALGORITHM``, ``SPECTACLE_QUEUE_CAPACITY``,
        ``SPECTACLE_FETCH_TIMEOUT``, ``SPECTACLE_BUILD_TIMEOUT``,
        ``SPECTACLE_BUILD_PATH``, ``SPECTACLE_CLONE_URL_TEMPLATE`` and
        ``SPECTACLE_KEEP_FAILED_WORKSPACES``. Unset or blank variables keep
        their defaults.

        Raises
        ------
        ValueError
            If any variable is set to a value that cannot be parsed.

        """
        env = os.environ if environ is None else environ
        defaults = cls()

        config_path = env.get("SPECTACLE_CONFIG", "").strip()
        workspace_root = env.get("SPECTACLE_WORKSPACE_ROOT", "").strip()
        build_group = env.get("SPECTACLE_BUILD_GROUP", "").strip()

        return cls(
            config_path=Path(config_path) if config_path else defaults.config_path,
            workspace_root=(
                Path(workspace_root) if workspace_root else defaults.workspace_root
            ),
            build_user=env.get("SPECTACLE_BUILD_USER", "").strip()
            or defaults.build_user,
            build_group=build_group or None,
            signature_algorithm=cls._parse_algorithm(env),
            queue_capacity=cls._parse_positive_int(
                env, "SPECTACLE_QUEUE_CAPACITY", defaults.queue_capacity
            ),
            fetch_timeout=cls._parse_positive_float(
                env, "SPECTACLE_FETCH_TIMEOUT", defaults.fetch_timeout
            ),
            build_timeout=cls._parse_positive_float(
                env, "SPECTACLE_BUILD_TIMEOUT", defaults.build_timeout
            ),
            build_path=env.get("SPECTACLE_BUILD_PATH", "").strip()
            or defaults.build_path,
            clone_url_template=cls._parse_clone_url_template(env),
            keep_failed_workspaces=cls._parse_bool(
                env,
                "SPECTACLE_KEEP_FAILED_WORKSPACES",
                default=defaults.keep_failed_workspaces,
            ),
        )
