"""Spectacle runtime entrypoint.

This module assembles the service from its environment: it loads the
repository configuration, resolves the restricted build identity, starts the
build worker and returns the Falcon ASGI application. ``main()`` serves that
application with Granian, keeping ``spectacle.runtime:create_app`` as the
stable factory entrypoint.

Configuration is driven by environment variables:

- ``SPECTACLE_HOST``: Bind address (default ``0.0.0.0``)
- ``SPECTACLE_PORT``: Listen port (default ``8283``)
- ``SPECTACLE_LOG_LEVEL``: Log level (default ``INFO``)
- the ``SPECTACLE_*`` service settings read by
  :meth:`spectacle.config.HookSettings.from_env`

Granian runs a single worker process so that exactly one build worker
exists and builds stay globally serialized.

Run the service directly with ``python -m spectacle.runtime``.
"""

from __future__ import annotations

import os
import typing as typ

from spectacle.builds.errors import IdentityError
from spectacle.config.validation import ConfigValidationError
from spectacle.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)
from spectacle.registry.errors import RegistryError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    import falcon.asgi

    from spectacle.api.app import AppDependencies
    from spectacle.builds.process import RestrictedProcessRunner
    from spectacle.config.settings import HookSettings

__all__ = ["build_dependencies", "create_app", "main"]

logger = get_logger(__name__)

DEFAULT_PORT = "8283"

# TCP port number range limits
_MIN_PORT = 1
_MAX_PORT = 65535


def _parse_port(port_str: str) -> int:
    """Parse and validate a port number string.

    Raises
    ------
    SystemExit
        If port_str is not a valid integer in range 1-65535.

    """
    try:
        port = int(port_str)
        if not (_MIN_PORT <= port <= _MAX_PORT):
            msg = f"port {port} outside valid range {_MIN_PORT}-{_MAX_PORT}"
            raise ValueError(msg)  # noqa: TRY301 - unify conversion and range errors
    except ValueError as exc:
        log_error(
            logger,
            "Invalid SPECTACLE_PORT value: %r (must be %d-%d): %s",
            port_str,
            _MIN_PORT,
            _MAX_PORT,
            exc,
        )
        raise SystemExit(1) from exc
    return port


def build_dependencies(
    settings: HookSettings,
    *,
    environ: cabc.Mapping[str, str] | None = None,
    runner: RestrictedProcessRunner | None = None,
) -> AppDependencies:
    """Assemble the intake and build worker described by *settings*.

    The worker is created but not started.

    Raises
    ------
    ConfigValidationError
        If the repository configuration file is missing or invalid.
    RegistryError
        If the configuration names a repository twice.
    IdentityError
        If the build user or group does not exist.

    """
    from spectacle.api.app import AppDependencies
    from spectacle.builds.process import PosixProcessRunner, RestrictedIdentity
    from spectacle.builds.queue import BuildQueue
    from spectacle.builds.worker import BuildWorker, WorkerSettings
    from spectacle.builds.workspace import WorkspaceManager
    from spectacle.config.loader import load_repositories
    from spectacle.hooks.router import EventRouter
    from spectacle.hooks.service import HookIntake
    from spectacle.hooks.signature import SignatureVerifier
    from spectacle.registry.service import RepositoryRegistry

    repositories = load_repositories(
        settings.config_path,
        clone_url_template=settings.clone_url_template,
        environ=environ,
    )
    registry = RepositoryRegistry(repositories)
    log_info(logger, "registered repos: %s", ", ".join(registry.names) or "-")

    identity = RestrictedIdentity.resolve(settings.build_user, settings.build_group)
    if identity.is_current_process():
        log_warning(
            logger,
            "builds run as the service identity %s (uid=%d); "
            "configure SPECTACLE_BUILD_USER to isolate them",
            identity.user,
            identity.uid,
        )

    build_queue = BuildQueue(settings.queue_capacity)
    workspaces = WorkspaceManager(
        settings.workspace_root,
        identity,
        keep_failed=settings.keep_failed_workspaces,
    )
    worker = BuildWorker(
        build_queue,
        workspaces,
        runner or PosixProcessRunner(),
        settings=WorkerSettings(
            fetch_timeout=settings.fetch_timeout,
            build_timeout=settings.build_timeout,
            build_path=settings.build_path,
        ),
    )
    router = EventRouter(registry, SignatureVerifier(settings.signature_algorithm))
    return AppDependencies(intake=HookIntake(router, build_queue), worker=worker)


def create_app() -> falcon.asgi.App:
    """Create the Falcon ASGI application and start the build worker.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    Raises
    ------
    SystemExit
        If the settings, the repository configuration or the build identity
        are invalid.

    """
    from spectacle.api.app import create_app as _create_api_app
    from spectacle.config.settings import HookSettings

    try:
        settings = HookSettings.from_env()
        deps = build_dependencies(settings)
    except ConfigValidationError as exc:
        log_error(logger, "Invalid repository configuration:\n%s", exc)
        raise SystemExit(1) from exc
    except (ValueError, RegistryError, IdentityError) as exc:
        log_error(logger, "Cannot start Spectacle: %s", exc)
        raise SystemExit(1) from exc

    if deps.worker is not None:
        deps.worker.start()
    return _create_api_app(deps)


def main() -> None:
    """Start the Spectacle server using Granian.

    Reads ``SPECTACLE_HOST``, ``SPECTACLE_PORT``, and ``SPECTACLE_LOG_LEVEL``
    from the environment and starts the ASGI server.
    """
    from granian import Granian
    from granian.constants import Interfaces

    host = os.environ.get("SPECTACLE_HOST", "0.0.0.0")  # noqa: S104 - bind all interfaces for container
    port_str = os.environ.get("SPECTACLE_PORT", DEFAULT_PORT)
    port = _parse_port(port_str)
    log_level_str = os.environ.get("SPECTACLE_LOG_LEVEL", "INFO")

    normalized_level, invalid_level = configure_logging(log_level_str)
    if invalid_level:
        log_warning(
            logger,
            "Invalid SPECTACLE_LOG_LEVEL %r, falling back to %s",
            log_level_str,
            normalized_level,
        )

    log_info(
        logger,
        "Starting Spectacle on %s:%d (log_level=%s)",
        host,
        port,
        normalized_level,
    )

    server = Granian(
        "spectacle.runtime:create_app",
        address=host,
        port=port,
        interface=Interfaces.ASGI,
        factory=True,
        workers=1,
    )
    server.serve()


if __name__ == "__main__":
    main()
