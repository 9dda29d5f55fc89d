"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import typing as typ

import pytest

from spectacle.builds.process import RestrictedIdentity
from spectacle.builds.queue import BuildQueue
from spectacle.builds.workspace import WorkspaceManager
from spectacle.config.models import RepositoryConfig
from spectacle.hooks.router import EventRouter
from spectacle.hooks.signature import SignatureVerifier
from spectacle.registry.service import RepositoryRegistry
from tests.helpers.fakes import FakeLogger
from tests.helpers.webhooks import SECRET

if typ.TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def fake_logger() -> FakeLogger:
    """Return a logger that records every call."""
    return FakeLogger()


@pytest.fixture
def widgets_config() -> RepositoryConfig:
    """Return the configuration of the ``acme/widgets`` repository."""
    return RepositoryConfig(
        name="acme/widgets",
        secret=SECRET,
        branch="main",
        clone_url="https://github.com/acme/widgets.git",
    )


@pytest.fixture
def registry(widgets_config: RepositoryConfig) -> RepositoryRegistry:
    """Return a registry holding ``acme/widgets`` and ``acme/gadgets``."""
    gadgets = RepositoryConfig(
        name="acme/gadgets",
        secret=b"gadget-secret",
        branch="release",
        clone_url="https://github.com/acme/gadgets.git",
        script="ci/build.sh",
    )
    return RepositoryRegistry([widgets_config, gadgets])


@pytest.fixture
def router(registry: RepositoryRegistry) -> EventRouter:
    """Return a router verifying SHA-256 signatures."""
    return EventRouter(registry, SignatureVerifier())


@pytest.fixture
def build_queue() -> BuildQueue:
    """Return an empty queue with room for two jobs."""
    return BuildQueue(capacity=2)


@pytest.fixture
def identity() -> RestrictedIdentity:
    """Return the test process's own identity."""
    return RestrictedIdentity.current()


@pytest.fixture
def workspaces(tmp_path: Path, identity: RestrictedIdentity) -> WorkspaceManager:
    """Return a workspace manager rooted in a temporary directory."""
    return WorkspaceManager(tmp_path / "workspaces", identity)
