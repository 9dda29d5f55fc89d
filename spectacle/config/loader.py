"""YAML loaders for the repository configuration file."""

from __future__ import annotations

import os
import typing as typ
from pathlib import Path

import msgspec
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .models import ConfigFile, RepositoryConfig, RepositoryEntry
from .validation import ConfigValidationError, validate_config

if typ.TYPE_CHECKING:
    import collections.abc as cabc

YAML_VERSION = (1, 2)
DEFAULT_CLONE_URL_TEMPLATE = "https://github.com/{name}.git"


def check_clone_url_template(template: str) -> str:
    """Return *template* when it formats with nothing but a repository name.

    Raises
    ------
    ValueError
        If the template lacks a ``{name}`` placeholder or uses any other
        replacement field.

    """
    if "{name}" not in template:
        msg = "clone URL template must contain a {name} placeholder"
        raise ValueError(msg)
    try:
        template.format(name="owner/repo")
    except (AttributeError, IndexError, KeyError, ValueError) as exc:
        msg = f"clone URL template may only use the {{name}} placeholder ({exc!s})"
        raise ValueError(msg) from exc
    return template


def load_config_file(
    path: Path | str,
    *,
    environ: cabc.Mapping[str, str] | None = None,
) -> ConfigFile:
    """Parse and validate a YAML configuration file."""
    yaml = _yaml()
    path_obj = Path(path)

    try:
        loaded = yaml.load(path_obj.read_text(encoding="utf-8"))
    except (OSError, YAMLError) as exc:
        raise ConfigValidationError([f"failed to parse YAML: {exc}"]) from exc

    if loaded is None:
        raise ConfigValidationError(["configuration file is empty"])

    try:
        config = msgspec.convert(loaded, type=ConfigFile)
    except msgspec.ValidationError as exc:
        raise ConfigValidationError([f"schema validation failed: {exc}"]) from exc

    return validate_config(config, os.environ if environ is None else environ)


def load_repositories(
    path: Path | str,
    *,
    clone_url_template: str = DEFAULT_CLONE_URL_TEMPLATE,
    environ: cabc.Mapping[str, str] | None = None,
) -> list[RepositoryConfig]:
    """Load a configuration file and resolve each entry for the registry.

    Secrets given through ``secret_env`` are read from *environ* (the process
    environment by default) exactly once, at load time.

    Raises
    ------
    ConfigValidationError
        If the file is missing, unparseable or invalid.
    ValueError
        If *clone_url_template* is not a usable template.
    """
    check_clone_url_template(clone_url_template)
    env = os.environ if environ is None else environ
    config = load_config_file(path, environ=env)
    return [
        resolve_repository(entry, clone_url_template=clone_url_template, environ=env)
        for entry in config.repositories
    ]


def resolve_repository(
    entry: RepositoryEntry,
    *,
    clone_url_template: str = DEFAULT_CLONE_URL_TEMPLATE,
    environ: cabc.Mapping[str, str] | None = None,
) -> RepositoryConfig:
    """Turn a validated entry into an immutable ``RepositoryConfig``."""
    env = os.environ if environ is None else environ
    if entry.secret_env is not None:
        secret = env[entry.secret_env]
    else:
        secret = entry.secret or ""

    clone_url = entry.clone_url or clone_url_template.format(name=entry.name)
    return RepositoryConfig(
        name=entry.name,
        secret=secret.encode("utf-8"),
        branch=entry.branch,
        clone_url=clone_url,
        script=entry.script,
    )


def _yaml() -> YAML:
    yaml = YAML(typ="safe")
    yaml.version = YAML_VERSION
    yaml.allow_duplicate_keys = False
    return yaml
