"""Command-line helper for validating a Spectacle configuration file."""

from __future__ import annotations

import argparse
from pathlib import Path

from .loader import DEFAULT_CLONE_URL_TEMPLATE, load_repositories
from .validation import ConfigValidationError


def main(argv: list[str] | None = None) -> int:
    """Validate a configuration file and list the repositories it registers.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.

    Returns
    -------
    int
        Exit code: 0 on success, 1 when validation fails.

    """
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("config", type=Path, help="YAML configuration to validate")
    parser.add_argument(
        "--clone-url-template",
        default=DEFAULT_CLONE_URL_TEMPLATE,
        help="Template used for repositories without an explicit clone_url",
    )
    args = parser.parse_args(argv)

    config_path: Path = args.config
    try:
        repositories = load_repositories(
            config_path, clone_url_template=args.clone_url_template
        )
    except ConfigValidationError as exc:
        print(f"Configuration validation failed for {config_path}:")
        for issue in exc.issues:
            print(f"  - {issue}")
        return 1
    except ValueError as exc:
        print(f"Invalid --clone-url-template: {exc}")
        return 1

    print(f"configuration {config_path} is valid ({len(repositories)} repositories)")
    for repository in repositories:
        print(
            f"  {repository.name} branch={repository.branch} "
            f"script={repository.script} clone_url={repository.clone_url}"
        )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
