"""Per-repository workspace directories for build jobs.

Every job starts from an empty tree: whatever a previous run left at the same
path is removed before the new tree is created. The tree is then chowned to
the restricted build identity so the fetch and build subprocesses can write
to it without any of the service's privileges.

Layout for ``acme/widgets`` under ``/tmp``::

    /tmp/spectacle-acme-widgets/        (root, also GOPATH)
        home/                           (HOME)
        src/acme/widgets/               (checkout, created by git clone)

"""

from __future__ import annotations

import os
import shutil
import typing as typ
from pathlib import Path

from spectacle.common.slug import parse_repo_slug, workspace_dirname

from .errors import WorkspacePreparationError
from .models import Workspace

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .models import BuildJob
    from .process import RestrictedIdentity

_ROOT_MODE = 0o750


class WorkspaceManager:
    """Create and destroy workspace trees under a fixed root directory."""

    def __init__(
        self,
        root: Path,
        owner: RestrictedIdentity,
        *,
        keep_failed: bool = True,
    ) -> None:
        """Configure the manager.

        Parameters
        ----------
        root
            Directory that holds every workspace.
        owner
            Identity each workspace tree is chowned to.
        keep_failed
            Leave the tree of a failed build on disk for inspection.

        """
        self.root = Path(root)
        self.owner = owner
        self.keep_failed = keep_failed

    def path_for(self, repository: str) -> Path:
        """Return the workspace root for *repository*."""
        return self.root / workspace_dirname(repository)

    def prepare(self, job: BuildJob) -> Workspace:
        """Create a fresh workspace for *job*.

        Raises
        ------
        WorkspacePreparationError
            Naming the first filesystem operation that failed. Nothing is
            executed for a job whose workspace could not be prepared.

        """
        root = self.path_for(job.repository)
        try:
            owner, name = parse_repo_slug(job.repository)
        except ValueError as exc:
            raise WorkspacePreparationError("derive checkout path", root, exc) from exc

        workspace = Workspace(
            root=root,
            checkout_dir=root / "src" / owner / name,
            home_dir=root / "home",
            owner=self.owner,
        )

        _step("remove stale workspace", root, lambda: _remove_tree(root))
        _step("create workspace", root, lambda: root.mkdir(mode=_ROOT_MODE, parents=True))
        _step("create home directory", workspace.home_dir, workspace.home_dir.mkdir)
        _step(
            "create source directory",
            workspace.checkout_dir.parent,
            lambda: workspace.checkout_dir.parent.mkdir(parents=True),
        )
        _step("change ownership", root, lambda: self._chown_tree(root))
        return workspace

    def release(self, workspace: Workspace, *, succeeded: bool) -> bool:
        """Remove *workspace* unless it belongs to a failed build being kept.

        Returns True when the tree was removed.
        """
        if not succeeded and self.keep_failed:
            return False
        _step("remove workspace", workspace.root, lambda: _remove_tree(workspace.root))
        return True

    def _chown_tree(self, root: Path) -> None:
        uid, gid = self.owner.uid, self.owner.gid
        os.chown(root, uid, gid, follow_symlinks=False)
        for dirpath, dirnames, filenames in os.walk(root):
            for entry in (*dirnames, *filenames):
                os.chown(Path(dirpath) / entry, uid, gid, follow_symlinks=False)


def _step(operation: str, path: Path, action: cabc.Callable[[], object]) -> None:
    """Run a filesystem *action*, wrapping ``OSError`` with its operation name."""
    try:
        action()
    except OSError as exc:
        raise WorkspacePreparationError(operation, path, exc) from exc


def _remove_tree(path: Path) -> None:
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.exists():
        shutil.rmtree(path)
