"""Read-only git access for branch context resolution.

git is consulted for the work tree root, the current branch, ref names and
recent reflog subjects. The only write is registering a global excludes
file on request.
"""

import logging
import re
from pathlib import Path
from typing import Optional

from git import Git, Repo
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError

logger = logging.getLogger(__name__)

_NAME_REV_SUFFIX = re.compile(r"[~^].*$")


class GitOracle:
    """Answers questions about the git repository containing a path.

    Every query degrades to an empty answer outside a work tree, so
    callers never need to guard against a missing repository.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._repo: Optional[Repo] = None
        self._probed = False

    @property
    def repo(self) -> Optional[Repo]:
        """Lazy-load git repo, or None when not inside one."""
        if not self._probed:
            self._probed = True
            try:
                self._repo = Repo(self.path, search_parent_directories=True)
            except (InvalidGitRepositoryError, NoSuchPathError):
                logger.debug(f"Not a git repository: {self.path}")
                self._repo = None
        return self._repo

    @property
    def in_work_tree(self) -> bool:
        repo = self.repo
        return repo is not None and not repo.bare

    def toplevel(self) -> Optional[Path]:
        """Top-level directory of the work tree."""
        if not self.in_work_tree:
            return None
        return Path(self.repo.working_tree_dir)

    def current_branch(self) -> Optional[str]:
        """Name of the checked-out branch.

        None when detached, before the first commit, or outside git.
        """
        repo = self.repo
        if repo is None:
            return None
        try:
            if repo.head.is_detached or not repo.head.is_valid():
                return None
            return repo.active_branch.name
        except (TypeError, ValueError) as e:
            logger.debug(f"Could not read current branch: {e}")
            return None

    def reflog(self, n: int) -> list[str]:
        """Subjects of the ``n`` most recent HEAD reflog entries, newest first."""
        repo = self.repo
        if repo is None:
            return []
        try:
            output = repo.git.reflog("show", "-n", str(n), "--format=%gs", "HEAD")
        except GitCommandError as e:
            logger.debug(f"No reflog available: {e}")
            return []
        return [line.strip() for line in output.splitlines() if line.strip()]

    def ref_name(self, ref: str) -> Optional[str]:
        """Human-readable branch name for a commit or ref, if any."""
        repo = self.repo
        if repo is None or not ref:
            return None
        try:
            name = repo.git.name_rev("--name-only", "--no-undefined", "--refs=refs/heads/*", ref)
        except GitCommandError as e:
            logger.debug(f"Could not name {ref}: {e}")
            return None
        name = _NAME_REV_SUFFIX.sub("", name.strip())
        return name.removeprefix("heads/") or None

    def is_ignored(self, path: Path) -> Optional[bool]:
        """Whether git ignores ``path``; None outside a work tree."""
        if not self.in_work_tree:
            return None
        try:
            self.repo.git.check_ignore("-q", str(path))
        except GitCommandError:
            return False
        return True

    @staticmethod
    def register_global_excludesfile(path: Path) -> None:
        """Point ``core.excludesfile`` in the global git config at ``path``."""
        Git().config("--global", "core.excludesfile", str(path))
