"""Keep the project-local bank out of version control."""

import logging
from pathlib import Path
from typing import Optional

from .constants import GLOBAL_GITIGNORE_ENTRY, PROJECT_GITIGNORE_ENTRY
from .models import GitignoreStatus
from .vcs import GitOracle

logger = logging.getLogger(__name__)


def _lines(path: Path) -> list[str]:
    if not path.exists():
        return []
    return path.read_text().splitlines()


def has_project_entry(root: Path) -> bool:
    return any(line.startswith(PROJECT_GITIGNORE_ENTRY) for line in _lines(Path(root) / ".gitignore"))


def has_global_entry(global_gitignore: Path) -> bool:
    return any(GLOBAL_GITIGNORE_ENTRY in line for line in _lines(global_gitignore))


def _append_line(path: Path, line: str) -> None:
    text = path.read_text() if path.exists() else ""
    if text and not text.endswith("\n"):
        text += "\n"
    path.write_text(f"{text}{line}\n")


def ensure_project_entry(root: Path) -> bool:
    """Add ``/memory-bank`` to the project .gitignore.

    Returns:
        True if the file was changed
    """
    gitignore = Path(root) / ".gitignore"
    if has_project_entry(root):
        return False
    _append_line(gitignore, PROJECT_GITIGNORE_ENTRY)
    logger.info(f"Added {PROJECT_GITIGNORE_ENTRY} to {gitignore}")
    return True


def ensure_global_entry(global_gitignore: Path, register: bool = True) -> bool:
    """Add ``memory-bank/`` to the global gitignore.

    A newly created file is registered as ``core.excludesfile`` when
    ``register`` is set.

    Returns:
        True if the file was changed
    """
    global_gitignore = Path(global_gitignore)
    created = not global_gitignore.exists()
    if created:
        global_gitignore.parent.mkdir(parents=True, exist_ok=True)
        global_gitignore.touch()
        if register:
            GitOracle.register_global_excludesfile(global_gitignore)

    if has_global_entry(global_gitignore):
        return created
    _append_line(global_gitignore, GLOBAL_GITIGNORE_ENTRY)
    logger.info(f"Added {GLOBAL_GITIGNORE_ENTRY} to {global_gitignore}")
    return True


def check(root: Path, local: Path, global_gitignore: Path, oracle: Optional[GitOracle] = None) -> GitignoreStatus:
    """Report whether the local bank is ignored."""
    oracle = oracle or GitOracle(root)
    return GitignoreStatus(
        project_entry=has_project_entry(root),
        global_entry=has_global_entry(global_gitignore),
        ignored=oracle.is_ignored(local),
    )
