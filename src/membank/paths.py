"""Path resolution: project identity and bank locations.

Identity is derived from the project path and current git state. It is
only as stable as the directory and branch naming it comes from.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from .config import Settings
from .constants import DEFAULT_BRANCH, TEMP_DOMAIN, UNKNOWN_DOMAIN
from .models import Identity, ProjectContext
from .vcs import GitOracle

logger = logging.getLogger(__name__)

# macOS per-user temp dirs, e.g. /private/var/folders/x7/abc/T/tmp.4o7rQgHUlB
_MACOS_TEMP = re.compile(r"(/private)?/var/folders/.*/T/tmp\.")


def _relative_parts(path: Path, base: Path) -> tuple[str, ...] | None:
    try:
        return path.relative_to(base).parts
    except ValueError:
        return None


def _has_marker(directory: Path, markers: list[str]) -> bool:
    for marker in markers:
        if any(ch in marker for ch in "*?["):
            if any(directory.glob(marker)):
                return True
        elif (directory / marker).exists():
            return True
    return False


def resolve_root(cwd: Path, settings: Settings, oracle: GitOracle | None = None) -> Path:
    """Find the project root for ``cwd``.

    Tries the git top-level first, then the nearest ancestor carrying a
    project marker, then falls back to ``cwd`` itself. Never fails.
    """
    cwd = Path(cwd).absolute()
    oracle = oracle or GitOracle(cwd)

    toplevel = oracle.toplevel()
    if toplevel is not None:
        return toplevel

    current = cwd
    while current != current.parent:
        if _has_marker(current, settings.project_markers):
            return current
        current = current.parent

    return cwd


def _is_temp_path(root: Path, settings: Settings) -> bool:
    if _MACOS_TEMP.search(str(root)):
        return True
    return any(_relative_parts(root, temp) is not None for temp in settings.temp_roots)


def resolve_domain(root: Path, settings: Settings) -> str:
    """Extract the grouping domain from a project root.

    Examples (with default settings):
        ~/code/domains/acme/widget  -> "acme"
        ~/code/acme/widget          -> "acme"   (legacy layout)
        /private/var/folders/.../T/tmp.X -> "temp"
        /                           -> "unknown"
    """
    root = Path(root)
    if not root.is_absolute():
        root = Path.cwd() / root

    parts = _relative_parts(root, settings.domains_root)
    if parts:
        return parts[0]

    parts = _relative_parts(root, settings.legacy_root)
    if parts and len(parts) >= 2:
        return parts[0]

    if _is_temp_path(root, settings):
        return TEMP_DOMAIN

    domain = root.parent.name
    # single-letter names are temp mounts like macOS ".../T"
    if domain in ("", "/", ".", "..") or len(domain) == 1:
        return UNKNOWN_DOMAIN
    return domain


def resolve_project(root: Path) -> str:
    """Project name is the basename of its root."""
    return Path(root).name or UNKNOWN_DOMAIN


def resolve_branch(oracle: GitOracle) -> str:
    """Current git branch, or the fallback sentinel outside a branch."""
    return oracle.current_branch() or DEFAULT_BRANCH


def central_path(settings: Settings, domain: str, project: str, branch: str | None = None) -> Path:
    """Central bank directory; omit ``branch`` for the project directory."""
    path = settings.central_root / domain / project
    if branch:
        path = path / branch
    return path


def identity_path(settings: Settings, identity: Identity) -> Path:
    """Central bank directory for an identity."""
    return central_path(settings, identity.domain, identity.project, identity.branch)


def local_path(root: Path, settings: Settings) -> Path:
    """Project-local bank directory."""
    root = Path(root)
    if not root.is_absolute():
        root = Path.cwd() / root
    return root / settings.local_dir_name


def resolve_context(settings: Settings, cwd: Path | None = None) -> tuple[ProjectContext, GitOracle]:
    """Resolve root and identity once for a command invocation.

    Returns:
        (context, oracle) where the oracle is bound to the project root
    """
    cwd = Path(cwd) if cwd else Path.cwd()
    root = resolve_root(cwd, settings)
    oracle = GitOracle(root)

    identity = Identity(
        domain=resolve_domain(root, settings),
        project=resolve_project(root),
        branch=resolve_branch(oracle),
    )
    logger.debug(f"Resolved {identity} at {root}")
    return ProjectContext(root=root, identity=identity), oracle
