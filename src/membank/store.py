"""Bank Store: document CRUD at a bank location.

A bank is a directory holding the five markdown documents. The same
functions serve central and project-local banks.
"""

import logging
import shutil
from datetime import datetime
from pathlib import Path

from .constants import DOCUMENT_NAMES, DOCUMENT_SUFFIX
from .templates import TEMPLATES

logger = logging.getLogger(__name__)


def document_path(path: Path, name: str) -> Path:
    """File holding document ``name`` in the bank at ``path``."""
    return Path(path) / f"{name}{DOCUMENT_SUFFIX}"


def has_content(path: Path) -> bool:
    """True if ``path`` is a directory with at least one entry."""
    path = Path(path)
    return path.is_dir() and any(path.iterdir())


def list_documents(path: Path) -> list[Path]:
    """Markdown documents in a bank, sorted by name."""
    path = Path(path)
    if not path.is_dir():
        return []
    return sorted(p for p in path.glob(f"*{DOCUMENT_SUFFIX}") if p.is_file())


def read_document(path: Path, name: str) -> str:
    """Read one document.

    Raises:
        FileNotFoundError: If the document does not exist
    """
    return document_path(path, name).read_text(encoding="utf-8")


def write_document(path: Path, name: str, text: str) -> None:
    """Overwrite one document, creating the bank directory if needed."""
    Path(path).mkdir(parents=True, exist_ok=True)
    document_path(path, name).write_text(text, encoding="utf-8")


def write_template(path: Path, name: str, now: datetime | None = None) -> None:
    """Write document ``name`` from its template."""
    write_document(path, name, TEMPLATES[name].render(now))


def initialize(path: Path, now: datetime | None = None) -> None:
    """Create a bank at ``path`` from templates.

    Existing documents are overwritten. Check ``has_content`` first where
    that would lose data.
    """
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    for name in DOCUMENT_NAMES:
        write_template(path, name, now)
    logger.info(f"Initialized memory bank at {path}")


def _remove_entry(entry: Path) -> None:
    if entry.is_dir() and not entry.is_symlink():
        shutil.rmtree(entry)
    else:
        entry.unlink()


def copy_all(src: Path, dst: Path) -> bool:
    """Replace the contents of ``dst`` with a copy of ``src``.

    Everything already in ``dst`` is removed first so no stale documents
    survive a change of shape.

    Returns:
        False (and ``dst`` untouched) if ``src`` is absent or empty,
        True once the copy is complete
    """
    src, dst = Path(src), Path(dst)
    if not has_content(src):
        logger.warning(f"Memory bank directory is empty or doesn't exist: {src}")
        return False

    dst.mkdir(parents=True, exist_ok=True)
    for entry in dst.iterdir():
        _remove_entry(entry)

    for entry in src.iterdir():
        if entry.is_dir():
            shutil.copytree(entry, dst / entry.name)
        else:
            shutil.copy2(entry, dst / entry.name)

    logger.debug(f"Copied memory bank {src} -> {dst}")
    return True


def append_text(path: Path, name: str, text: str) -> None:
    """Append raw text to a document, creating it from template if absent."""
    doc = document_path(path, name)
    if not doc.exists():
        write_template(path, name)
    with doc.open("a", encoding="utf-8") as f:
        f.write(text)


def append_section(path: Path, name: str, heading: str, body: str) -> None:
    """Append a level-2 section to a document.

    The document is created from its template first if it does not exist.
    """
    body = body.rstrip("\n")
    append_text(path, name, f"\n## {heading}\n\n{body}\n")
