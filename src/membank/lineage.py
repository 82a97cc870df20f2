"""Lineage Merger: carry bank content across branches.

Merging is a plain append of the source's sections under a provenance
heading. There is no diffing and no deduplication: merging the same
source twice appends its sections twice.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from . import store
from .config import Settings
from .constants import (
    LINEAGE_HEADING,
    MERGED_VERB,
    PRIMARY_DOCUMENT,
    REBASE_EVENT_HEADING,
    REBASED_VERB,
)
from .errors import EmptySource, SourceMissing, TargetMissing
from .models import Identity, format_timestamp
from .sync import SyncEngine

logger = logging.getLogger(__name__)


def structural_sections(text: str) -> str:
    """Everything from the first level-2 heading onward.

    Title and preamble lines are dropped. Returns "" when the document
    has no level-2 heading.
    """
    lines = text.splitlines(keepends=True)
    for i, line in enumerate(lines):
        if line.startswith("## "):
            return "".join(lines[i:])
    return ""


def lineage_note(parent: str, now: datetime | None = None) -> str:
    return f"* {format_timestamp(now)} - Branch created from {parent}"


def rebase_note(branch: str, base: str, now: datetime | None = None) -> str:
    return f"* {format_timestamp(now)} - Rebased memory bank from {branch} onto {base}"


def merge_note(source: str, branch: str, now: datetime | None = None) -> str:
    return f"* {format_timestamp(now)} - Merged branch {source} into {branch}"


class LineageMerger:
    """Inherits, merges and rebases central banks between identities."""

    def __init__(self, settings: Settings, sync: SyncEngine | None = None):
        self.settings = settings
        self.sync = sync or SyncEngine(settings)

    def _require_source(self, path: Path, label: str = "Source") -> None:
        if not path.is_dir():
            raise SourceMissing(path, label)
        if not store.has_content(path):
            raise EmptySource(path)

    def _require_target(self, path: Path, label: str = "Target") -> None:
        if not path.is_dir():
            raise TargetMissing(path, label)

    def inherit(self, source: Identity, target: Identity, now: datetime | None = None) -> Path:
        """Seed ``target`` with a full copy of ``source`` plus a lineage note.

        Only ``activeContext`` differs from the source afterwards.

        Returns:
            Path of the target central bank

        Raises:
            SourceMissing: If the source central bank does not exist
            EmptySource: If it exists but holds nothing
        """
        src = self.sync.central(source)
        dst = self.sync.central(target)
        self._require_source(src)

        store.copy_all(src, dst)
        store.append_section(dst, PRIMARY_DOCUMENT, LINEAGE_HEADING, lineage_note(source.branch, now))

        logger.info(f"Copied memory bank from {source.branch} to {target.branch}")
        return dst

    def merge_into(
        self,
        source: Identity,
        target: Identity,
        verb: str = MERGED_VERB,
        now: datetime | None = None,
    ) -> list[str]:
        """Append every document of ``source`` onto ``target``.

        Documents missing from the target are copied verbatim. Others get
        a ``## <verb> from <branch> on <ts>`` heading followed by the
        source's sections.

        Returns:
            Names of the documents written

        Raises:
            SourceMissing: If the source central bank does not exist
            EmptySource: If the source holds nothing
            TargetMissing: If the target central bank does not exist
        """
        src = self.sync.central(source)
        dst = self.sync.central(target)
        self._require_source(src)
        self._require_target(dst)

        stamp = format_timestamp(now)
        written = []
        for doc in store.list_documents(src):
            target_doc = dst / doc.name
            if not target_doc.exists():
                logger.info(f"Copying {doc.name} (not present in target)...")
                target_doc.write_text(doc.read_text(encoding="utf-8"), encoding="utf-8")
            else:
                logger.info(f"Merging {doc.name}...")
                existing = target_doc.read_text(encoding="utf-8")
                separator = "" if not existing or existing.endswith("\n") else "\n"
                merged = (
                    existing
                    + separator
                    + f"\n## {verb} from {source.branch} on {stamp}\n\n"
                    + structural_sections(doc.read_text(encoding="utf-8"))
                )
                target_doc.write_text(merged, encoding="utf-8")
            written.append(doc.stem)

        logger.info(f"{verb} memory bank from {source.branch} into {target.branch}")
        return written

    def rebase_onto(self, base: Identity, current: Identity, root: Path, now: datetime | None = None) -> list[str]:
        """Record a rebase onto ``base`` and fold its content into ``current``.

        Finishes by pulling the result into the project-local bank.
        """
        base_path = self.sync.central(base)
        current_path = self.sync.central(current)
        self._require_source(base_path, "Base")
        self._require_target(current_path, "Current")

        store.append_section(
            current_path,
            PRIMARY_DOCUMENT,
            REBASE_EVENT_HEADING,
            rebase_note(current.branch, base.branch, now),
        )
        written = self.merge_into(base, current, verb=REBASED_VERB, now=now)
        self.sync.sync_to_project(root, current)
        return written
