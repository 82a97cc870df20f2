"""Orchestrator: user verbs and git hook entry points.

A BankManager is built once per invocation from resolved settings and a
ProjectContext. CLI verbs raise BankError on precondition failures. Hook
entry points never raise for bank problems, since a failing hook would
block the user's git operation.
"""

from __future__ import annotations

import functools
import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from git.exc import GitCommandError

from . import gitignore, store
from .classifier import classify_checkout, extract_merged_branch, extract_rebase_base
from .config import Settings
from .constants import (
    ARCHIVE_DIR_NAME,
    HOOK_NAMES,
    MERGE_EVENT_HEADING,
    PRIMARY_DOCUMENT,
    REBASE_EVENT_HEADING,
    REBASED_VERB,
)
from .errors import AmbiguousClassification, BankError, EmptySource, SourceMissing
from .lineage import LineageMerger, merge_note, rebase_note
from .models import (
    BankStatus,
    Classification,
    ExistingBranchSwitch,
    GitignoreStatus,
    Identity,
    NewBranchFromParent,
    NonBranchCheckout,
    ProjectContext,
    SeedChoice,
    format_archive_date,
)
from .paths import central_path, identity_path, local_path
from .sync import SyncEngine
from .vcs import GitOracle

logger = logging.getLogger(__name__)

# (target branch, current branch) -> "create" | "copy"
SeedChooser = Callable[[str, str], SeedChoice]

UNKNOWN_REF = "unknown"


def hook_entry_point(func):
    """Log bank errors instead of raising them out of a git hook."""

    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except (BankError, OSError, UnicodeError, GitCommandError) as e:
            logger.error(f"{func.__name__} hook failed: {e}")
            return None

    return wrapper


class BankManager:
    """Wires path resolution, store, sync, lineage and classification together."""

    def __init__(self, settings: Settings, context: ProjectContext, oracle: Optional[GitOracle] = None):
        self.settings = settings
        self.context = context
        self.oracle = oracle or GitOracle(context.root)
        self.sync = SyncEngine(settings)
        self.lineage = LineageMerger(settings, self.sync)

    @property
    def root(self) -> Path:
        return self.context.root

    @property
    def identity(self) -> Identity:
        return self.context.identity

    @property
    def local(self) -> Path:
        return local_path(self.root, self.settings)

    def central(self, branch: str | None = None) -> Path:
        """Central bank for ``branch`` (default: the current branch)."""
        return identity_path(self.settings, self.identity.with_branch(branch or self.identity.branch))

    @property
    def project_dir(self) -> Path:
        return central_path(self.settings, self.identity.domain, self.identity.project)

    # ─────────────────────────────────────────────────────────────────────────
    # Reporting
    # ─────────────────────────────────────────────────────────────────────────

    def check_gitignore(self) -> GitignoreStatus:
        return gitignore.check(self.root, self.local, self.settings.global_gitignore, self.oracle)

    def status(self) -> BankStatus:
        """Identity, bank locations and whether everything is in place."""
        hooks_dir = self.settings.hooks_dir
        return BankStatus(
            identity=self.identity,
            root=self.root,
            local_path=self.local,
            central_path=self.central(),
            local_exists=self.local.is_dir(),
            central_exists=self.central().is_dir(),
            gitignore=self.check_gitignore(),
            hooks_dir=hooks_dir,
            missing_hooks=[name for name in HOOK_NAMES if not (hooks_dir / name).exists()],
        )

    def list_banks(self, archived: bool = False) -> list[str]:
        """Branch names with a central bank, or archived bank names."""
        base = self.project_dir / ARCHIVE_DIR_NAME if archived else self.project_dir
        if not base.is_dir():
            return []

        names = []
        for path in sorted(base.rglob("*")):
            if not path.is_dir() or not any(p.is_file() for p in path.iterdir()):
                continue
            rel = path.relative_to(base)
            if not archived and rel.parts[0] == ARCHIVE_DIR_NAME:
                continue
            names.append(rel.as_posix())
        return names

    # ─────────────────────────────────────────────────────────────────────────
    # Verbs
    # ─────────────────────────────────────────────────────────────────────────

    def ensure_gitignore(self) -> bool:
        return gitignore.ensure_project_entry(self.root)

    def fix_gitignore(self) -> tuple[bool, bool]:
        """Add the project and global entries.

        Returns:
            (project .gitignore changed, global gitignore changed)
        """
        return (
            gitignore.ensure_project_entry(self.root),
            gitignore.ensure_global_entry(
                self.settings.global_gitignore, register=self.settings.register_excludesfile
            ),
        )

    def create(self, now: datetime | None = None) -> Path:
        """Create the current branch's central bank and load it locally.

        Overwrites an existing central bank.
        """
        central = self.central()
        store.initialize(central, now)
        logger.info(f"Created new memory bank at {central}")
        self.sync.sync_to_project(self.root, self.identity)
        self.ensure_gitignore()
        return central

    def switch(self, target: str | None = None, choose_seed: SeedChooser | None = None) -> Identity:
        """Flush the current bank and load ``target``'s.

        If ``target`` has no central bank yet, ``choose_seed`` decides
        between a fresh bank ("create", the default) and a copy of the
        current branch's bank ("copy").

        Raises:
            SourceMissing: If copying and the current branch has no bank
        """
        current = self.identity
        target_id = current.with_branch(target or current.branch)

        self.sync.sync_to_central(self.root, current)

        target_path = identity_path(self.settings, target_id)
        if not store.has_content(target_path):
            logger.info(f"Memory bank for {target_id.branch} does not exist.")
            choice = choose_seed(target_id.branch, current.branch) if choose_seed else "create"
            if choice == "copy":
                self.lineage.inherit(current, target_id)
            else:
                store.initialize(target_path)
                logger.info(f"Created new memory bank at {target_path}")

        self.sync.sync_to_project(self.root, target_id)
        self.ensure_gitignore()
        logger.info(f"Switched to memory bank for {target_id.project} ({target_id.branch})")
        return target_id

    def sync_all(self):
        """Push local to central, then pull back."""
        result = self.sync.sync_bidirectional(self.root, self.identity)
        self.ensure_gitignore()
        return result

    def archive(self, branch: str | None = None, now: datetime | None = None) -> Path:
        """Move a branch's central bank under ``archive/<branch>-<YYYYMMDD>``.

        Raises:
            SourceMissing: If the branch has no central bank
        """
        branch = branch or self.identity.branch
        src = self.central(branch)
        if not src.is_dir():
            raise SourceMissing(src, f"Branch '{branch}'")

        base = self.project_dir / ARCHIVE_DIR_NAME / f"{branch}-{format_archive_date(now)}"
        final = base
        counter = 1
        while final.exists():
            final = base.with_name(f"{base.name}-{counter}")
            counter += 1

        final.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(src), str(final))

        # Clean up empty parents left by slashed branch names
        parent = src.parent
        if parent != self.project_dir and parent.is_dir() and not any(parent.iterdir()):
            parent.rmdir()

        logger.info(f"Archived memory bank for {branch} to {final}")
        return final

    def merge(self, source: str) -> list[str]:
        """Merge ``source``'s central bank into the current one and reload."""
        self.sync.sync_to_central(self.root, self.identity)
        written = self.lineage.merge_into(self.identity.with_branch(source), self.identity)
        self.sync.sync_to_project(self.root, self.identity)
        return written

    def rebase(self, base: str) -> list[str]:
        """Record a rebase onto ``base`` and fold its bank into the current one."""
        self.sync.sync_to_central(self.root, self.identity)
        return self.lineage.rebase_onto(self.identity.with_branch(base), self.identity, self.root)

    # ─────────────────────────────────────────────────────────────────────────
    # Hook entry points
    # ─────────────────────────────────────────────────────────────────────────

    def _load_current(self) -> None:
        central = self.central()
        if not store.has_content(central):
            store.initialize(central)
            logger.info(f"Created new memory bank at {central}")
        self.sync.sync_to_project(self.root, self.identity)

    def _inherit_from(self, parent: str) -> None:
        if store.has_content(self.central()):
            raise AmbiguousClassification(
                f"{self.identity.branch} already has a memory bank; "
                f"not inheriting from {parent}"
            )
        self.lineage.inherit(self.identity.with_branch(parent), self.identity)
        self.sync.sync_to_project(self.root, self.identity)

    @hook_entry_point
    def pre_checkout(self) -> None:
        """Flush the departing branch's local bank to central."""
        self.sync.sync_to_central(self.root, self.identity)

    @hook_entry_point
    def post_checkout(self, prev_ref: str, new_ref: str, branch_flag: str) -> Classification:
        """Load the bank for the branch just checked out.

        A newly created branch inherits its parent's bank. Any other branch
        checkout loads (or creates) the branch's own bank. File checkouts
        are ignored.

        Returns:
            What was done: NewBranchFromParent only if the bank was
            inherited, ExistingBranchSwitch otherwise
        """
        classification = classify_checkout(
            prev_ref,
            new_ref,
            branch_flag,
            self.oracle.reflog(self.settings.checkout_window),
            self.identity.branch,
            self.oracle.ref_name,
        )
        logger.debug(f"post-checkout {prev_ref[:7]}..{new_ref[:7]}: {classification.kind}")

        if isinstance(classification, NonBranchCheckout):
            return classification

        inherited = False
        if isinstance(classification, NewBranchFromParent):
            try:
                self._inherit_from(classification.parent)
                inherited = True
            except AmbiguousClassification as e:
                logger.info(f"{e}; treating as a branch switch")
            except (SourceMissing, EmptySource) as e:
                logger.warning(f"Cannot inherit from {classification.parent}: {e}")

        if not inherited:
            classification = ExistingBranchSwitch()
            self._load_current()

        self.ensure_gitignore()
        return classification

    @hook_entry_point
    def post_merge(self) -> str:
        """Record a merge in the current bank.

        Returns:
            Name of the merged branch, or "" if history does not say
        """
        merged = extract_merged_branch(self.oracle.reflog(self.settings.checkout_window))

        self.sync.sync_to_central(self.root, self.identity)
        if store.document_path(self.local, PRIMARY_DOCUMENT).exists():
            store.append_section(
                self.local,
                PRIMARY_DOCUMENT,
                MERGE_EVENT_HEADING,
                merge_note(merged or UNKNOWN_REF, self.identity.branch),
            )
        self.sync.sync_to_central(self.root, self.identity)

        self.ensure_gitignore()
        return merged

    @hook_entry_point
    def post_rebase(self) -> str:
        """Record a rebase and fold the base branch's bank in.

        Returns:
            Name of the base branch, or "" if history does not say
        """
        base = extract_rebase_base(self.oracle.reflog(self.settings.rebase_window))

        self.sync.sync_to_central(self.root, self.identity)
        if store.document_path(self.local, PRIMARY_DOCUMENT).exists():
            store.append_section(
                self.local,
                PRIMARY_DOCUMENT,
                REBASE_EVENT_HEADING,
                rebase_note(self.identity.branch, base or UNKNOWN_REF),
            )
        self.sync.sync_to_central(self.root, self.identity)

        if base and base != self.identity.branch and store.has_content(self.central(base)):
            self.lineage.merge_into(self.identity.with_branch(base), self.identity, verb=REBASED_VERB)
            self.sync.sync_to_project(self.root, self.identity)
        else:
            logger.info(f"No memory bank to rebase onto ({base or 'base branch unknown'})")

        self.ensure_gitignore()
        return base
