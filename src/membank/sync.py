"""Sync Engine: copy a bank between the project and the central store.

Whole-document overwrite only. The side being copied from wins outright.
"""

import logging
from pathlib import Path

from . import store
from .config import Settings
from .constants import PRIMARY_DOCUMENT
from .models import Identity, ToCentralOutcome, ToProjectOutcome
from .paths import identity_path, local_path

logger = logging.getLogger(__name__)


class SyncEngine:
    """Moves bank contents between a project root and the central store."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def central(self, identity: Identity) -> Path:
        return identity_path(self.settings, identity)

    def local(self, root: Path) -> Path:
        return local_path(root, self.settings)

    def sync_to_central(self, root: Path, identity: Identity) -> ToCentralOutcome:
        """Flush the project-local bank to the central bank.

        An empty or missing local bank never erases central. Instead the
        local bank is restored from central when central has content.
        """
        local, central = self.local(root), self.central(identity)

        if store.copy_all(local, central):
            logger.info(f"Synced memory bank from project to central: {identity.branch}")
            return "pushed"

        if store.copy_all(central, local):
            logger.info(f"Restored project memory bank from central: {identity.branch}")
            return "restored"

        logger.warning(f"No memory bank to sync for {identity}")
        return "skipped"

    def sync_to_project(self, root: Path, identity: Identity) -> ToProjectOutcome:
        """Replace the project-local bank with the central bank.

        With no central content, the local bank is seeded from templates
        unless it already has a primary document.
        """
        local, central = self.local(root), self.central(identity)

        if store.copy_all(central, local):
            logger.info(f"Synced memory bank from central to project: {identity.branch}")
            return "pulled"

        if not store.document_path(local, PRIMARY_DOCUMENT).exists():
            store.initialize(local)
            logger.info("Created default memory bank files in project")
            return "seeded"

        return "skipped"

    def sync_bidirectional(self, root: Path, identity: Identity) -> tuple[ToCentralOutcome, ToProjectOutcome]:
        """Push local to central, then pull central back to local."""
        return self.sync_to_central(root, identity), self.sync_to_project(root, identity)
