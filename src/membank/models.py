"""Core data models for memory bank management.

Uses Pydantic v2 for validation. Identities are derived from the
filesystem and git on each invocation, never persisted.
"""

from datetime import datetime
from pathlib import Path
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict

from .constants import ARCHIVE_DATE_FORMAT, TIMESTAMP_FORMAT


def local_now() -> datetime:
    """Get current local timestamp."""
    return datetime.now()


def format_timestamp(ts: datetime | None = None) -> str:
    """Format a timestamp the way notes and templates print it."""
    return (ts or local_now()).strftime(TIMESTAMP_FORMAT)


def format_archive_date(ts: datetime | None = None) -> str:
    """Format the date stamp used in archived bank names."""
    return (ts or local_now()).strftime(ARCHIVE_DATE_FORMAT)


class Identity(BaseModel):
    """Key of a central bank: (domain, project, branch)."""

    model_config = ConfigDict(frozen=True)

    domain: str
    project: str
    branch: str

    def with_branch(self, branch: str) -> "Identity":
        """Same project, different branch."""
        return self.model_copy(update={"branch": branch})

    def __str__(self) -> str:
        return f"{self.domain}/{self.project}@{self.branch}"


class ProjectContext(BaseModel):
    """Everything an operation needs to know about where it runs.

    Resolved once per command invocation and passed down by value.
    """

    model_config = ConfigDict(frozen=True)

    root: Path
    identity: Identity


# ─────────────────────────────────────────────────────────────────────────────
# Checkout classification
# ─────────────────────────────────────────────────────────────────────────────


class NonBranchCheckout(BaseModel):
    """A file-level checkout; banks are left alone."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["non_branch"] = "non_branch"


class NewBranchFromParent(BaseModel):
    """A branch that was just created from ``parent``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["new_branch"] = "new_branch"
    parent: str


class ExistingBranchSwitch(BaseModel):
    """A move to a branch that already existed (or a no-op move)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["existing_branch"] = "existing_branch"


Classification = Union[NonBranchCheckout, NewBranchFromParent, ExistingBranchSwitch]


# ─────────────────────────────────────────────────────────────────────────────
# Results
# ─────────────────────────────────────────────────────────────────────────────

ToCentralOutcome = Literal["pushed", "restored", "skipped"]
ToProjectOutcome = Literal["pulled", "seeded", "skipped"]
SeedChoice = Literal["create", "copy"]


class GitignoreStatus(BaseModel):
    """Whether the project-local bank is kept out of version control."""

    project_entry: bool
    global_entry: bool
    ignored: bool | None = None  # None outside a git work tree

    @property
    def ok(self) -> bool:
        if self.ignored is not None:
            return self.ignored
        return self.project_entry or self.global_entry


class BankStatus(BaseModel):
    """Snapshot reported by ``mb status``."""

    identity: Identity
    root: Path
    local_path: Path
    central_path: Path
    local_exists: bool
    central_exists: bool
    gitignore: GitignoreStatus
    hooks_dir: Path
    missing_hooks: list[str]
