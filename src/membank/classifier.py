"""Event Classifier: interpret git lifecycle events from reflog history.

git does not say whether a checkout created a branch, or which branch a
rebase went onto. These functions guess from a short window of reflog
subjects. The guesses can be wrong (a reused branch name, a window too
short to see earlier visits); callers accept that and never abort on it.

All functions are pure. ``history`` is always newest first, as printed
by ``git reflog --format=%gs``; ``history[0]`` is the event itself.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Optional, Sequence

from .constants import BRANCH_CHECKOUT_FLAG
from .models import Classification, ExistingBranchSwitch, NewBranchFromParent, NonBranchCheckout

logger = logging.getLogger(__name__)

_MOVING = re.compile(r"checkout: moving from (?P<prev>\S+) to (?P<new>\S+)")
_ONTO = re.compile(r"\bonto (?P<ref>\S+)")
_REBASE_START = re.compile(r"rebase.*\(start\): checkout (?P<ref>\S+)")
_MERGE = re.compile(r"^merge (?P<ref>\S+?):")

# characters that may appear inside a branch name
_NAME_CHARS = r"[\w./-]"


def strip_ref_prefix(ref: str) -> str:
    """Reduce ``refs/heads/feature`` or ``origin/feature`` to ``feature``."""
    return ref.rsplit("/", 1)[-1]


def mentions_branch(subject: str, branch: str) -> bool:
    """True if ``branch`` appears in ``subject`` as a whole name."""
    pattern = rf"(?<!{_NAME_CHARS}){re.escape(branch)}(?!{_NAME_CHARS})"
    return re.search(pattern, subject) is not None


def _previous_name(
    prev_ref: str,
    new_branch: str,
    history: Sequence[str],
    resolve_name: Optional[Callable[[str], Optional[str]]],
) -> str:
    for subject in history:
        match = _MOVING.search(subject)
        if match and match.group("new") == new_branch:
            return match.group("prev")
    if resolve_name is not None:
        name = resolve_name(prev_ref)
        if name:
            return name
    return prev_ref


def classify_checkout(
    prev_ref: str,
    new_ref: str,
    branch_flag: str,
    history: Sequence[str],
    new_branch: str,
    resolve_name: Optional[Callable[[str], Optional[str]]] = None,
) -> Classification:
    """Classify a post-checkout event.

    Args:
        prev_ref: HEAD before the checkout (first hook argument)
        new_ref: HEAD after the checkout (second hook argument)
        branch_flag: "1" for a branch checkout, "0" for a file checkout
        history: Recent reflog subjects, newest first
        new_branch: Name of the branch now checked out
        resolve_name: Maps a ref to a branch name when history cannot

    Returns:
        NonBranchCheckout, NewBranchFromParent(parent) or ExistingBranchSwitch
    """
    if str(branch_flag).strip() != BRANCH_CHECKOUT_FLAG:
        return NonBranchCheckout()

    if prev_ref == new_ref:
        return ExistingBranchSwitch()

    prev = _previous_name(prev_ref, new_branch, history, resolve_name)

    latest = _MOVING.search(history[0]) if history else None
    moved_here = latest is not None and latest.group("prev") == prev and latest.group("new") == new_branch
    seen_before = any(mentions_branch(subject, new_branch) for subject in history[1:])

    if moved_here or not seen_before:
        if not prev or prev == new_branch:
            logger.debug(f"Cannot tell which branch {new_branch} came from")
            return ExistingBranchSwitch()
        return NewBranchFromParent(parent=prev)

    return ExistingBranchSwitch()


def extract_rebase_base(history: Sequence[str]) -> str:
    """Branch a rebase went onto, or "" when history does not say.

    Looks for an ``onto <ref>`` token in the newest rebase subject that has
    one, then for a ``rebase (start): checkout <ref>`` subject.
    """
    rebase_subjects = [s for s in history if "rebase" in s]

    for subject in rebase_subjects:
        match = _ONTO.search(subject)
        if match:
            return strip_ref_prefix(match.group("ref"))

    for subject in rebase_subjects:
        match = _REBASE_START.search(subject)
        if match:
            return strip_ref_prefix(match.group("ref"))

    return ""


def extract_merged_branch(history: Sequence[str]) -> str:
    """Branch named by the newest ``merge <ref>: ...`` subject, or ""."""
    for subject in history:
        match = _MERGE.search(subject)
        if match:
            return strip_ref_prefix(match.group("ref"))
    return ""
