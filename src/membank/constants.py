"""Shared constants for memory bank management."""

# ─────────────────────────────────────────────────────────────────────────────
# Bank layout
# ─────────────────────────────────────────────────────────────────────────────

DOCUMENT_NAMES = (
    "activeContext",
    "productContext",
    "progress",
    "decisionLog",
    "systemPatterns",
)
DOCUMENT_SUFFIX = ".md"
PRIMARY_DOCUMENT = "activeContext"

LOCAL_DIR_NAME = "memory-bank"
ARCHIVE_DIR_NAME = "archive"

# ─────────────────────────────────────────────────────────────────────────────
# Sentinels
# ─────────────────────────────────────────────────────────────────────────────

DEFAULT_BRANCH = "default"
TEMP_DOMAIN = "temp"
UNKNOWN_DOMAIN = "unknown"

# ─────────────────────────────────────────────────────────────────────────────
# Lineage notes
# ─────────────────────────────────────────────────────────────────────────────

LINEAGE_HEADING = "Branch Lineage"
MERGE_EVENT_HEADING = "Merge Event"
REBASE_EVENT_HEADING = "Rebase Event"

MERGED_VERB = "Merged"
REBASED_VERB = "Rebased"

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
ARCHIVE_DATE_FORMAT = "%Y%m%d"

# ─────────────────────────────────────────────────────────────────────────────
# Git
# ─────────────────────────────────────────────────────────────────────────────

CHECKOUT_REFLOG_WINDOW = 10
REBASE_REFLOG_WINDOW = 5
BRANCH_CHECKOUT_FLAG = "1"

HOOK_NAMES = ("pre-checkout", "post-checkout", "post-merge", "post-rebase")

PROJECT_GITIGNORE_ENTRY = "/memory-bank"
GLOBAL_GITIGNORE_ENTRY = "memory-bank/"
