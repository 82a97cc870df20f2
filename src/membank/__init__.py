"""Per-branch memory banks kept outside version control."""

__version__ = "0.1.0"
