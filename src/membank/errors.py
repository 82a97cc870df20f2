"""Error kinds raised by memory bank operations."""


class BankError(Exception):
    """Base error for memory bank operations."""

    pass


class SourceMissing(BankError):
    """An operation needs a central bank that does not exist."""

    def __init__(self, path, label: str = "Source"):
        self.path = path
        super().__init__(f"{label} memory bank does not exist: {path}")


class TargetMissing(BankError):
    """The bank an operation writes into does not exist."""

    def __init__(self, path, label: str = "Target"):
        self.path = path
        super().__init__(f"{label} memory bank does not exist: {path}")


class EmptySource(BankError):
    """A source bank directory exists but holds no documents."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"Memory bank is empty: {path}")


class UnknownCommand(BankError):
    """The CLI was given a verb it does not know."""

    def __init__(self, command: str):
        self.command = command
        super().__init__(f"Unknown command: {command}")


class MissingArgument(BankError):
    """A CLI verb was called without a required argument."""

    def __init__(self, name: str, usage: str):
        self.name = name
        super().__init__(f"{name} required\nUsage: {usage}")


class AmbiguousClassification(BankError):
    """Branch lineage could not be determined from git history.

    Hooks treat this as an ordinary branch switch.
    """

    pass
