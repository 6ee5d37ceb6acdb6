"""Reconciliation error taxonomy.

Every error here is raised before or during a sync write and is mapped to
an HTTP response by ``dashsync.core.error_handlers``.
"""


class ReconciliationError(Exception):
    """Base class for snapshot sync failures."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class SnapshotValidationError(ReconciliationError):
    """The payload is not an object, or a record failed schema validation."""

    def __init__(self, message: str = "Invalid data format", details: list | None = None) -> None:
        super().__init__(message)
        self.details = details or []


class SafetyBlockedError(ReconciliationError):
    """A safety guard refused the write. Nothing was mutated."""

    def __init__(self, domain: str, message: str) -> None:
        super().__init__(message)
        self.domain = domain


class EmptyOverwriteBlocked(SafetyBlockedError):
    """Empty primary collections sent while the store still holds data."""


class FullDeleteBlocked(SafetyBlockedError):
    """The computed plan would delete every existing row of the domain."""


class StoreUnavailableError(ReconciliationError):
    """No relational store is configured and no fallback write is allowed."""

    def __init__(self, message: str = "Database not configured") -> None:
        super().__init__(message)


class PartialWriteError(ReconciliationError):
    """One or more row writes failed inside a batch.

    Siblings dispatched in the same batch may have committed; stages that
    had not started yet were skipped.
    """

    def __init__(self, table: str, failures: list[tuple[str, BaseException]]) -> None:
        keys = ", ".join(key for key, _ in failures[:5])
        super().__init__(f"{len(failures)} write(s) failed on {table}: {keys}")
        self.table = table
        self.failures = failures
