"""Exceptions related to catalog-sync."""

__all__ = [
    "CatalogSyncException",
    "InputException",
    "ObjectNotFoundError",
    "StoreError",
    "SyncError",
    "HardSyncError",
    "SoftSyncError",
    "SyncCancelledError",
]


class CatalogSyncException(Exception):
    """Generic base exception used for this library."""


class InputException(CatalogSyncException):
    """Raised when the input files or values are not formatted as expected."""


class ObjectNotFoundError(CatalogSyncException):
    """Raised when an object is not found in the store."""


class StoreError(CatalogSyncException):
    """Raised when the template store rejects a write."""


class SyncError(CatalogSyncException):
    """Raised when a sync run completed but could not apply everything."""

    retryable: bool = True
    """Whether the caller should schedule an immediate retry."""

    def __init__(self, message: str, result: object | None = None) -> None:
        super().__init__(message)
        self.result = result


class HardSyncError(SyncError):
    """Raised when templates failed to be created or updated.

    The commit is reset so the next run re-evaluates the whole index.
    """

    def __init__(
        self,
        failures: dict[str, str],
        message: str,
        result: object | None = None,
    ) -> None:
        super().__init__(message, result)
        self.failures = failures


class SoftSyncError(SyncError):
    """Raised when some charts are invalid upstream but the sync otherwise completed.

    Retrying immediately will not help since the data is bad at the source.
    """

    retryable = False

    def __init__(
        self,
        invalid_charts: dict[str, str],
        message: str,
        result: object | None = None,
    ) -> None:
        super().__init__(message, result)
        self.invalid_charts = invalid_charts


class SyncCancelledError(CatalogSyncException):
    """Raised when a sync run is cancelled before all store writes were issued."""
