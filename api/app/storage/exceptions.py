"""Storage error hierarchy."""


class StorageError(Exception):
    """Base class for failures raised by storage adapters."""


class StorageConfigError(StorageError):
    """An adapter could not be constructed from the given configuration."""


class RemoteStorageError(StorageError):
    """A call to the hosted backend failed (transport, auth or validation)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.message} (HTTP {self.status_code})"


class LocalStorageError(StorageError):
    """The on-device store is unreadable or holds malformed data."""


class QueryConflictError(StorageError):
    """A save would overwrite an existing query id."""


class InvalidVisibilityError(StorageError, ValueError):
    """Visibility value outside of public/private."""
