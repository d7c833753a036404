"""Query storage: one adapter contract, a remote and a local implementation,
and the manager that picks between them."""
from app.storage.base import StorageAdapter
from app.storage.exceptions import (
    InvalidVisibilityError,
    LocalStorageError,
    QueryConflictError,
    RemoteStorageError,
    StorageConfigError,
    StorageError,
)
from app.storage.local import JsonFileKeyValueStore, LocalAdapter, MemoryKeyValueStore
from app.storage.manager import StorageConfig, StorageManager
from app.storage.remote import RemoteAdapter

__all__ = [
    "StorageAdapter",
    "StorageError",
    "StorageConfigError",
    "RemoteStorageError",
    "LocalStorageError",
    "QueryConflictError",
    "InvalidVisibilityError",
    "LocalAdapter",
    "RemoteAdapter",
    "MemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "StorageConfig",
    "StorageManager",
]
