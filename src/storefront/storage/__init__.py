"""Durable local storage abstraction with pluggable key-value adapters.

Provides get_storage() / set_storage() to swap implementations:
- InMemoryStorage for development and testing (default)
- JsonFileStorage for a persistent directory of JSON documents
"""

from storefront.config import get_settings
from storefront.storage.port import LocalStorage

_current_storage: LocalStorage | None = None


def get_storage() -> LocalStorage:
    """Return the configured storage adapter (singleton).

    The backend is chosen by the STOREFRONT_STORAGE_BACKEND setting.
    """
    global _current_storage
    if _current_storage is None:
        settings = get_settings()
        backend = settings.storage_backend
        if backend == "memory":
            from storefront.storage.memory_adapter import InMemoryStorage

            _current_storage = InMemoryStorage()
        elif backend == "file":
            from storefront.storage.file_adapter import JsonFileStorage

            _current_storage = JsonFileStorage(settings.storage_path)
        else:
            raise ValueError(f"Unknown storage backend: {backend}")
    return _current_storage


def set_storage(storage: LocalStorage) -> None:
    """Override the active storage adapter (useful for tests)."""
    global _current_storage
    _current_storage = storage


def reset_storage() -> None:
    """Reset to the configured adapter."""
    global _current_storage
    _current_storage = None
