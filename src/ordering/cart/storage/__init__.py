"""Cart storage factory.

Provides get_storage() / set_storage() to swap implementations. Defaults to
InMemoryStorage; tests install a fresh instance or one with a quota.
"""

from ordering.cart.storage.memory_adapter import InMemoryStorage
from ordering.cart.storage.port import CartStorage

_current_storage: CartStorage | None = None


def get_storage() -> CartStorage:
    """Return the active cart storage. Defaults to InMemoryStorage."""
    global _current_storage
    if _current_storage is None:
        _current_storage = InMemoryStorage()
    return _current_storage


def set_storage(storage: CartStorage) -> None:
    global _current_storage
    _current_storage = storage


def reset_storage() -> None:
    global _current_storage
    _current_storage = None
