"""Durable cart storage port (abstract interface).

The cart is mirrored to client-side durable storage after every mutation so
that a session can be restored after a reload. Adapters only need to store
opaque strings under string keys.
"""

from abc import ABC, abstractmethod


class StorageError(Exception):
    """A write could not be completed (quota exceeded, storage unavailable)."""


class CartStorage(ABC):
    """Key-value string store used to persist carts."""

    @abstractmethod
    def read(self, key: str) -> str | None:
        """Return the stored value, or None when the key is absent."""
        ...

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        """Store value under key. Raises StorageError when the write fails."""
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key. Deleting an absent key is a no-op."""
        ...
