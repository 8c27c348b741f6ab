"""In-memory cart storage for development and testing.

An optional byte quota simulates browser storage limits: a write that would
push the total stored size over the quota raises StorageError, the way
``localStorage.setItem`` raises ``QuotaExceededError``.
"""

from ordering.cart.storage.port import CartStorage, StorageError


class InMemoryStorage(CartStorage):
    def __init__(self, quota_bytes: int | None = None) -> None:
        self.quota_bytes = quota_bytes
        self.values: dict[str, str] = {}
        self.writes: list[str] = []

    def configure(self, quota_bytes: int | None) -> None:
        self.quota_bytes = quota_bytes

    def _size_with(self, key: str, value: str) -> int:
        others = sum(len(k) + len(v.encode("utf-8")) for k, v in self.values.items() if k != key)
        return others + len(key) + len(value.encode("utf-8"))

    def read(self, key: str) -> str | None:
        return self.values.get(key)

    def write(self, key: str, value: str) -> None:
        if self.quota_bytes is not None and self._size_with(key, value) > self.quota_bytes:
            raise StorageError(f"Storage quota of {self.quota_bytes} bytes exceeded")
        self.values[key] = value
        self.writes.append(key)

    def delete(self, key: str) -> None:
        self.values.pop(key, None)
