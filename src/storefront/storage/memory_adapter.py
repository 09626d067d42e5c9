"""In-process storage adapter for development and testing."""

from storefront.storage.port import LocalStorage


class InMemoryStorage(LocalStorage):
    """Dictionary-backed storage. Contents live as long as the instance."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.documents: dict[str, str] = dict(initial or {})
        self.writes: list[str] = []

    def read(self, key: str) -> str | None:
        return self.documents.get(key)

    def write(self, key: str, document: str) -> None:
        self.documents[key] = document
        self.writes.append(key)

    def remove(self, key: str) -> None:
        self.documents.pop(key, None)
