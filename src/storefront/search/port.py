"""Product catalog port: the data service's product lookup, as the
suggestion box sees it."""

from abc import ABC, abstractmethod


class ProductCatalog(ABC):
    @abstractmethod
    async def suggest(self, query: str, limit: int) -> list[dict]:
        """Return at most ``limit`` product records whose name contains ``query``."""
        ...
