"""In-memory product catalog for development and testing."""

import asyncio

from storefront.search.port import ProductCatalog


class InMemoryCatalog(ProductCatalog):
    """Case-insensitive substring match over a fixed list of product records."""

    def __init__(self, products: list[dict] | None = None, latency: float = 0.0) -> None:
        self.products = list(products or [])
        self.latency = latency
        self.queries: list[str] = []

    async def suggest(self, query: str, limit: int) -> list[dict]:
        self.queries.append(query)
        if self.latency:
            await asyncio.sleep(self.latency)
        needle = query.lower()
        return [p for p in self.products if needle in str(p.get("name", "")).lower()][:limit]
