"""Debounced product suggestions for the search box.

Each keystroke calls ``query_changed``. The lookup waits out the debounce
window first and is skipped if another keystroke arrived meanwhile. There is
no way to cancel a lookup already sent to the catalog, so its results are
checked against the current query on arrival and dropped when stale.
"""

import asyncio

import structlog

from storefront.config import StorefrontSettings, get_settings
from storefront.search.port import ProductCatalog

logger = structlog.get_logger(__name__)


class SuggestionDebouncer:
    def __init__(
        self,
        catalog: ProductCatalog,
        debounce: float | None = None,
        min_length: int | None = None,
        limit: int | None = None,
        settings: StorefrontSettings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self.catalog = catalog
        self.debounce = settings.suggestion_debounce_ms / 1000 if debounce is None else debounce
        self.min_length = settings.suggestion_min_length if min_length is None else min_length
        self.limit = settings.suggestion_limit if limit is None else limit
        self.current_query = ""
        self.suggestions: list[dict] = []
        self._generation = 0

    async def query_changed(self, query: str) -> list[dict] | None:
        """Record a new query and, once it settles, fetch suggestions for it.

        Returns the suggestions applied, or None when the query was superseded
        before its results could be applied.
        """
        self._generation += 1
        generation = self._generation
        self.current_query = query

        await asyncio.sleep(self.debounce)
        if generation != self._generation:
            return None

        if len(query) < self.min_length:
            self.suggestions = []
            return []

        try:
            results = await self.catalog.suggest(query, self.limit)
        except Exception as exc:
            logger.warning("Suggestion lookup failed", query=query, error=str(exc))
            return []

        if generation != self._generation or query != self.current_query:
            logger.debug("Dropping stale suggestions", query=query, current_query=self.current_query)
            return None

        self.suggestions = list(results)
        return self.suggestions
