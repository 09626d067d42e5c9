"""Product catalog abstraction for search suggestions.

Provides get_catalog() / set_catalog(). The default is an empty
InMemoryCatalog; the hosting application installs a catalog backed by the
product data service.
"""

from storefront.search.port import ProductCatalog

_current_catalog: ProductCatalog | None = None


def get_catalog() -> ProductCatalog:
    global _current_catalog
    if _current_catalog is None:
        from storefront.search.memory_adapter import InMemoryCatalog

        _current_catalog = InMemoryCatalog()
    return _current_catalog


def set_catalog(catalog: ProductCatalog) -> None:
    global _current_catalog
    _current_catalog = catalog


def reset_catalog() -> None:
    global _current_catalog
    _current_catalog = None
