import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Sets PROTEAN_ENV so the domain picks up the test overlay when it is
    initialized by the context fixtures.
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)
        elif "/bdd/" in str(test_path):
            item.add_marker(pytest.mark.bdd)


@pytest.fixture(autouse=True)
def reset_collaborators():
    """Drop the process-wide stores and adapters after every test."""
    yield

    from storefront.cart.store import reset_cart_store
    from storefront.checkout.gateway import reset_order_gateway
    from storefront.checkout.session import reset_checkout_session
    from storefront.config import get_settings
    from storefront.search import reset_catalog
    from storefront.storage import reset_storage
    from storefront.wishlist.store import reset_wishlist_store

    reset_checkout_session()
    reset_cart_store()
    reset_wishlist_store()
    reset_order_gateway()
    reset_catalog()
    reset_storage()
    get_settings.cache_clear()
