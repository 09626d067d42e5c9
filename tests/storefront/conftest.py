import pytest
from protean.integrations.pytest import DomainFixture

from storefront.cart.store import CartStore
from storefront.checkout.gateway.fake_adapter import FakeOrderGateway
from storefront.config import StorefrontSettings
from storefront.storage.memory_adapter import InMemoryStorage


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield


@pytest.fixture()
def settings():
    return StorefrontSettings(
        free_shipping_threshold="50000",
        flat_shipping_fee="2500",
        tax_rate="0.075",
        currency="NGN",
        suggestion_debounce_ms=0,
    )


@pytest.fixture()
def storage():
    return InMemoryStorage()


@pytest.fixture()
def store(storage):
    return CartStore(storage=storage)


@pytest.fixture()
def gateway():
    return FakeOrderGateway()


@pytest.fixture()
def dress():
    return {
        "id": "prod-001",
        "name": "Ankara Print Dress",
        "price": 15000,
        "stock": 5,
        "image_url": "https://cdn.example.com/dress.jpg",
        "vendor_id": "vend-001",
        "vendors": {"store_name": "Lagos Looms"},
    }


@pytest.fixture()
def sandals():
    return {
        "id": "prod-002",
        "name": "Leather Sandals",
        "price": 8000,
        "stock": 2,
        "vendor_id": "vend-002",
        "vendor_name": "Kano Leatherworks",
    }


@pytest.fixture()
def scarf():
    return {
        "id": "prod-003",
        "name": "Silk Scarf",
        "price": 1999.99,
        "stock": 10,
    }


@pytest.fixture()
def shipping_form():
    return {
        "full_name": "Adaeze Okafor",
        "email": "adaeze@example.com",
        "phone": "+2348012345678",
        "address": "12 Marina Road",
        "city": "Lagos",
        "state": "Lagos",
        "postal_code": "101001",
    }
