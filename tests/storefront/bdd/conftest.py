"""Shared BDD fixtures and step definitions for the Storefront."""

import json
from decimal import Decimal

import pytest
from pytest_bdd import given, parsers, then, when

from storefront.cart.store import CartStore
from storefront.checkout.session import CheckoutSession
from storefront.exceptions import InsufficientStock


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def cart_store(storage):
    return CartStore(storage=storage)


@pytest.fixture()
def products():
    """Product records by id, as the data service would return them."""
    return {}


@pytest.fixture()
def error():
    """Container for captured errors."""
    return {"exc": None}


@pytest.fixture()
def outcome():
    """Container for the result of the last action."""
    return {"value": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("an empty cart")
def empty_cart(cart_store):
    assert cart_store.snapshot().is_empty


@given(parsers.cfparse('a product "{product_id}" priced at {price:d} with {stock:d} in stock'))
def a_product(products, product_id, price, stock):
    products[product_id] = {
        "id": product_id,
        "name": f"Product {product_id}",
        "price": price,
        "stock": stock,
    }


@given(parsers.cfparse('{qty:d} of "{product_id}" are added to the cart'))
@when(parsers.cfparse('{qty:d} of "{product_id}" are added to the cart'))
def add_to_cart(cart_store, products, error, qty, product_id):
    try:
        cart_store.add_item(products[product_id], qty)
    except InsufficientStock as exc:
        error["exc"] = exc


@given("checkout is opened", target_fixture="checkout")
@when("checkout is opened", target_fixture="checkout")
def open_checkout(cart_store, gateway, settings):
    session = CheckoutSession(cart_store, gateway=gateway, settings=settings)
    session.open()
    return session


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the cart count is {count:d}"))
def cart_count(cart_store, count):
    assert cart_store.count() == count


@then(parsers.cfparse("the cart total is {total}"))
def cart_total(cart_store, total):
    assert cart_store.total() == Decimal(total)


@then(parsers.cfparse('the cart holds {qty:d} of "{product_id}"'))
def cart_holds(cart_store, qty, product_id):
    item = cart_store.snapshot().find(product_id)
    assert item is not None
    assert item.quantity == qty


@then("the cart is empty")
def cart_is_empty(cart_store):
    assert cart_store.snapshot().is_empty


@then("durable storage holds an empty cart")
def storage_holds_empty_cart(storage):
    assert json.loads(storage.documents["cart"]) == []
