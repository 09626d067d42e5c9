"""Integration tests for Checkout API endpoints via TestClient."""

import json

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from storefront.api import cart_router, checkout_router, install_error_handlers
from storefront.cart.store import set_cart_store
from storefront.checkout.gateway import set_order_gateway
from storefront.domain import storefront


@pytest.fixture()
def client(store, gateway):
    set_cart_store(store)
    set_order_gateway(gateway)
    app = FastAPI()

    @app.middleware("http")
    async def domain_context(request, call_next):
        with storefront.domain_context():
            return await call_next(request)

    app.include_router(cart_router)
    app.include_router(checkout_router)
    install_error_handlers(app)
    return TestClient(app)


def _fill_cart(client, product, quantity):
    response = client.post("/cart/items", json={"product": product, "quantity": quantity})
    assert response.status_code == 200


def _open(client, user_email=None):
    response = client.post("/checkout/open", json={"user_email": user_email})
    assert response.status_code == 200
    return response.json()


class TestOpenCheckout:
    def test_open_returns_totals(self, client, dress):
        _fill_cart(client, dress, 4)
        body = _open(client, "adaeze@example.com")

        assert body["state"] == "FormEntry"
        assert body["shipping"]["email"] == "adaeze@example.com"
        assert body["totals"] == {
            "subtotal": "60000.00",
            "shipping": "0.00",
            "tax": "4500.00",
            "total": "64500.00",
            "currency": "NGN",
            "free_shipping": True,
        }
        assert body["missing_fields"] == ["full_name", "phone", "address", "city", "state"]

    def test_open_with_empty_cart(self, client):
        response = client.post("/checkout/open", json={})
        assert response.status_code == 422
        assert response.json()["notification"]["title"] == "Your cart is empty"

    def test_close(self, client, dress):
        _fill_cart(client, dress, 1)
        _open(client)
        response = client.delete("/checkout")
        assert response.json()["state"] == "Idle"
        assert response.json()["totals"] is None


class TestSubmitCheckout:
    def test_successful_order(self, client, storage, gateway, dress, shipping_form):
        _fill_cart(client, dress, 2)
        _open(client)
        client.put("/checkout/shipping", json=shipping_form)
        client.put("/checkout/payment-method", json={"payment_method": "bank"})

        response = client.post("/checkout/submit")

        assert response.status_code == 200
        body = response.json()
        assert body["order_reference"].startswith("fake_ord_")
        assert body["payment_method"] == "bank"
        assert body["totals"]["total"] == "34750.00"
        assert body["notifications"][0]["title"] == "Order placed successfully!"
        assert client.get("/cart").json()["count"] == 0
        assert json.loads(storage.documents["cart"]) == []
        assert gateway.calls[0].payment_method == "bank"

    def test_missing_information(self, client, gateway, dress):
        _fill_cart(client, dress, 1)
        _open(client)
        client.put("/checkout/shipping", json={"full_name": "Adaeze Okafor"})

        response = client.post("/checkout/submit")

        assert response.status_code == 422
        body = response.json()
        assert body["notification"]["title"] == "Missing Information"
        assert body["notification"]["description"] == "Please fill in email"
        assert "email" in body["errors"]
        assert client.get("/checkout").json()["state"] == "FormEntry"
        assert gateway.calls == []

    def test_payment_failure_keeps_cart(self, client, gateway, dress, shipping_form):
        _fill_cart(client, dress, 2)
        _open(client)
        client.put("/checkout/shipping", json=shipping_form)
        gateway.configure(should_succeed=False, raise_error=True)

        response = client.post("/checkout/submit")

        assert response.status_code == 402
        assert response.json()["notification"]["title"] == "Payment failed"
        assert client.get("/cart").json()["count"] == 2
        assert client.get("/checkout").json()["shipping"]["city"] == "Lagos"

    def test_invalid_payment_method(self, client, dress):
        _fill_cart(client, dress, 1)
        _open(client)
        response = client.put("/checkout/payment-method", json={"payment_method": "cheque"})
        assert response.status_code == 422

    def test_reopening_reprices_cart_changes(self, client, dress):
        _fill_cart(client, dress, 1)
        _open(client)
        client.put("/cart/items/prod-001", json={"quantity": 4})
        assert client.get("/checkout").json()["totals"]["shipping"] == "2500.00"

        assert _open(client)["totals"]["shipping"] == "0.00"
