"""Tests for the Cart Store: mutations, observers and write-through persistence."""

import json
import random
from decimal import Decimal

import pytest

from storefront.cart.events import CartCleared, CartItemAdded, CartItemRemoved
from storefront.cart.store import CartSnapshot, CartStore, get_cart_store, set_cart_store
from storefront.exceptions import InsufficientStock, MalformedProduct
from storefront.storage.file_adapter import JsonFileStorage
from storefront.storage.memory_adapter import InMemoryStorage


class TestScenarios:
    def test_add_to_empty_cart(self, store, dress):
        snapshot = store.add_item(dress, 3)
        assert store.count() == 3
        assert store.total() == Decimal("45000.00")
        assert snapshot.count == 3

    def test_add_beyond_stock_leaves_cart_unchanged(self, store, storage, dress):
        store.add_item(dress, 3)
        persisted = storage.documents["cart"]

        with pytest.raises(InsufficientStock):
            store.add_item(dress, 3)

        assert store.snapshot().find("prod-001").quantity == 3
        assert storage.documents["cart"] == persisted

    def test_update_to_zero_removes_line_item(self, store, dress):
        store.add_item(dress, 2)
        store.update_quantity("prod-001", 0)
        assert store.items == ()
        assert store.count() == 0


class TestQueries:
    def test_empty_store(self, store):
        snapshot = store.snapshot()
        assert isinstance(snapshot, CartSnapshot)
        assert snapshot.is_empty
        assert store.total() == Decimal("0.00")
        assert store.count() == 0

    def test_items_are_read_only_views(self, store, dress):
        store.add_item(dress, 1)
        item = store.items[0]
        with pytest.raises(AttributeError):
            item.quantity = 4

    def test_snapshot_is_stable_after_later_mutations(self, store, dress, sandals):
        store.add_item(dress, 1)
        before = store.snapshot()
        store.add_item(sandals, 1)
        assert len(before.items) == 1
        assert len(store.snapshot().items) == 2

    def test_malformed_product_is_rejected(self, store, dress):
        del dress["price"]
        with pytest.raises(MalformedProduct):
            store.add_item(dress)
        assert store.snapshot().is_empty


class TestWriteThrough:
    def test_each_mutation_writes_snapshot(self, store, storage, dress):
        store.add_item(dress, 2)
        assert json.loads(storage.documents["cart"])[0]["quantity"] == 2

        store.update_quantity("prod-001", 4)
        assert json.loads(storage.documents["cart"])[0]["quantity"] == 4

        store.remove_item("prod-001")
        assert json.loads(storage.documents["cart"]) == []

    def test_noop_mutations_do_not_write(self, store, storage, dress):
        store.add_item(dress, 2)
        writes = len(storage.writes)
        store.remove_item("prod-999")
        store.update_quantity("prod-999", 3)
        store.update_quantity("prod-001", 2)
        assert len(storage.writes) == writes

    def test_rejected_mutation_does_not_write(self, store, storage, sandals):
        with pytest.raises(InsufficientStock):
            store.add_item(sandals, 3)
        assert storage.writes == []

    def test_reload_reproduces_line_items(self, storage, dress, sandals, scarf):
        store = CartStore(storage=storage)
        store.add_item(dress, 2)
        store.add_item(sandals, 1)
        store.add_item(scarf, 4)

        reloaded = CartStore(storage=storage)
        assert reloaded.items == store.items
        assert reloaded.total() == store.total()

    def test_cleared_cart_reloads_empty(self, storage, dress):
        store = CartStore(storage=storage)
        store.add_item(dress, 2)
        store.clear()
        assert CartStore(storage=storage).snapshot().is_empty


class TestRestartRecovery:
    def test_missing_snapshot_gives_empty_cart(self):
        assert CartStore(storage=InMemoryStorage()).snapshot().is_empty

    @pytest.mark.parametrize(
        "document",
        [
            "{not json",
            '{"id": "prod-001"}',
            '[{"id": "prod-001"}]',
            '[{"id": "prod-001", "name": "Dress", "price": 10.0, "quantity": 9, "stock": 5}]',
            '[42]',
        ],
    )
    def test_corrupt_snapshot_gives_empty_cart(self, document):
        store = CartStore(storage=InMemoryStorage({"cart": document}))
        assert store.snapshot().is_empty

    def test_corrupt_snapshot_is_overwritten_on_next_mutation(self, dress):
        storage = InMemoryStorage({"cart": "{not json"})
        store = CartStore(storage=storage)
        store.add_item(dress)
        assert json.loads(storage.documents["cart"])[0]["id"] == "prod-001"

    def test_unreadable_storage_gives_empty_cart(self):
        class BrokenStorage(InMemoryStorage):
            def read(self, key):
                raise OSError("disk unavailable")

        assert CartStore(storage=BrokenStorage()).snapshot().is_empty

    def test_undecodable_file_gives_empty_cart(self, tmp_path):
        (tmp_path / "cart.json").write_bytes(b"\xff\xfe[garbage")
        assert CartStore(storage=JsonFileStorage(tmp_path)).snapshot().is_empty

    def test_deeply_nested_document_gives_empty_cart(self):
        storage = InMemoryStorage({"cart": "[" * 200000 + "]" * 200000})
        assert CartStore(storage=storage).snapshot().is_empty


class TestFailedWrites:
    class FlakyStorage(InMemoryStorage):
        fail_next_write = False

        def write(self, key, document):
            if self.fail_next_write:
                self.fail_next_write = False
                raise OSError("disk full")
            super().write(key, document)

    def test_failed_write_leaves_store_unchanged(self, dress):
        storage = self.FlakyStorage()
        store = CartStore(storage=storage)
        storage.fail_next_write = True

        with pytest.raises(OSError):
            store.add_item(dress, 3)

        assert store.count() == 0
        assert store.snapshot().is_empty
        assert "cart" not in storage.documents

        store.add_item(dress, 3)
        assert store.count() == 3
        assert json.loads(storage.documents["cart"])[0]["quantity"] == 3

    def test_failed_write_keeps_previous_line_items(self, dress, sandals):
        storage = self.FlakyStorage()
        store = CartStore(storage=storage)
        store.add_item(dress, 2)
        cart_id = store.cart_id
        storage.fail_next_write = True

        with pytest.raises(OSError):
            store.update_quantity("prod-001", 5)

        store.add_item(sandals, 1)
        assert store.snapshot().find("prod-001").quantity == 2
        assert store.cart_id == cart_id

    def test_failed_write_does_not_notify(self, dress):
        storage = self.FlakyStorage()
        store = CartStore(storage=storage)
        seen = []
        store.subscribe(lambda snapshot, events: seen.append(events))
        storage.fail_next_write = True

        with pytest.raises(OSError):
            store.add_item(dress)

        assert seen == []


class TestObservers:
    def test_observer_receives_snapshot_and_events(self, store, dress):
        received = []
        store.subscribe(lambda snapshot, events: received.append((snapshot, events)))

        store.add_item(dress, 2)

        assert len(received) == 1
        snapshot, events = received[0]
        assert snapshot.count == 2
        assert isinstance(events[0], CartItemAdded)

    def test_observers_see_persisted_state(self, store, storage, dress):
        seen = []
        store.subscribe(lambda snapshot, events: seen.append(json.loads(storage.documents["cart"])))
        store.add_item(dress, 1)
        assert seen[0][0]["id"] == "prod-001"

    def test_noop_does_not_notify(self, store):
        received = []
        store.subscribe(lambda snapshot, events: received.append(events))
        store.remove_item("prod-999")
        assert received == []

    def test_unsubscribe(self, store, dress):
        received = []
        unsubscribe = store.subscribe(lambda snapshot, events: received.append(events))
        unsubscribe()
        unsubscribe()
        store.add_item(dress)
        assert received == []

    def test_failing_observer_does_not_break_mutation(self, store, dress):
        received = []

        def broken(snapshot, events):
            raise RuntimeError("render failed")

        store.subscribe(broken)
        store.subscribe(lambda snapshot, events: received.append(events))

        snapshot = store.add_item(dress)

        assert snapshot.count == 1
        assert len(received) == 1

    def test_events_in_order(self, store, dress, sandals):
        received = []
        store.subscribe(lambda snapshot, events: received.extend(events))
        store.add_item(dress)
        store.remove_item("prod-001")
        store.add_item(sandals)
        store.clear()
        assert [type(e) for e in received] == [CartItemAdded, CartItemRemoved, CartItemAdded, CartCleared]


class TestProvider:
    def test_get_cart_store_returns_one_instance(self):
        assert get_cart_store() is get_cart_store()

    def test_set_cart_store(self, store):
        set_cart_store(store)
        assert get_cart_store() is store


class TestInvariantsUnderRandomSequences:
    def test_quantities_stay_within_stock_and_totals_match(self, storage):
        rng = random.Random(7)
        products = [
            {"id": f"prod-{n}", "name": f"Product {n}", "price": rng.randint(100, 999_999) / 100, "stock": rng.randint(0, 6)}
            for n in range(5)
        ]
        store = CartStore(storage=storage)

        for _ in range(400):
            product = rng.choice(products)
            action = rng.choice(["add", "update", "remove"])
            try:
                if action == "add":
                    store.add_item(product, rng.randint(1, 4))
                elif action == "update":
                    store.update_quantity(product["id"], rng.randint(-1, 7))
                else:
                    store.remove_item(product["id"])
            except InsufficientStock:
                pass

            items = store.items
            assert len({item.product_id for item in items}) == len(items)
            for item in items:
                assert 1 <= item.quantity <= item.stock
            expected = sum((Decimal(str(item.unit_price)) * item.quantity for item in items), Decimal("0"))
            assert store.total() == expected
            assert store.count() == sum(item.quantity for item in items)

        assert CartStore(storage=storage).items == store.items
