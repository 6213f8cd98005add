"""Completing orders: deductions, the PENDING -> COMPLETED guard and persistence."""
import pytest

from texops.core.clock import today_str
from texops.core.exceptions import InsufficientStockError, OrderStateError, StorageError
from texops.schemas.entities import OrderStatus
from texops.services.entity_store import INVENTORY_KEY, ORDERS_KEY
from texops.services.fulfillment_service import complete_order, fulfill_order


class TestCompleteOrder:
    def test_stock_is_deducted_and_order_completed(self, make_item, make_order):
        inventory = [make_item("Blue Denim", 100, item_id="bd")]
        orders = [make_order("o1", ("bd", 30))]

        new_inventory, new_orders = complete_order("o1", inventory, orders)

        assert new_inventory[0].quantity == 70
        assert new_inventory[0].last_updated == today_str()
        assert new_orders[0].status == OrderStatus.COMPLETED
        # inputs untouched
        assert inventory[0].quantity == 100
        assert orders[0].status == OrderStatus.PENDING

    def test_deduction_clamps_at_zero(self, make_item, make_order):
        inventory = [make_item("Zipper", 10, item_id="z")]

        new_inventory, _ = complete_order("o1", inventory, [make_order("o1", ("z", 25))])

        assert new_inventory[0].quantity == 0

    def test_short_order_rejected_when_enforced(self, make_item, make_order):
        inventory = [make_item("Zipper", 10, item_id="z")]
        orders = [make_order("o1", ("z", 25))]

        with pytest.raises(InsufficientStockError):
            complete_order("o1", inventory, orders, enforce_sufficiency=True)

    def test_repeated_lines_for_one_item_are_rejected_together_when_enforced(self, make_item, make_order):
        inventory = [make_item("Zipper", 100, item_id="z")]
        orders = [make_order("o1", ("z", 60), ("z", 60))]

        with pytest.raises(InsufficientStockError) as excinfo:
            complete_order("o1", inventory, orders, enforce_sufficiency=True)

        assert excinfo.value.plan.shortages[0].diff == 20
        assert inventory[0].quantity == 100

    def test_completed_order_cannot_be_completed_again(self, make_item, make_order):
        inventory = [make_item("Blue Denim", 100, item_id="bd")]
        orders = [make_order("o1", ("bd", 30), status=OrderStatus.COMPLETED)]

        with pytest.raises(OrderStateError):
            complete_order("o1", inventory, orders)

    def test_unknown_order_changes_nothing(self, make_item, make_order):
        inventory = [make_item("Blue Denim", 100, item_id="bd")]
        orders = [make_order("o1", ("bd", 30))]

        new_inventory, new_orders = complete_order("nope", inventory, orders)

        assert new_inventory == inventory
        assert new_orders == orders

    def test_deleted_item_is_skipped_and_others_deducted(self, make_item, make_order):
        untouched = make_item("Lace", 4, item_id="lace")
        inventory = [make_item("Blue Denim", 100, item_id="bd"), untouched]
        orders = [make_order("o1", ("gone", "Silk", 10), ("bd", 30))]

        new_inventory, new_orders = complete_order("o1", inventory, orders)

        assert new_inventory[0].quantity == 70
        assert new_inventory[1] == untouched
        assert new_orders[0].requirements[0].inventory_item_name == "Silk"


class TestFulfillOrder:
    def test_inventory_and_order_are_committed_together(self, store, storage, make_item, make_order):
        store.commit(
            inventory=[make_item("Blue Denim", 100, item_id="bd")],
            orders=[make_order("o1", ("bd", 30))],
        )
        storage.writes.clear()

        completed = fulfill_order(store, "o1")

        assert completed.status == OrderStatus.COMPLETED
        assert store.find_inventory_item("bd").quantity == 70
        assert len(storage.writes) == 1
        assert set(storage.writes[0]) == {INVENTORY_KEY, ORDERS_KEY}

    def test_second_completion_is_rejected_and_stock_not_deducted_twice(self, store, make_item, make_order):
        store.commit(
            inventory=[make_item("Blue Denim", 100, item_id="bd")],
            orders=[make_order("o1", ("bd", 30))],
        )
        fulfill_order(store, "o1")

        with pytest.raises(OrderStateError):
            fulfill_order(store, "o1")

        assert store.find_inventory_item("bd").quantity == 70

    def test_unknown_order_returns_none(self, store):
        assert fulfill_order(store, "missing") is None

    def test_storage_failure_keeps_order_pending(self, store, storage, make_item, make_order):
        store.commit(
            inventory=[make_item("Blue Denim", 100, item_id="bd")],
            orders=[make_order("o1", ("bd", 30))],
        )
        storage.fail = True

        with pytest.raises(StorageError):
            fulfill_order(store, "o1")

        assert store.find_order("o1").status == OrderStatus.PENDING
        assert store.find_inventory_item("bd").quantity == 100

    def test_enforcement_defaults_to_settings(self, store, make_item, make_order, monkeypatch):
        from texops.core.config import settings

        store.commit(
            inventory=[make_item("Zipper", 10, item_id="z")],
            orders=[make_order("o1", ("z", 25)), make_order("o2", ("z", 25))],
        )

        monkeypatch.setattr(settings, "ENFORCE_SUFFICIENCY_ON_COMPLETE", True)
        with pytest.raises(InsufficientStockError):
            fulfill_order(store, "o1")

        monkeypatch.setattr(settings, "ENFORCE_SUFFICIENCY_ON_COMPLETE", False)
        fulfill_order(store, "o2")
        assert store.find_inventory_item("z").quantity == 0
