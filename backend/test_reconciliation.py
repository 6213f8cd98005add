"""Tests for merging captured invoices and shelf photos into stock and the ledger."""
import pytest

from texops.core.clock import today_str
from texops.core.exceptions import StorageError
from texops.schemas.capture import InvoiceDetails, ShelfDetails, UNKNOWN_VENDOR
from texops.schemas.entities import InvoiceItem
from texops.services.entity_store import INVENTORY_KEY, INVOICES_KEY
from texops.services.reconciliation_service import (
    add_shelf_detection,
    merge_invoice_into_inventory,
    normalize_item_name,
    reconcile_invoice,
    record_invoice,
    save_captured_invoice,
    save_shelf_detection,
)


def line(name, quantity, unit_price=0.0, total=0.0):
    return InvoiceItem(name=name, quantity=quantity, unit_price=unit_price, total=total)


# ============================================================================
# Inventory merge
# ============================================================================


class TestMergeInvoiceIntoInventory:
    def test_normalize_item_name(self):
        assert normalize_item_name("  Blue Denim ") == "blue denim"
        assert normalize_item_name(None) == ""

    def test_names_differing_in_case_and_whitespace_merge_into_one_item(self):
        result = merge_invoice_into_inventory([line(" Blue Denim ", 5), line("BLUE denim", 7)], [])

        assert len(result) == 1
        assert result[0].name == "Blue Denim"
        assert result[0].quantity == 12

    def test_existing_item_is_incremented_and_keeps_its_other_fields(self, make_item):
        existing = make_item("Red Cotton", 30, item_id="rc", color="Red", color_code="RC-1")

        result = merge_invoice_into_inventory([line("red cotton ", 10)], [existing])

        assert len(result) == 1
        merged = result[0]
        assert merged.id == "rc"
        assert merged.quantity == 40
        assert merged.color == "Red"
        assert merged.color_code == "RC-1"
        assert merged.last_updated == today_str()

    def test_new_items_get_defaults_distinct_ids_and_go_first(self, make_item):
        existing = make_item("Red Cotton", 30, item_id="rc")

        result = merge_invoice_into_inventory([line("Zipper", 100), line("Thread", 40)], [existing])

        assert [i.name for i in result] == ["Thread", "Zipper", "Red Cotton"]
        assert len({i.id for i in result}) == 3
        for new_item in result[:2]:
            assert new_item.color == "N/A"
            assert new_item.color_code == ""
            assert new_item.last_updated == today_str()

    def test_second_line_increments_item_created_in_same_batch(self):
        result = merge_invoice_into_inventory(
            [line("Buttons", 10), line("Lace", 2), line("buttons", 15)], []
        )

        assert sorted((i.name, i.quantity) for i in result) == [("Buttons", 25), ("Lace", 2)]

    def test_lines_without_name_or_quantity_are_ignored(self, make_item):
        existing = make_item("Red Cotton", 30)

        result = merge_invoice_into_inventory(
            [line("", 5), line("   ", 5), line("Red Cotton", 0), line("Red Cotton", -4)],
            [existing],
        )

        assert result == [existing]

    def test_fractional_quantities_round_to_whole_units(self):
        result = merge_invoice_into_inventory([line("Elastic", 2.5), line("Velvet", 0.4)], [])

        assert [(i.name, i.quantity) for i in result] == [("Elastic", 3)]

    def test_input_inventory_is_not_mutated(self, make_item):
        existing = make_item("Red Cotton", 30)
        inventory = [existing]

        merge_invoice_into_inventory([line("Red Cotton", 10), line("Zipper", 1)], inventory)

        assert inventory == [existing]
        assert existing.quantity == 30


# ============================================================================
# Ledger records
# ============================================================================


class TestRecordInvoice:
    def test_missing_fields_are_defaulted(self):
        captured = InvoiceDetails.model_validate({
            "vendorName": None,
            "taxAmount": "abc",
            "items": [{"name": "Thread", "quantity": "3", "unitPrice": None}],
        })

        record = record_invoice(captured)

        assert record.vendor_name == UNKNOWN_VENDOR
        assert record.gst_number == ""
        assert record.date == today_str()
        assert record.tax_amount == 0
        assert record.items[0].quantity == 3.0
        assert record.items[0].unit_price == 0.0
        assert record.items[0].total == 0.0

    def test_every_record_gets_fresh_id_and_timestamp(self):
        captured = InvoiceDetails(vendor_name="Mehta Textiles")

        first, second = record_invoice(captured), record_invoice(captured)

        assert first.id != second.id
        assert first.saved_at
        assert second.saved_at

    def test_explicit_total_is_kept_as_captured(self):
        captured = InvoiceDetails.model_validate({
            "items": [{"name": "Blue Denim", "quantity": 20, "unitPrice": 5, "total": 100}],
            "taxAmount": 10,
            "totalAmount": 99,
        })

        assert record_invoice(captured).total_amount == 99

    def test_missing_total_is_derived_from_lines_and_tax(self):
        captured = InvoiceDetails.model_validate({
            "items": [
                {"name": "Blue Denim", "quantity": 20, "unitPrice": 5, "total": 100},
                {"name": "Thread", "quantity": 3, "unitPrice": 0.1, "total": 0.3},
            ],
            "taxAmount": 10,
        })

        assert record_invoice(captured).total_amount == pytest.approx(110.3)

    def test_reconcile_returns_both_collections_without_side_effects(self, make_item):
        inventory = [make_item("Blue Denim", 5)]
        captured = InvoiceDetails.model_validate({"items": [{"name": "blue denim", "quantity": 4}]})

        result = reconcile_invoice(captured, inventory, [])

        assert result.invoices == [result.record]
        assert result.inventory[0].quantity == 9
        assert inventory[0].quantity == 5


# ============================================================================
# Store-level transaction
# ============================================================================


class TestSaveCapturedInvoice:
    def test_blue_denim_scenario(self, store):
        captured = InvoiceDetails.model_validate({
            "items": [{"name": "Blue Denim", "quantity": 20, "unitPrice": 5, "total": 100}],
            "taxAmount": 10,
        })

        record = save_captured_invoice(store, captured)

        inventory = store.get_inventory()
        assert len(inventory) == 1
        assert inventory[0].name == "Blue Denim"
        assert inventory[0].quantity == 20
        assert store.get_invoices() == [record]
        assert record.total_amount == 110

    def test_ledger_and_stock_are_written_in_one_commit(self, store, storage):
        captured = InvoiceDetails.model_validate({"items": [{"name": "Lace", "quantity": 2}]})

        save_captured_invoice(store, captured)

        assert len(storage.writes) == 1
        assert set(storage.writes[0]) == {INVENTORY_KEY, INVOICES_KEY}

    def test_storage_failure_leaves_neither_ledger_nor_stock_changed(self, store, storage, make_item):
        store.replace_inventory([make_item("Blue Denim", 5)])
        before = store.get_inventory()
        storage.fail = True
        captured = InvoiceDetails.model_validate({"items": [{"name": "Blue Denim", "quantity": 20}]})

        with pytest.raises(StorageError):
            save_captured_invoice(store, captured)

        assert store.get_inventory() == before
        assert store.get_invoices() == []
        assert INVOICES_KEY not in storage.data

    def test_newest_invoice_comes_first(self, store):
        first = save_captured_invoice(store, InvoiceDetails(vendor_name="A"))
        second = save_captured_invoice(store, InvoiceDetails(vendor_name="B"))

        assert [r.id for r in store.get_invoices()] == [second.id, first.id]


# ============================================================================
# Shelf detections
# ============================================================================


class TestShelfDetection:
    def test_shelf_detection_always_creates_a_new_item(self, make_item):
        existing = make_item("Blue Denim Rolls", 40)
        shelf = ShelfDetails.model_validate({
            "itemType": "Blue Denim Rolls",
            "itemCount": 12,
            "dominantColors": ["Indigo", "Grey"],
            "colorCode": "Lot-402",
        })

        item, inventory = add_shelf_detection(shelf, "Denim shelf", [existing])

        assert inventory == [item, existing]
        assert item.id != existing.id
        assert item.name == "Blue Denim Rolls"
        assert item.quantity == 12
        assert item.color == "Indigo"
        assert item.color_code == "Lot-402"

    def test_shelf_name_falls_back_to_summary_then_placeholder(self):
        summary = "Rolls of khaki twill fabric stacked on the left rack"

        from_summary, _ = add_shelf_detection(ShelfDetails(), summary, [])
        placeholder, _ = add_shelf_detection(ShelfDetails(), "", [])

        assert from_summary.name == summary[:30].strip()
        assert from_summary.color == "Mixed"
        assert from_summary.quantity == 0
        assert placeholder.name == "Shelf Item"

    def test_save_shelf_detection_writes_inventory_only(self, store, storage):
        item = save_shelf_detection(store, ShelfDetails(item_type="Cotton Spools", item_count=8))

        assert store.get_inventory() == [item]
        assert [set(w) for w in storage.writes] == [{INVENTORY_KEY}]
