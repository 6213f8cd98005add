"""Ledger edits recompute totals from the lines."""
import pytest

from texops.schemas.entities import InvoiceItem, InvoiceRecord
from texops.services.entity_store import INVOICES_KEY
from texops.services.ledger_service import (
    edit_invoice_record,
    invoice_total,
    line_total,
    total_spend,
    update_invoice,
)


@pytest.fixture
def record():
    return InvoiceRecord(
        id="inv1",
        vendor_name="Mehta Textiles",
        date="2024-03-02",
        items=[InvoiceItem(name="Blue Denim", quantity=20, unit_price=5, total=100)],
        tax_amount=10,
        total_amount=110,
        saved_at="2024-03-02T10:00:00+00:00",
    )


def test_line_total_avoids_float_drift():
    assert line_total(3, 0.1) == 0.3
    assert invoice_total([InvoiceItem(total=0.1), InvoiceItem(total=0.2)], 0) == 0.3


def test_editing_quantity_recomputes_line_and_grand_total(record):
    edited = edit_invoice_record(
        record, items=[InvoiceItem(name="Blue Denim", quantity=10, unit_price=5, total=999)]
    )

    assert edited.items[0].total == 50
    assert edited.total_amount == 60
    assert edited.id == record.id
    assert edited.saved_at == record.saved_at


def test_editing_tax_recomputes_grand_total(record):
    assert edit_invoice_record(record, tax_amount=25).total_amount == 125


def test_header_edit_keeps_stored_totals(record):
    odd = record.model_copy(update={"total_amount": 999})

    edited = edit_invoice_record(odd, vendor_name="Mehta & Sons", gst_number="27AAPFU0939F1ZV")

    assert edited.vendor_name == "Mehta & Sons"
    assert edited.total_amount == 999


def test_update_invoice_writes_only_the_ledger(store, storage, record):
    store.replace_invoices([record])
    storage.writes.clear()

    edited = update_invoice(store, "inv1", tax_amount=0)

    assert edited.total_amount == 100
    assert store.find_invoice("inv1").total_amount == 100
    assert [set(w) for w in storage.writes] == [{INVOICES_KEY}]


def test_update_unknown_invoice_returns_none(store):
    assert update_invoice(store, "missing", vendor_name="X") is None


def test_total_spend(record):
    other = record.model_copy(update={"id": "inv2", "total_amount": 40.5})

    assert total_spend([record, other]) == 150.5
    assert total_spend([]) == 0
