"""Ledger edits. Totals are recomputed on this path, never trusted from input."""
import logging
from decimal import Decimal
from typing import List, Optional, Sequence

from texops.core.audit import AuditLog
from texops.schemas.entities import InvoiceItem, InvoiceRecord
from texops.services.entity_store import EntityStore

logger = logging.getLogger(__name__)


def line_total(quantity: float, unit_price: float) -> float:
    return float(Decimal(str(quantity)) * Decimal(str(unit_price)))


def invoice_total(items: Sequence[InvoiceItem], tax_amount: float) -> float:
    """Grand total = sum of line totals + tax."""
    subtotal = sum((Decimal(str(item.total)) for item in items), Decimal("0"))
    return float(subtotal + Decimal(str(tax_amount)))


def recalculate_items(items: Sequence[InvoiceItem]) -> List[InvoiceItem]:
    return [
        item.model_copy(update={"total": line_total(item.quantity, item.unit_price)})
        for item in items
    ]


def edit_invoice_record(
    record: InvoiceRecord,
    vendor_name: Optional[str] = None,
    gst_number: Optional[str] = None,
    date: Optional[str] = None,
    tax_amount: Optional[float] = None,
    items: Optional[Sequence[InvoiceItem]] = None,
) -> InvoiceRecord:
    """Return an edited copy of `record`. `id` and `saved_at` never change.

    - Supplied items get `total = quantity * unit_price`.
    - If items or tax change, `total_amount` is recomputed from the lines.
    - Header-only edits (vendor, GST number, date) leave totals as stored.
    """
    update = {}
    if vendor_name is not None:
        update["vendor_name"] = vendor_name
    if gst_number is not None:
        update["gst_number"] = gst_number
    if date is not None:
        update["date"] = date
    if tax_amount is not None:
        update["tax_amount"] = tax_amount
    if items is not None:
        update["items"] = recalculate_items(items)

    if items is not None or tax_amount is not None:
        update["total_amount"] = invoice_total(
            update.get("items", record.items),
            update.get("tax_amount", record.tax_amount),
        )

    return record.model_copy(update=update)


def update_invoice(store: EntityStore, invoice_id: str, **changes) -> Optional[InvoiceRecord]:
    """Edit a saved record by id. Only the invoices collection is written."""
    invoices = store.get_invoices()
    pos = next((i for i, r in enumerate(invoices) if r.id == invoice_id), None)
    if pos is None:
        return None

    edited = edit_invoice_record(invoices[pos], **changes)
    invoices[pos] = edited
    store.replace_invoices(invoices)

    logger.info(f"[LEDGER] Invoice {invoice_id} updated, total {edited.total_amount}")
    AuditLog.log_action("update", "invoice", invoice_id, changes={"total": edited.total_amount})
    return edited


def total_spend(invoices: Sequence[InvoiceRecord]) -> float:
    return float(sum((Decimal(str(r.total_amount)) for r in invoices), Decimal("0")))
