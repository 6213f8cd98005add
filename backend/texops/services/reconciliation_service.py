"""
Reconciliation: merge captured purchases into stock and the ledger.

Invoice lines are matched to inventory by normalized name
(lowercase, trimmed). Matches are incremented, everything else becomes a
new stock line. Shelf detections always create a new line, because a
detected shelf label is not comparable to existing stock names.

The ledger entry and the stock merge are ONE operation:
`reconcile_invoice` builds both replacement collections and
`save_captured_invoice` commits them together.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from texops.core.audit import AuditLog
from texops.core.clock import new_id, today_str, utc_now_iso
from texops.schemas.capture import InvoiceDetails, ShelfDetails
from texops.schemas.entities import InventoryItem, InvoiceItem, InvoiceRecord, whole_units
from texops.services.entity_store import EntityStore
from texops.services.ledger_service import invoice_total

logger = logging.getLogger(__name__)

NEW_ITEM_COLOR = "N/A"
SHELF_ITEM_COLOR = "Mixed"
SHELF_ITEM_NAME = "Shelf Item"
SHELF_NAME_FROM_SUMMARY = 30


@dataclass(frozen=True)
class ReconciliationResult:
    record: InvoiceRecord
    inventory: List[InventoryItem]
    invoices: List[InvoiceRecord]


def normalize_item_name(name: Optional[str]) -> str:
    """Matching key for stock names.

    Examples:
        "  Blue Denim " -> "blue denim"
        "BLUE DENIM" -> "blue denim"
    """
    return (name or "").strip().lower()


def merge_invoice_into_inventory(
    invoice_items: Sequence[InvoiceItem],
    current_inventory: Sequence[InventoryItem],
) -> List[InventoryItem]:
    """Return a new inventory with the invoice lines applied.

    - Lines without a name or with quantity <= 0 are ignored.
    - The first existing item with the same normalized name is incremented.
    - Items created earlier in the same batch are matched like existing ones,
      so repeated lines never produce duplicates.
    - New items go to the front, newest first.
    """
    existing = list(current_inventory)
    created: List[InventoryItem] = []
    # key -> (is_new, position)
    positions: Dict[str, Tuple[bool, int]] = {}
    for pos, item in enumerate(existing):
        positions.setdefault(normalize_item_name(item.name), (False, pos))

    stamp = today_str()
    for line in invoice_items:
        key = normalize_item_name(line.name)
        if not key or line.quantity <= 0:
            continue
        units = whole_units(line.quantity)
        if units <= 0:
            logger.debug(f"[RECONCILE] Skipping '{line.name}': {line.quantity} is under one unit")
            continue

        if key in positions:
            is_new, pos = positions[key]
            bucket = created if is_new else existing
            item = bucket[pos]
            bucket[pos] = item.model_copy(update={
                "quantity": item.quantity + units,
                "last_updated": stamp,
            })
        else:
            created.append(InventoryItem(
                id=new_id(),
                name=line.name.strip(),
                quantity=units,
                color=NEW_ITEM_COLOR,
                color_code="",
                last_updated=stamp,
            ))
            positions[key] = (True, len(created) - 1)

    return created[::-1] + existing


def record_invoice(captured: InvoiceDetails) -> InvoiceRecord:
    """Build a ledger record from a normalized capture.

    Defaults (vendor, date, zeros) were applied at the capture boundary.
    When the document had no grand total, it is derived from the lines
    plus tax; an explicit total is kept as captured.
    """
    total = captured.total_amount
    if total is None:
        total = invoice_total(captured.items, captured.tax_amount)

    return InvoiceRecord(
        id=new_id(),
        saved_at=utc_now_iso(),
        vendor_name=captured.vendor_name,
        gst_number=captured.gst_number,
        date=captured.date,
        items=[item.model_copy() for item in captured.items],
        tax_amount=captured.tax_amount,
        total_amount=total,
    )


def reconcile_invoice(
    captured: InvoiceDetails,
    inventory: Sequence[InventoryItem],
    invoices: Sequence[InvoiceRecord],
) -> ReconciliationResult:
    """Compute the ledger record and both updated collections, without side effects."""
    record = record_invoice(captured)
    return ReconciliationResult(
        record=record,
        inventory=merge_invoice_into_inventory(record.items, inventory),
        invoices=[record] + list(invoices),
    )


def save_captured_invoice(store: EntityStore, captured: InvoiceDetails) -> InvoiceRecord:
    """Save an invoice to the ledger and merge its lines into stock.

    Both collections are committed together; on StorageError neither changes.
    """
    result = reconcile_invoice(captured, store.get_inventory(), store.get_invoices())
    store.commit(inventory=result.inventory, invoices=result.invoices)

    logger.info(
        f"[RECONCILE] Saved invoice {result.record.id} from {result.record.vendor_name}: "
        f"{len(result.record.items)} lines, total {result.record.total_amount}"
    )
    AuditLog.log_action(
        "create", "invoice", result.record.id,
        changes={"vendor": result.record.vendor_name, "total": result.record.total_amount},
    )
    return result.record


def shelf_item_name(shelf: ShelfDetails, summary: str = "") -> str:
    return shelf.item_type or (summary or "")[:SHELF_NAME_FROM_SUMMARY].strip() or SHELF_ITEM_NAME


def add_shelf_detection(
    shelf: ShelfDetails,
    summary: str,
    inventory: Sequence[InventoryItem],
) -> Tuple[InventoryItem, List[InventoryItem]]:
    """Create a stock line from a shelf photo. Never merges into existing stock."""
    item = InventoryItem(
        id=new_id(),
        name=shelf_item_name(shelf, summary),
        quantity=shelf.item_count,
        color=shelf.dominant_colors[0] if shelf.dominant_colors else SHELF_ITEM_COLOR,
        color_code=shelf.color_code,
        last_updated=today_str(),
    )
    return item, [item] + list(inventory)


def save_shelf_detection(store: EntityStore, shelf: ShelfDetails, summary: str = "") -> InventoryItem:
    item, inventory = add_shelf_detection(shelf, summary, store.get_inventory())
    store.replace_inventory(inventory)

    logger.info(f"[RECONCILE] Shelf detection added '{item.name}' x{item.quantity}")
    AuditLog.log_action("create", "inventory", item.id, changes={"source": "shelf", "name": item.name})
    return item
