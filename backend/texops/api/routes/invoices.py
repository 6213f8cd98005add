"""Invoices: purchase ledger. Saving a captured invoice also updates stock."""
from fastapi import APIRouter, Depends

from texops.api.deps import get_store
from texops.core.exceptions import BusinessError, StorageError
from texops.schemas.capture import InvoiceDetails
from texops.schemas.requests import InvoiceUpdate
from texops.services import ledger_service
from texops.services.entity_store import EntityStore
from texops.services.reconciliation_service import save_captured_invoice

router = APIRouter()


@router.get("", response_model=dict)
def list_invoices(store: EntityStore = Depends(get_store)):
    """Ledger records, newest first, with the running spend total."""
    invoices = store.get_invoices()
    return {
        "invoices": [r.model_dump(mode="json", by_alias=True) for r in invoices],
        "totalSpend": ledger_service.total_spend(invoices),
    }


@router.post("", response_model=dict)
def save_invoice(captured: InvoiceDetails, store: EntityStore = Depends(get_store)):
    """Save a reviewed capture to the ledger and merge its lines into stock.

    One transaction: if storage fails, neither the ledger nor stock changes.
    """
    try:
        record = save_captured_invoice(store, captured)
    except StorageError as e:
        raise BusinessError.server_error(e)

    return {
        "invoice": record.model_dump(mode="json", by_alias=True),
        "message": "Invoice Saved & Stock Updated",
    }


@router.patch("/{invoice_id}", response_model=dict)
def update_invoice(
    invoice_id: str,
    updates: InvoiceUpdate,
    store: EntityStore = Depends(get_store),
):
    """Edit a saved record. Line totals and the grand total are recomputed."""
    # Iterating the model keeps items as InvoiceItem instances
    changes = {field: value for field, value in updates if value is not None}
    try:
        record = ledger_service.update_invoice(store, invoice_id, **changes)
    except StorageError as e:
        raise BusinessError.server_error(e)

    if not record:
        raise BusinessError.not_found("Invoice", f"id={invoice_id}")
    return {
        "invoice": record.model_dump(mode="json", by_alias=True),
        "message": "Invoice updated",
    }
