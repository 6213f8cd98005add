"""
Analytics API: dashboard cards.

Provides:
- Total spend across the ledger
- Units in stock
- Low stock count
- Pending / completed orders
"""
from fastapi import APIRouter, Depends, Query

from texops.api.deps import get_store
from texops.schemas.entities import OrderStatus
from texops.services.entity_store import EntityStore
from texops.services.inventory_service import low_stock_items, total_units
from texops.services.ledger_service import total_spend

router = APIRouter()


@router.get("/summary")
def get_analytics_summary(
    threshold: int | None = Query(None, description="Low stock threshold"),
    store: EntityStore = Depends(get_store),
):
    """Overall summary for the dashboard cards."""
    inventory = store.get_inventory()
    invoices = store.get_invoices()
    orders = store.get_orders()

    return {
        "total_spend": total_spend(invoices),
        "total_invoices": len(invoices),
        "units_in_stock": total_units(inventory),
        "stock_lines": len(inventory),
        "low_stock_count": len(low_stock_items(inventory, threshold)),
        "pending_orders": sum(1 for o in orders if o.status == OrderStatus.PENDING),
        "completed_orders": sum(1 for o in orders if o.status == OrderStatus.COMPLETED),
    }
