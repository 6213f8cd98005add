"""Inventory: stock list with search, low-stock alert and manual CRUD."""
from fastapi import APIRouter, Depends, Query

from texops.api.deps import get_store
from texops.core.exceptions import BusinessError, StorageError
from texops.schemas.entities import InventoryItem
from texops.schemas.requests import InventoryCreate, InventoryUpdate
from texops.services import inventory_service
from texops.services.entity_store import EntityStore

router = APIRouter()


def _dump(item: InventoryItem) -> dict:
    return item.model_dump(mode="json", by_alias=True)


@router.get("", response_model=list)
def list_inventory(
    search: str | None = Query(None),
    store: EntityStore = Depends(get_store),
):
    """Inventory list with search on name or color code."""
    items = inventory_service.search_items(store.get_inventory(), search)
    return [_dump(i) for i in items]


# ==============================================================================
# LOW STOCK ALERT ENDPOINT
# ==============================================================================

@router.get("/low-stock", response_model=list)
def get_low_stock_items(
    threshold: int | None = Query(None, description="Stock threshold for low stock alert"),
    store: EntityStore = Depends(get_store),
):
    """Items under the threshold for the dashboard alert banner."""
    items = inventory_service.low_stock_items(store.get_inventory(), threshold)
    return [
        {
            **_dump(i),
            "status": "Out of Stock" if i.quantity == 0 else "Low Stock",
        }
        for i in items
    ]


# ==============================================================================
# INVENTORY CRUD ENDPOINTS
# ==============================================================================

@router.post("", response_model=dict)
def create_inventory_item(item: InventoryCreate, store: EntityStore = Depends(get_store)):
    """Add a new stock line by hand."""
    try:
        created = inventory_service.create_item(
            store, item.name, item.quantity, item.color, item.color_code
        )
    except ValueError as e:
        raise BusinessError.bad_request(str(e))
    except StorageError as e:
        raise BusinessError.server_error(e)

    return {**_dump(created), "message": f"Added {created.name} to inventory"}


@router.patch("/{item_id}", response_model=dict)
def update_inventory_item(
    item_id: str,
    updates: InventoryUpdate,
    store: EntityStore = Depends(get_store),
):
    """Update an existing stock line."""
    try:
        item = inventory_service.update_item(store, item_id, **updates.model_dump())
    except ValueError as e:
        raise BusinessError.bad_request(str(e))
    except StorageError as e:
        raise BusinessError.server_error(e)

    if not item:
        raise BusinessError.not_found("Item", f"id={item_id}")
    return {**_dump(item), "message": f"Updated {item.name}"}


@router.delete("/{item_id}", response_model=dict)
def delete_inventory_item(item_id: str, store: EntityStore = Depends(get_store)):
    """Delete a stock line. Orders keep their own copy of its name."""
    item = store.find_inventory_item(item_id)
    if not item:
        raise BusinessError.not_found("Item", f"id={item_id}")
    try:
        inventory_service.delete_item(store, item_id)
    except StorageError as e:
        raise BusinessError.server_error(e)

    return {"message": f"Deleted {item.name}", "id": item_id}
