"""Inventory edits made directly by the user. Captured documents go through reconciliation."""
import logging
from typing import List, Optional, Sequence

from texops.core.audit import AuditLog
from texops.core.clock import new_id, today_str
from texops.core.config import settings
from texops.schemas.entities import InventoryItem
from texops.services.entity_store import EntityStore
from texops.services.reconciliation_service import normalize_item_name

logger = logging.getLogger(__name__)


def _validate(name: Optional[str], quantity: Optional[int]) -> None:
    if name is not None and not name.strip():
        raise ValueError("Item name cannot be empty")
    if quantity is not None and quantity < 0:
        raise ValueError("Quantity cannot be negative")


def _ensure_unique(inventory: Sequence[InventoryItem], name: str, exclude_id: Optional[str] = None) -> None:
    key = normalize_item_name(name)
    for item in inventory:
        if item.id != exclude_id and normalize_item_name(item.name) == key:
            raise ValueError(f"Item '{name.strip()}' already exists")


def create_item(
    store: EntityStore,
    name: str,
    quantity: int = 0,
    color: str = "",
    color_code: str = "",
) -> InventoryItem:
    """Add a stock line by hand.

    Raises:
        ValueError: empty name, negative quantity or duplicate name.
    """
    _validate(name, quantity)
    inventory = store.get_inventory()
    _ensure_unique(inventory, name)

    item = InventoryItem(
        id=new_id(),
        name=name.strip(),
        quantity=quantity,
        color=color,
        color_code=color_code,
        last_updated=today_str(),
    )
    store.replace_inventory([item] + inventory)

    AuditLog.log_action("create", "inventory", item.id, changes={"name": item.name, "quantity": item.quantity})
    return item


def update_item(store: EntityStore, item_id: str, **changes) -> Optional[InventoryItem]:
    """Apply a partial edit. None values are ignored. Returns None for an unknown id."""
    changes = {k: v for k, v in changes.items() if v is not None}
    _validate(changes.get("name"), changes.get("quantity"))

    inventory = store.get_inventory()
    pos = next((i for i, item in enumerate(inventory) if item.id == item_id), None)
    if pos is None:
        return None
    if "name" in changes:
        changes["name"] = changes["name"].strip()
        _ensure_unique(inventory, changes["name"], exclude_id=item_id)

    updated = inventory[pos].model_copy(update={**changes, "last_updated": today_str()})
    inventory[pos] = updated
    store.replace_inventory(inventory)

    AuditLog.log_action("update", "inventory", item_id, changes=changes)
    return updated


def delete_item(store: EntityStore, item_id: str) -> bool:
    """Remove a stock line. Orders keep their name snapshots of it."""
    inventory = store.get_inventory()
    remaining = [item for item in inventory if item.id != item_id]
    if len(remaining) == len(inventory):
        return False
    store.replace_inventory(remaining)

    logger.info(f"[INVENTORY] Deleted item {item_id}")
    AuditLog.log_action("delete", "inventory", item_id)
    return True


def search_items(inventory: Sequence[InventoryItem], term: Optional[str]) -> List[InventoryItem]:
    if not term:
        return list(inventory)
    needle = term.strip().lower()
    return [
        item for item in inventory
        if needle in item.name.lower() or needle in item.color_code.lower()
    ]


def low_stock_items(inventory: Sequence[InventoryItem], threshold: Optional[int] = None) -> List[InventoryItem]:
    """Items under the threshold, emptiest first."""
    threshold = settings.LOW_STOCK_THRESHOLD if threshold is None else threshold
    return sorted((i for i in inventory if i.quantity < threshold), key=lambda i: i.quantity)


def total_units(inventory: Sequence[InventoryItem]) -> int:
    return sum(item.quantity for item in inventory)
