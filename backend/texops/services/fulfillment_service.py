"""
Fulfillment: commit a PENDING order against stock.

State machine: PENDING --complete--> COMPLETED, exactly once. Completing
an order that is not PENDING raises OrderStateError, so stock can never
be deducted twice for the same order.

Deductions clamp at zero. When sufficiency enforcement is on, stock is
re-checked first and a short order is rejected instead of clamped.
"""
import logging
from typing import List, Optional, Sequence, Tuple

from texops.core.audit import AuditLog
from texops.core.clock import today_str
from texops.core.config import settings
from texops.core.exceptions import InsufficientStockError, OrderStateError
from texops.schemas.entities import InventoryItem, Order, OrderStatus
from texops.services.entity_store import EntityStore
from texops.services.order_planner import check_availability, total_by_item

logger = logging.getLogger(__name__)


def complete_order(
    order_id: str,
    inventory: Sequence[InventoryItem],
    orders: Sequence[Order],
    enforce_sufficiency: bool = False,
) -> Tuple[List[InventoryItem], List[Order]]:
    """Deduct an order's requirements and mark it COMPLETED.

    Returns the unchanged collections when `order_id` does not resolve.

    Raises:
        OrderStateError: the order is not PENDING.
        InsufficientStockError: enforcement is on and stock is short.
    """
    inventory = list(inventory)
    orders = list(orders)
    index = next((i for i, o in enumerate(orders) if o.id == order_id), None)
    if index is None:
        logger.info(f"[FULFILL] Order {order_id} not found, nothing to do")
        return inventory, orders

    order = orders[index]
    if not order.is_pending:
        raise OrderStateError(f"Order {order_id} is {order.status.value}, only PENDING orders can be completed")

    if enforce_sufficiency:
        plan = check_availability(total_by_item(order.requirements), inventory)
        if not plan.sufficient:
            raise InsufficientStockError(plan)

    stamp = today_str()
    positions = {item.id: pos for pos, item in enumerate(inventory)}
    for req in order.requirements:
        pos = positions.get(req.inventory_item_id)
        if pos is None:
            # Item deleted since planning; the name snapshot stays on the order
            continue
        item = inventory[pos]
        inventory[pos] = item.model_copy(update={
            "quantity": max(0, item.quantity - req.amount_needed),
            "last_updated": stamp,
        })

    orders[index] = order.model_copy(update={"status": OrderStatus.COMPLETED})
    return inventory, orders


def fulfill_order(
    store: EntityStore,
    order_id: str,
    enforce_sufficiency: Optional[bool] = None,
) -> Optional[Order]:
    """Complete an order in the store. Returns None when the id is unknown."""
    if enforce_sufficiency is None:
        enforce_sufficiency = settings.ENFORCE_SUFFICIENCY_ON_COMPLETE

    if store.find_order(order_id) is None:
        logger.info(f"[FULFILL] Order {order_id} not found")
        return None

    try:
        inventory, orders = complete_order(
            order_id,
            store.get_inventory(),
            store.get_orders(),
            enforce_sufficiency=enforce_sufficiency,
        )
    except (OrderStateError, InsufficientStockError) as e:
        AuditLog.log_rejected("complete", "order", order_id, str(e))
        raise

    store.commit(inventory=inventory, orders=orders)

    completed = store.find_order(order_id)
    logger.info(f"[FULFILL] Order {order_id} completed, stock deducted")
    AuditLog.log_action(
        "complete", "order", order_id,
        changes={"lines": len(completed.requirements) if completed else 0},
    )
    return completed
