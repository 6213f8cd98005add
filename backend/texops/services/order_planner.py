"""
Order planning: can current stock cover a set of requirements?

The planner only reads inventory. Saving an order is guarded: with
enforcement on, the plan is re-checked against current stock at save
time, so stock that changed between "check" and "save" is caught.
"""
import logging
from enum import Enum
from typing import Dict, List, Optional, Sequence

from texops.core.audit import AuditLog
from texops.core.clock import new_id, utc_now_iso
from texops.core.config import settings
from texops.core.exceptions import InsufficientStockError
from texops.schemas.entities import (
    InventoryItem,
    Order,
    OrderRequirement,
    OrderStatus,
    PlanResult,
    Shortage,
)
from texops.services.entity_store import EntityStore

logger = logging.getLogger(__name__)


class UnresolvedPolicy(str, Enum):
    """How to treat a requirement whose inventory item no longer exists."""
    SKIP = "skip"
    FULL_SHORTAGE = "full_shortage"


def default_policy() -> UnresolvedPolicy:
    try:
        return UnresolvedPolicy(settings.UNRESOLVED_REQUIREMENT_POLICY)
    except ValueError:
        logger.warning(
            f"Unknown UNRESOLVED_REQUIREMENT_POLICY '{settings.UNRESOLVED_REQUIREMENT_POLICY}', using 'skip'"
        )
        return UnresolvedPolicy.SKIP


def check_availability(
    requirements: Sequence[OrderRequirement],
    inventory: Sequence[InventoryItem],
    policy: Optional[UnresolvedPolicy] = None,
) -> PlanResult:
    """Report every requirement that asks for more than is in stock.

    Unresolved item ids are skipped under UnresolvedPolicy.SKIP and reported
    as a shortage of the whole amount under FULL_SHORTAGE.
    """
    policy = policy or default_policy()
    by_id = {item.id: item for item in inventory}
    shortages: List[Shortage] = []

    for req in requirements:
        item = by_id.get(req.inventory_item_id)
        if item is None:
            if policy == UnresolvedPolicy.FULL_SHORTAGE and req.amount_needed > 0:
                shortages.append(Shortage(
                    name=req.inventory_item_name or req.inventory_item_id,
                    needed=req.amount_needed,
                    have=0,
                    diff=req.amount_needed,
                ))
            continue
        if req.amount_needed > item.quantity:
            shortages.append(Shortage(
                name=item.name,
                needed=req.amount_needed,
                have=item.quantity,
                diff=req.amount_needed - item.quantity,
            ))

    return PlanResult(shortages=shortages, sufficient=not shortages)


def total_by_item(requirements: Sequence[OrderRequirement]) -> List[OrderRequirement]:
    """Merge lines that draw on the same item, summing their amounts.

    Sufficiency guards compare these totals, so two lines of 60 against a
    stock of 100 are short by 20. The first line's name snapshot is kept.
    """
    merged: Dict[str, OrderRequirement] = {}
    for req in requirements:
        seen = merged.get(req.inventory_item_id)
        if seen is None:
            merged[req.inventory_item_id] = req
        else:
            merged[req.inventory_item_id] = seen.model_copy(
                update={"amount_needed": seen.amount_needed + req.amount_needed}
            )
    return list(merged.values())


def snapshot_requirements(
    requirements: Sequence[OrderRequirement],
    inventory: Sequence[InventoryItem],
) -> List[OrderRequirement]:
    """Copy the current item name into each requirement (the name snapshot)."""
    by_id = {item.id: item for item in inventory}
    snapshots = []
    for req in requirements:
        item = by_id.get(req.inventory_item_id)
        name = item.name if item else req.inventory_item_name
        snapshots.append(req.model_copy(update={"inventory_item_name": name}))
    return snapshots


def build_order(
    customer_name: str,
    requirements: Sequence[OrderRequirement],
    inventory: Sequence[InventoryItem],
) -> Optional[Order]:
    """New PENDING order, or None when there is nothing valid to save."""
    customer_name = (customer_name or "").strip()
    valid = [req for req in requirements if req.is_valid()]
    if not customer_name or not valid:
        return None

    return Order(
        id=new_id(),
        customer_name=customer_name,
        created_at=utc_now_iso(),
        status=OrderStatus.PENDING,
        requirements=snapshot_requirements(valid, inventory),
    )


def save_order(
    store: EntityStore,
    customer_name: str,
    requirements: Sequence[OrderRequirement],
    enforce_sufficiency: Optional[bool] = None,
) -> Optional[Order]:
    """Persist a planned order. Returns None (no-op) for an empty plan.

    Raises:
        InsufficientStockError: enforcement is on and current stock no longer
            covers the plan.
    """
    if enforce_sufficiency is None:
        enforce_sufficiency = settings.ENFORCE_SUFFICIENCY_ON_SAVE

    inventory = store.get_inventory()
    order = build_order(customer_name, requirements, inventory)
    if order is None:
        logger.info(f"[ORDERS] Nothing to save for '{customer_name}': no valid requirements")
        return None

    if enforce_sufficiency:
        plan = check_availability(total_by_item(order.requirements), inventory)
        if not plan.sufficient:
            AuditLog.log_rejected("create", "order", None, f"{len(plan.shortages)} shortages")
            raise InsufficientStockError(plan)

    store.replace_orders([order] + store.get_orders())

    logger.info(f"[ORDERS] Saved order {order.id} for {order.customer_name} ({len(order.requirements)} lines)")
    AuditLog.log_action("create", "order", order.id, changes={"customer": order.customer_name})
    return order
