"""Orders: availability planning, guarded save and guarded completion."""
from fastapi import APIRouter, Depends

from texops.api.deps import get_store
from texops.core.exceptions import BusinessError, InsufficientStockError, OrderStateError, StorageError
from texops.schemas.requests import OrderCreate, PlanCheck
from texops.services.entity_store import EntityStore
from texops.services.fulfillment_service import fulfill_order
from texops.services.order_planner import check_availability, save_order

router = APIRouter()


def _shortage_conflict(e: InsufficientStockError):
    return BusinessError.conflict(
        {"message": str(e), "plan": e.plan.model_dump(mode="json")},
        reason=f"{len(e.plan.shortages)} shortages",
    )


@router.get("", response_model=list)
def list_orders(store: EntityStore = Depends(get_store)):
    """Order history, newest first."""
    return [o.model_dump(mode="json", by_alias=True) for o in store.get_orders()]


@router.post("/check", response_model=dict)
def check_plan(plan: PlanCheck, store: EntityStore = Depends(get_store)):
    """Shortages for the requested quantities against current stock."""
    result = check_availability(plan.requirements, store.get_inventory())
    return result.model_dump(mode="json")


@router.post("", response_model=dict)
def create_order(data: OrderCreate, store: EntityStore = Depends(get_store)):
    """Save a planned order (PENDING). Stock is re-checked at save time."""
    try:
        order = save_order(store, data.customer_name, data.requirements)
    except InsufficientStockError as e:
        raise _shortage_conflict(e)
    except StorageError as e:
        raise BusinessError.server_error(e)

    if order is None:
        raise BusinessError.bad_request("Order needs a customer name and at least one material with a positive amount")
    return {
        "order": order.model_dump(mode="json", by_alias=True),
        "message": "Order Saved to History",
    }


@router.post("/{order_id}/complete", response_model=dict)
def complete_order(order_id: str, store: EntityStore = Depends(get_store)):
    """Deduct the order's materials from stock and mark it COMPLETED."""
    try:
        order = fulfill_order(store, order_id)
    except OrderStateError as e:
        raise BusinessError.conflict(str(e))
    except InsufficientStockError as e:
        raise _shortage_conflict(e)
    except StorageError as e:
        raise BusinessError.server_error(e)

    if order is None:
        raise BusinessError.not_found("Order", f"id={order_id}")
    return {
        "order": order.model_dump(mode="json", by_alias=True),
        "message": "Order Completed & Stock Deducted",
    }
