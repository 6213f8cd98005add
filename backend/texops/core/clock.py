"""Identifier and timestamp helpers shared by the engines."""
import uuid
from datetime import date, datetime, timezone


def new_id() -> str:
    return uuid.uuid4().hex


def today_str() -> str:
    """Date stamp used for InventoryItem.last_updated."""
    return date.today().isoformat()


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
