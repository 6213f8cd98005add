"""Stored entities: inventory, ledger records, orders and backups.

Attributes are snake_case in Python and camelCase on the wire, so stored
blobs and backup files keep the `colorCode` / `lastUpdated` style keys.
Always dump with `model_dump(mode="json", by_alias=True)`.
"""
import math
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from enum import Enum
from typing import Any, List

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel


def coerce_number(value: Any) -> float:
    """Lenient numeric coercion: anything that is not a finite number becomes 0.

    Examples:
        "1,200" -> 1200.0
        "₹ 45.5" -> 45.5
        None / "abc" / NaN -> 0.0
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip().lstrip("₹$").replace(",", "").strip()
        try:
            number = float(text)
        except ValueError:
            return 0.0
    else:
        return 0.0
    return number if math.isfinite(number) else 0.0


def whole_units(value: Any) -> int:
    """Round a quantity half-up to whole units."""
    try:
        return int(Decimal(str(coerce_number(value))).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    except InvalidOperation:
        return 0


def coerce_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class InventoryItem(CamelModel):
    id: str
    name: str = ""
    quantity: int = 0
    color: str = ""
    color_code: str = ""
    last_updated: str = ""

    @field_validator("quantity", mode="before")
    @classmethod
    def non_negative_quantity(cls, v: Any) -> int:
        # Stock never goes below zero, whatever was stored
        return max(0, whole_units(v))

    @field_validator("name", "color", "color_code", "last_updated", mode="before")
    @classmethod
    def text_fields(cls, v: Any) -> str:
        return coerce_text(v)


class InvoiceItem(CamelModel):
    name: str = ""
    quantity: float = 0
    unit_price: float = 0
    total: float = 0

    @field_validator("quantity", "unit_price", "total", mode="before")
    @classmethod
    def numeric_fields(cls, v: Any) -> float:
        return coerce_number(v)

    @field_validator("name", mode="before")
    @classmethod
    def text_fields(cls, v: Any) -> str:
        return coerce_text(v)


class InvoiceRecord(CamelModel):
    """One saved purchase. `id` and `saved_at` never change after saving."""
    id: str
    vendor_name: str = ""
    gst_number: str = ""
    date: str = ""
    items: List[InvoiceItem] = Field(default_factory=list)
    tax_amount: float = 0
    total_amount: float = 0
    saved_at: str = ""

    @field_validator("tax_amount", "total_amount", mode="before")
    @classmethod
    def numeric_fields(cls, v: Any) -> float:
        return coerce_number(v)

    @field_validator("vendor_name", "gst_number", "date", "saved_at", mode="before")
    @classmethod
    def text_fields(cls, v: Any) -> str:
        return coerce_text(v)

    @field_validator("items", mode="before")
    @classmethod
    def item_list(cls, v: Any) -> list:
        return v if isinstance(v, list) else []


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


class OrderRequirement(CamelModel):
    inventory_item_id: str = ""
    # Name snapshot taken when the order was planned; not updated on rename
    inventory_item_name: str = ""
    amount_needed: int = 0

    @field_validator("inventory_item_id", "inventory_item_name", mode="before")
    @classmethod
    def text_fields(cls, v: Any) -> str:
        return coerce_text(v)

    @field_validator("amount_needed", mode="before")
    @classmethod
    def integer_amount(cls, v: Any) -> int:
        return whole_units(v)

    def is_valid(self) -> bool:
        """Only requirements naming an item and a positive amount are persisted."""
        return bool(self.inventory_item_id) and self.amount_needed > 0


class Order(CamelModel):
    id: str
    customer_name: str = ""
    created_at: str = ""
    status: OrderStatus = OrderStatus.PENDING
    requirements: List[OrderRequirement] = Field(default_factory=list)

    @property
    def is_pending(self) -> bool:
        return self.status == OrderStatus.PENDING


class Shortage(BaseModel):
    name: str
    needed: int
    have: int
    diff: int


class PlanResult(BaseModel):
    shortages: List[Shortage] = Field(default_factory=list)
    sufficient: bool = True


class BackupData(BaseModel):
    inventory: List[InventoryItem] = Field(default_factory=list)
    invoices: List[InvoiceRecord] = Field(default_factory=list)
    orders: List[Order] = Field(default_factory=list)
    timestamp: str = ""
    version: str = ""
