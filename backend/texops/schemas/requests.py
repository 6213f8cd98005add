from pydantic import Field
from typing import List, Optional

from texops.schemas.entities import CamelModel, InvoiceItem, OrderRequirement


class InventoryCreate(CamelModel):
    name: str
    quantity: int = 0
    color: str = ""
    color_code: str = ""


class InventoryUpdate(CamelModel):
    name: Optional[str] = None
    quantity: Optional[int] = None
    color: Optional[str] = None
    color_code: Optional[str] = None


class InvoiceUpdate(CamelModel):
    """Edit of a saved ledger record. Omitted fields are left unchanged."""
    vendor_name: Optional[str] = None
    gst_number: Optional[str] = None
    date: Optional[str] = None
    tax_amount: Optional[float] = None
    items: Optional[List[InvoiceItem]] = None


class PlanCheck(CamelModel):
    requirements: List[OrderRequirement] = Field(default_factory=list)


class OrderCreate(CamelModel):
    customer_name: str
    requirements: List[OrderRequirement] = Field(default_factory=list)
