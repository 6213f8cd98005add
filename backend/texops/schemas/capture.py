"""Capture Schema - normalized shape of Document Extractor output.

The extractor is a vision LLM: every field it returns may be missing,
null, or the wrong type. These models are the ONE place where that output
is defaulted and coerced. Anything past this boundary can rely on plain
strings, numbers and lists.
"""

from enum import Enum
from typing import Any, List, Optional
from pydantic import Field, field_validator

from texops.core.clock import today_str
from texops.schemas.entities import CamelModel, InvoiceItem, coerce_number, coerce_text, whole_units

UNKNOWN_VENDOR = "Unknown Vendor"


class ImageCategory(str, Enum):
    """What the photographed document is."""
    INVOICE = "INVOICE"
    SHELF = "SHELF"
    SKETCH = "SKETCH"
    UNKNOWN = "UNKNOWN"


class InvoiceDetails(CamelModel):
    """Invoice fields as captured, or as corrected by the user before saving.

    `total_amount` stays None when the document carried no grand total, so
    the ledger can tell "missing" apart from an explicit zero.
    """
    vendor_name: str = UNKNOWN_VENDOR
    gst_number: str = ""
    date: str = Field(default_factory=today_str)
    items: List[InvoiceItem] = Field(default_factory=list)
    tax_amount: float = 0
    total_amount: Optional[float] = None

    @field_validator("vendor_name", mode="before")
    @classmethod
    def default_vendor(cls, v: Any) -> str:
        return coerce_text(v).strip() or UNKNOWN_VENDOR

    @field_validator("date", mode="before")
    @classmethod
    def default_date(cls, v: Any) -> str:
        return coerce_text(v).strip() or today_str()

    @field_validator("gst_number", mode="before")
    @classmethod
    def text_fields(cls, v: Any) -> str:
        return coerce_text(v).strip()

    @field_validator("tax_amount", mode="before")
    @classmethod
    def numeric_fields(cls, v: Any) -> float:
        return coerce_number(v)

    @field_validator("total_amount", mode="before")
    @classmethod
    def optional_total(cls, v: Any) -> Optional[float]:
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return coerce_number(v)

    @field_validator("items", mode="before")
    @classmethod
    def item_list(cls, v: Any) -> list:
        if not isinstance(v, list):
            return []
        return [i for i in v if isinstance(i, (dict, InvoiceItem))]


class ShelfDetails(CamelModel):
    item_type: str = ""
    item_count: int = 0
    dominant_colors: List[str] = Field(default_factory=list)
    color_code: str = ""
    quantity_estimate: str = ""  # qualitative: "Low", "Full", "Overflowing"

    @field_validator("item_type", "color_code", "quantity_estimate", mode="before")
    @classmethod
    def text_fields(cls, v: Any) -> str:
        return coerce_text(v).strip()

    @field_validator("item_count", mode="before")
    @classmethod
    def count(cls, v: Any) -> int:
        return max(0, whole_units(v))

    @field_validator("dominant_colors", mode="before")
    @classmethod
    def color_list(cls, v: Any) -> List[str]:
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, list):
            return []
        return [c.strip() for c in (coerce_text(x) for x in v if x is not None) if c.strip()]


class SketchDetails(CamelModel):
    design_concept: str = ""
    fabric_suggestion: str = ""

    @field_validator("design_concept", "fabric_suggestion", mode="before")
    @classmethod
    def text_fields(cls, v: Any) -> str:
        return coerce_text(v)


class AnalysisResult(CamelModel):
    """Tagged extractor result. The payload matching `category` may be absent."""
    category: ImageCategory = ImageCategory.UNKNOWN
    summary: str = ""
    invoice_data: Optional[InvoiceDetails] = None
    shelf_data: Optional[ShelfDetails] = None
    sketch_data: Optional[SketchDetails] = None

    @field_validator("category", mode="before")
    @classmethod
    def known_category(cls, v: Any) -> ImageCategory:
        if isinstance(v, ImageCategory):
            return v
        text = coerce_text(v).strip().upper()
        try:
            return ImageCategory(text)
        except ValueError:
            return ImageCategory.UNKNOWN

    @field_validator("summary", mode="before")
    @classmethod
    def text_fields(cls, v: Any) -> str:
        return coerce_text(v).strip()

    @field_validator("invoice_data", "shelf_data", "sketch_data", mode="before")
    @classmethod
    def payload_object(cls, v: Any) -> Any:
        # A payload that is not an object carries nothing usable
        if isinstance(v, (dict, CamelModel)):
            return v
        return None
