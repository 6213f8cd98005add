"""
Entity Store: sole owner of the inventory, invoice and order collections.

Engines never mutate what they get from here. They build replacement
lists and hand them back through `replace_*` or `commit`. A collection is
persisted under its own key, and only the collections being replaced are
written.

ATOMICITY:
- `commit()` serializes every replaced collection and writes them with one
  `set_many` call.
- In-memory state is swapped only after storage accepted the write, so a
  failed write leaves the previous state visible everywhere.
"""
import json
import logging
from typing import Iterable, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from texops.schemas.entities import InventoryItem, InvoiceRecord, Order
from texops.services.storage import KeyValueStorage

logger = logging.getLogger(__name__)

INVENTORY_KEY = "texops_inventory"
INVOICES_KEY = "texops_invoices"
ORDERS_KEY = "texops_orders"

M = TypeVar("M", bound=BaseModel)


def dump_collection(items: Iterable[BaseModel]) -> str:
    return json.dumps([item.model_dump(mode="json", by_alias=True) for item in items])


class EntityStore:
    def __init__(self, storage: KeyValueStorage):
        self.storage = storage
        self._inventory: List[InventoryItem] = []
        self._invoices: List[InvoiceRecord] = []
        self._orders: List[Order] = []

    def load(self) -> "EntityStore":
        """Read all three collections.

        A collection that is not a JSON list starts out empty. Inside a
        readable list, unreadable entries are skipped and the rest kept.
        """
        self._inventory = self._load_collection(INVENTORY_KEY, InventoryItem)
        self._invoices = self._load_collection(INVOICES_KEY, InvoiceRecord)
        self._orders = self._load_collection(ORDERS_KEY, Order)
        logger.info(
            f"[STORE] Loaded {len(self._inventory)} items, "
            f"{len(self._invoices)} invoices, {len(self._orders)} orders"
        )
        return self

    def _load_collection(self, key: str, model: Type[M]) -> List[M]:
        raw = self.storage.get(key)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.warning(f"[STORE] Ignoring unreadable collection '{key}': {e}")
            return []
        if not isinstance(data, list):
            logger.warning(f"[STORE] Ignoring collection '{key}': expected a list, got {type(data).__name__}")
            return []

        # Entries are validated one by one; readable ones are kept
        entries = []
        for pos, entry in enumerate(data):
            try:
                entries.append(model.model_validate(entry))
            except ValidationError as e:
                logger.warning(f"[STORE] Skipping unreadable entry {pos} in '{key}': {e.error_count()} errors")
        return entries

    # -- reads ---------------------------------------------------------------

    def get_inventory(self) -> List[InventoryItem]:
        return list(self._inventory)

    def get_invoices(self) -> List[InvoiceRecord]:
        return list(self._invoices)

    def get_orders(self) -> List[Order]:
        return list(self._orders)

    def find_inventory_item(self, item_id: str) -> Optional[InventoryItem]:
        return next((i for i in self._inventory if i.id == item_id), None)

    def find_invoice(self, invoice_id: str) -> Optional[InvoiceRecord]:
        return next((r for r in self._invoices if r.id == invoice_id), None)

    def find_order(self, order_id: str) -> Optional[Order]:
        return next((o for o in self._orders if o.id == order_id), None)

    # -- writes --------------------------------------------------------------

    def replace_inventory(self, items: List[InventoryItem]) -> None:
        self.commit(inventory=items)

    def replace_invoices(self, records: List[InvoiceRecord]) -> None:
        self.commit(invoices=records)

    def replace_orders(self, orders: List[Order]) -> None:
        self.commit(orders=orders)

    def commit(
        self,
        inventory: Optional[List[InventoryItem]] = None,
        invoices: Optional[List[InvoiceRecord]] = None,
        orders: Optional[List[Order]] = None,
    ) -> None:
        """Replace the given collections together. Raises StorageError on failure."""
        entries = {}
        if inventory is not None:
            inventory = list(inventory)
            entries[INVENTORY_KEY] = dump_collection(inventory)
        if invoices is not None:
            invoices = list(invoices)
            entries[INVOICES_KEY] = dump_collection(invoices)
        if orders is not None:
            orders = list(orders)
            entries[ORDERS_KEY] = dump_collection(orders)
        if not entries:
            return

        self.storage.set_many(entries)

        if inventory is not None:
            self._inventory = inventory
        if invoices is not None:
            self._invoices = invoices
        if orders is not None:
            self._orders = orders
