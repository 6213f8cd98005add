"""
Snapshot: whole-state backup and restore of the three collections.

A backup is one JSON document:
    {"inventory": [...], "invoices": [...], "orders": [...],
     "timestamp": "<ISO-8601>", "version": "1.0"}

Restore is all-or-nothing. The file must parse, `inventory` must be a
list, and every entry must be readable; otherwise nothing is imported.
Missing `invoices` / `orders` restore as empty collections.
"""
import json
import logging
from typing import Any, List, Optional, Tuple, Union

from pydantic import ValidationError

from texops.core.audit import AuditLog
from texops.core.clock import utc_now_iso
from texops.core.config import settings
from texops.core.exceptions import RestoreError
from texops.schemas.entities import BackupData, InventoryItem, InvoiceRecord, Order
from texops.services.entity_store import EntityStore

logger = logging.getLogger(__name__)

Collections = Tuple[List[InventoryItem], List[InvoiceRecord], List[Order]]


def export_snapshot(inventory, invoices, orders) -> BackupData:
    return BackupData(
        inventory=list(inventory),
        invoices=list(invoices),
        orders=list(orders),
        timestamp=utc_now_iso(),
        version=settings.BACKUP_VERSION,
    )


def import_snapshot(data: Any, strict_version: Optional[bool] = None) -> Collections:
    """Rebuild the three collections from a parsed backup document.

    Raises:
        RestoreError: not an object, `inventory` not a list, any entry
            unreadable, or (strict mode) a different version.
    """
    if strict_version is None:
        strict_version = settings.STRICT_BACKUP_VERSION

    if isinstance(data, BackupData):
        data = data.model_dump(mode="json", by_alias=True)
    if not isinstance(data, dict):
        raise RestoreError("Backup must be a JSON object")
    if not isinstance(data.get("inventory"), list):
        raise RestoreError("Backup has no inventory list")

    version = data.get("version")
    if version != settings.BACKUP_VERSION:
        if strict_version:
            raise RestoreError(f"Unsupported backup version: {version!r}")
        logger.warning(
            f"[SNAPSHOT] Importing backup version {version!r} as-is (current is {settings.BACKUP_VERSION})"
        )

    try:
        inventory = [InventoryItem.model_validate(entry) for entry in data["inventory"]]
        invoices = [InvoiceRecord.model_validate(entry) for entry in _list_or_empty(data, "invoices")]
        orders = [Order.model_validate(entry) for entry in _list_or_empty(data, "orders")]
    except ValidationError as e:
        raise RestoreError(f"Backup contains invalid entries: {e.error_count()} errors") from e

    return inventory, invoices, orders


def _list_or_empty(data: dict, key: str) -> list:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise RestoreError(f"Backup field '{key}' must be a list")
    return value


def dump_snapshot(backup: BackupData) -> str:
    return json.dumps(backup.model_dump(mode="json", by_alias=True), indent=2)


def parse_backup_file(raw: Union[bytes, str]) -> Any:
    try:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return json.loads(raw)
    except (UnicodeDecodeError, ValueError) as e:
        raise RestoreError("Backup file is not valid JSON") from e


def backup_filename(backup: BackupData) -> str:
    return f"TexOps_Backup_{backup.timestamp[:10]}.json"


def snapshot_store(store: EntityStore) -> BackupData:
    return export_snapshot(store.get_inventory(), store.get_invoices(), store.get_orders())


def restore_store(store: EntityStore, raw: Union[bytes, str]) -> Collections:
    """Replace all three collections from a backup file in one commit."""
    inventory, invoices, orders = import_snapshot(parse_backup_file(raw))
    store.commit(inventory=inventory, invoices=invoices, orders=orders)

    logger.info(
        f"[SNAPSHOT] Restored {len(inventory)} items, {len(invoices)} invoices, {len(orders)} orders"
    )
    AuditLog.log_action(
        "restore", "snapshot", None,
        changes={"inventory": len(inventory), "invoices": len(invoices), "orders": len(orders)},
    )
    return inventory, invoices, orders
