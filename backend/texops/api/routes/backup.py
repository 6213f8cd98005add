"""Backup download and restore of the whole store."""
from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import Response

from texops.api.deps import get_store
from texops.core.config import settings
from texops.core.exceptions import BusinessError, RestoreError, StorageError
from texops.services.entity_store import EntityStore
from texops.services.snapshot_service import backup_filename, dump_snapshot, restore_store, snapshot_store

router = APIRouter()


@router.get("")
def download_backup(store: EntityStore = Depends(get_store)):
    """Whole-state snapshot as a downloadable JSON file."""
    backup = snapshot_store(store)
    return Response(
        content=dump_snapshot(backup),
        media_type="application/json",
        headers={"Content-Disposition": f"attachment; filename={backup_filename(backup)}"},
    )


@router.post("/restore", response_model=dict)
async def restore_backup(file: UploadFile = File(...), store: EntityStore = Depends(get_store)):
    """Replace all data with a backup file. Invalid files change nothing."""
    raw = await file.read()
    if len(raw) > settings.MAX_UPLOAD_BYTES:
        raise BusinessError.payload_too_large(settings.MAX_UPLOAD_BYTES)
    try:
        inventory, invoices, orders = restore_store(store, raw)
    except RestoreError as e:
        raise BusinessError.bad_request(f"Invalid file: {e}")
    except StorageError as e:
        raise BusinessError.server_error(e)

    return {
        "message": "Data restored",
        "inventory": len(inventory),
        "invoices": len(invoices),
        "orders": len(orders),
    }
