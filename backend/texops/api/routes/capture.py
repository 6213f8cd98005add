"""
Capture: photographed document in, structured result out.

- SHELF photos with shelf data are added to stock immediately.
- INVOICE results are returned for review; the user saves them with
  POST /invoices once vendor, lines and totals look right.
- SKETCH / UNKNOWN results are informational only.
"""
import logging

from fastapi import APIRouter, Depends, File, UploadFile

from ai.document_extractor import DocumentExtractor
from texops.api.deps import get_document_extractor, get_store
from texops.core.config import settings
from texops.core.exceptions import BusinessError, ExtractionError, StorageError
from texops.schemas.capture import ImageCategory
from texops.services.entity_store import EntityStore
from texops.services.reconciliation_service import save_shelf_detection

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=dict)
def capture_document(
    file: UploadFile = File(...),
    store: EntityStore = Depends(get_store),
    extractor: DocumentExtractor = Depends(get_document_extractor),
):
    """Analyze an uploaded image. Extraction failures change nothing and can be retried."""
    image_bytes = file.file.read()
    if len(image_bytes) > settings.MAX_UPLOAD_BYTES:
        raise BusinessError.payload_too_large(settings.MAX_UPLOAD_BYTES)

    try:
        result = extractor.analyze_image(image_bytes, file.content_type or "")
    except ExtractionError as e:
        raise BusinessError.extraction_failed(e)

    added_item = None
    if result.category == ImageCategory.SHELF and result.shelf_data is not None:
        try:
            added_item = save_shelf_detection(store, result.shelf_data, result.summary)
        except StorageError as e:
            raise BusinessError.server_error(e)

    logger.info(f"[CAPTURE] {file.filename}: {result.category.value}, added_item={bool(added_item)}")
    return {
        "result": result.model_dump(mode="json", by_alias=True),
        "addedItem": added_item.model_dump(mode="json", by_alias=True) if added_item else None,
    }
