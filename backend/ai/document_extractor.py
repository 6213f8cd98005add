"""
Document Extractor: photographed document in, normalized AnalysisResult out.

The vision model's answer is parsed as JSON and passed through the
capture schema, which defaults every missing or mistyped field. Anything
that cannot be read at all raises ExtractionError: the user retries, and
no state has been touched.
"""

import base64
import json
import logging
from typing import Optional

from pydantic import ValidationError

from texops.core.exceptions import ExtractionError
from texops.schemas.capture import AnalysisResult

from .groq_client import GroqClient, get_groq_client
from .prompts import build_extraction_prompt

logger = logging.getLogger(__name__)

SUPPORTED_MIME_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}


class DocumentExtractor:
    def __init__(self, client: Optional[GroqClient] = None):
        self.client = client or get_groq_client()

    def is_available(self) -> bool:
        return self.client.is_available()

    def analyze_image(self, image_bytes: bytes, mime_type: str) -> AnalysisResult:
        """
        Classify and read one image.

        Raises:
            ExtractionError: unsupported/empty image, extractor unavailable,
                no answer, or an answer that is not a JSON object.
        """
        if not image_bytes:
            raise ExtractionError("Empty image")
        if mime_type not in SUPPORTED_MIME_TYPES:
            raise ExtractionError(f"Unsupported image type: {mime_type}")
        if not self.is_available():
            raise ExtractionError("Document extraction is not configured")

        image_b64 = base64.b64encode(image_bytes).decode("ascii")
        logger.info(f"[CAPTURE] Sending {len(image_bytes)} bytes ({mime_type}) for extraction")

        raw = self.client.extract_document(build_extraction_prompt(), image_b64, mime_type)
        if not raw:
            raise ExtractionError("No response from document extractor")

        result = parse_analysis(raw)
        logger.info(f"[CAPTURE] Detected {result.category.value}: {result.summary[:60]}")
        return result


def parse_analysis(raw: str) -> AnalysisResult:
    """Parse raw model output into a normalized AnalysisResult."""
    try:
        data = json.loads(_strip_code_fence(raw))
    except ValueError as e:
        logger.warning(f"[CAPTURE] Unparsable extractor output: {raw[:100]}")
        raise ExtractionError("Extractor returned invalid JSON") from e

    if not isinstance(data, dict):
        raise ExtractionError("Extractor returned JSON that is not an object")

    try:
        return AnalysisResult.model_validate(data)
    except ValidationError as e:
        raise ExtractionError(f"Extractor output could not be normalized: {e.error_count()} errors") from e


def _strip_code_fence(text: str) -> str:
    """Models sometimes wrap JSON in ```json fences despite JSON mode."""
    text = text.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()
