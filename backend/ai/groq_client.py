"""
Groq API Client: vision wrapper for document extraction.

================================================================================
LLM ROLE IS DOCUMENT READER ONLY
================================================================================

This client sends ONE photographed document to a Groq vision model and
returns the raw JSON text it produces. It:
- Does NOT touch inventory, ledger or orders
- Does NOT validate the output (the capture schema does that)
- Returns None on any failure so the caller can report a retryable error

================================================================================
"""

import logging
import time
from typing import Optional
from groq import Groq, APIError, APITimeoutError, RateLimitError

from texops.core.config import settings

# Configure logging (NEVER log API keys or image data)
logger = logging.getLogger(__name__)


class GroqClient:
    """
    Minimal wrapper for Groq vision chat completions.

    - Model: settings.GROQ_VISION_MODEL (multimodal)
    - Temperature: 0.1 (near-deterministic reading of the same photo)
    - JSON mode: response_format json_object
    - Timeout / retries: from settings, exponential backoff on timeout and rate limit
    """

    TEMPERATURE = 0.1
    MAX_TOKENS = 2048  # Invoices with many lines need room

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        """Initialize Groq client with API key from environment."""
        api_key = api_key if api_key is not None else settings.GROQ_API_KEY
        self.model = model or settings.GROQ_VISION_MODEL

        if not api_key:
            logger.warning(
                "⚠️ GROQ_API_KEY not found in environment. "
                "Document extraction will be DISABLED. "
                "Add your key to backend/.env file."
            )
            self.client = None
        else:
            self.client = Groq(api_key=api_key, timeout=settings.EXTRACTION_TIMEOUT_SECONDS)
            logger.info("✅ Groq client initialized successfully")

    def is_available(self) -> bool:
        """Check if Groq client is ready to use."""
        return self.client is not None

    def extract_document(
        self,
        prompt: str,
        image_b64: str,
        mime_type: str,
        max_retries: Optional[int] = None,
    ) -> Optional[str]:
        """
        Ask the vision model to read one image.

        Args:
            prompt: Extraction instructions including the expected JSON shape
            image_b64: Base64-encoded image bytes
            mime_type: e.g. "image/jpeg"
            max_retries: Retries for transient failures (timeout, rate limit)

        Returns:
            Raw JSON string from the model, or None on any error
        """
        if not self.is_available():
            logger.debug("Groq client not available - skipping extraction call")
            return None

        if max_retries is None:
            max_retries = settings.EXTRACTION_MAX_RETRIES

        for attempt in range(max_retries + 1):
            try:
                response = self.client.chat.completions.create(
                    model=self.model,
                    messages=[
                        {
                            "role": "user",
                            "content": [
                                {"type": "text", "text": prompt},
                                {
                                    "type": "image_url",
                                    "image_url": {"url": f"data:{mime_type};base64,{image_b64}"},
                                },
                            ],
                        }
                    ],
                    temperature=self.TEMPERATURE,
                    max_tokens=self.MAX_TOKENS,
                    response_format={"type": "json_object"},
                    stream=False  # No streaming - we need complete JSON
                )

                if response.choices and len(response.choices) > 0:
                    content = response.choices[0].message.content
                    logger.debug(f"Extraction response received: {len(content or '')} chars (attempt {attempt+1})")
                    return content
                else:
                    logger.warning("Vision model returned empty response")
                    return None

            except APITimeoutError:
                if attempt < max_retries:
                    wait_time = 0.5 * (2 ** attempt)  # Exponential backoff: 0.5s, 1s
                    logger.warning(f"⏱️ Groq timeout, retry {attempt+1}/{max_retries} after {wait_time}s")
                    time.sleep(wait_time)
                else:
                    logger.warning(f"⏱️ Groq API timeout after {max_retries} retries")
                    return None

            except RateLimitError:
                if attempt < max_retries:
                    wait_time = 1.0 * (2 ** attempt)  # Exponential backoff: 1s, 2s
                    logger.warning(f"⚠️ Groq rate limit, retry {attempt+1}/{max_retries} after {wait_time}s")
                    time.sleep(wait_time)
                else:
                    logger.warning("⚠️ Groq API rate limit exceeded after retries")
                    return None

            except APIError as e:
                logger.error(f"❌ Groq API error (permanent): {e}")
                return None  # Don't retry permanent errors

        return None


# Singleton instance
_groq_client: Optional[GroqClient] = None


def get_groq_client() -> GroqClient:
    """Get or create singleton Groq client instance."""
    global _groq_client
    if _groq_client is None:
        _groq_client = GroqClient()
    return _groq_client
