"""AI Module for Groq vision extraction.

Reads photographed invoices, shelves and sketches into structured data.
It does NOT change stock or the ledger; the reconciliation services do.

If extraction fails, the caller reports a retryable error and nothing is saved.
"""

from .document_extractor import DocumentExtractor, parse_analysis

__all__ = ["DocumentExtractor", "parse_analysis"]
