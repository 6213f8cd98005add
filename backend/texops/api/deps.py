"""FastAPI dependencies: the entity store and the document extractor.

The store is created once at startup (see texops.main) and kept on
app.state. Tests override these dependencies.
"""
from fastapi import Request

from ai.document_extractor import DocumentExtractor
from texops.services.entity_store import EntityStore


def get_store(request: Request) -> EntityStore:
    """Shared store loaded at startup."""
    return request.app.state.store


def get_document_extractor() -> DocumentExtractor:
    return DocumentExtractor()
