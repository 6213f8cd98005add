"""Shared pytest fixtures: in-memory and SQLite stores, entity builders, API client."""
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from texops.core.exceptions import ExtractionError, StorageError
from texops.db.init_db import init_db
from texops.schemas.capture import AnalysisResult
from texops.schemas.entities import InventoryItem, Order, OrderRequirement, OrderStatus
from texops.services.entity_store import EntityStore
from texops.services.storage import InMemoryStorage


class RecordingStorage(InMemoryStorage):
    """In-memory storage that records every write and can be told to fail."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        super().__init__(initial)
        self.writes: List[Dict[str, str]] = []
        self.fail = False

    def set_many(self, entries: Dict[str, str]) -> None:
        if self.fail:
            raise StorageError("quota exceeded")
        self.writes.append(dict(entries))
        super().set_many(entries)


class FakeExtractor:
    """Stands in for DocumentExtractor in route tests."""

    def __init__(self):
        self.result: Optional[AnalysisResult] = None
        self.error: Optional[Exception] = None
        self.calls = []

    def analyze_image(self, image_bytes: bytes, mime_type: str) -> AnalysisResult:
        self.calls.append((image_bytes, mime_type))
        if self.error:
            raise self.error
        if self.result is None:
            raise ExtractionError("no result configured")
        return self.result


@pytest.fixture
def storage() -> RecordingStorage:
    return RecordingStorage()


@pytest.fixture
def store(storage) -> EntityStore:
    return EntityStore(storage).load()


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def make_item():
    counter = {"n": 0}

    def _make(name: str, quantity: int, item_id: Optional[str] = None, **fields) -> InventoryItem:
        counter["n"] += 1
        return InventoryItem(
            id=item_id or f"item-{counter['n']}",
            name=name,
            quantity=quantity,
            color=fields.get("color", ""),
            color_code=fields.get("color_code", ""),
            last_updated=fields.get("last_updated", "2024-01-01"),
        )

    return _make


@pytest.fixture
def make_order():
    def _make(order_id: str, *lines, status: OrderStatus = OrderStatus.PENDING) -> Order:
        """lines: (item_id, amount) or (item_id, name, amount)"""
        requirements = []
        for line in lines:
            if len(line) == 2:
                item_id, amount = line
                name = item_id
            else:
                item_id, name, amount = line
            requirements.append(OrderRequirement(
                inventory_item_id=item_id,
                inventory_item_name=name,
                amount_needed=amount,
            ))
        return Order(
            id=order_id,
            customer_name="Sharma Garments",
            created_at="2024-01-01T00:00:00+00:00",
            status=status,
            requirements=requirements,
        )

    return _make


@pytest.fixture
def fake_extractor() -> FakeExtractor:
    return FakeExtractor()


@pytest.fixture
def client(store, fake_extractor):
    from texops.api.deps import get_document_extractor, get_store
    from texops.main import app

    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_document_extractor] = lambda: fake_extractor
    yield TestClient(app)
    app.dependency_overrides.clear()
