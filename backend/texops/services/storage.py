"""Key-value storage for the persisted collections.

The store only needs get/set of opaque JSON strings by key. `set_many`
writes every entry or none, which is what lets one logical operation
(ledger entry + stock merge) land atomically.
"""
import logging
from typing import Callable, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from texops.core.exceptions import StorageError
from texops.models.kv_entry import KeyValueEntry

logger = logging.getLogger(__name__)


class KeyValueStorage:
    """Durable storage contract: JSON blobs keyed by collection name."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        self.set_many({key: value})

    def set_many(self, entries: Dict[str, str]) -> None:
        raise NotImplementedError


class InMemoryStorage(KeyValueStorage):
    """Dict-backed storage. Lives as long as the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set_many(self, entries: Dict[str, str]) -> None:
        self.data.update(entries)


class SqlAlchemyStorage(KeyValueStorage):
    """One `kv_store` row per key, written in a single transaction."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get(self, key: str) -> Optional[str]:
        db = self.session_factory()
        try:
            entry = db.get(KeyValueEntry, key)
            return entry.value if entry else None
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to read '{key}'") from e
        finally:
            db.close()

    def set_many(self, entries: Dict[str, str]) -> None:
        db = self.session_factory()
        try:
            for key, value in entries.items():
                entry = db.get(KeyValueEntry, key)
                if entry:
                    entry.value = value
                else:
                    db.add(KeyValueEntry(key=key, value=value))
            db.commit()
            logger.debug(f"[STORAGE] Wrote keys: {', '.join(entries)}")
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"[STORAGE] Write failed for keys {list(entries)}: {e}")
            raise StorageError(f"Failed to write {', '.join(entries)}") from e
        finally:
            db.close()
