from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func
from texops.db.base import Base


class KeyValueEntry(Base):
    """
    One persisted collection.

    The store keeps each collection (inventory, invoices, orders) as a
    single JSON document under its own key, so a write to one collection
    never touches the others.
    """
    __tablename__ = "kv_store"

    key = Column(String(128), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
