"""Engine and session factory for the kv_store table.

Every storage call opens a short session for one read or one write of a
few JSON rows, so connections are not pooled.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from texops.core.config import settings

# SQLite connections are opened in uvicorn's worker threads
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args, poolclass=NullPool)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
