"""Create all tables. Run on app startup."""
from texops.db.base import Base
from texops.db.session import engine
from texops.models import kv_entry  # noqa: F401 - register models


def init_db(bind=None):
    Base.metadata.create_all(bind=bind or engine)
