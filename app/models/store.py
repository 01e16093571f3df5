from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Dict, Optional, Protocol

from sqlalchemy.orm import sessionmaker

from app.config import Settings
from app.db import Base, make_session_factory
from app.models.db_models import KVEntry

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def put(self, key: str, value: str) -> None:
        ...


class InMemoryKeyValueStore:
    """Very small in-memory store to keep the API usable without a DB."""

    def __init__(self) -> None:
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def put(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value


class SqlKeyValueStore:
    """One row of ``kv_entries`` per key."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self.session_factory = session_factory

    def create_tables(self) -> None:
        # Deployments run `alembic upgrade head` instead.
        Base.metadata.create_all(bind=self.session_factory.kw["bind"])

    def get(self, key: str) -> Optional[str]:
        with self.session_factory() as db:
            entry = db.get(KVEntry, key)
            return entry.value if entry else None

    def put(self, key: str, value: str) -> None:
        with self.session_factory() as db:
            entry = db.get(KVEntry, key)
            if entry:
                entry.value = value
                entry.updated_at = datetime.utcnow()
            else:
                db.add(KVEntry(key=key, value=value, updated_at=datetime.utcnow()))
            db.commit()


def build_kv_store(settings: Settings) -> KeyValueStore:
    if settings.database_url:
        return SqlKeyValueStore(make_session_factory(settings.database_url))
    logger.warning("DATABASE_URL is not set; pinned repositories are kept in memory only")
    return InMemoryKeyValueStore()
