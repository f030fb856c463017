# prodlog/kv_store.py
"""
Key-value storage slots

A storage slot is one named string value. The production data collection
and each master data list live in their own slot. Backends raise their own
errors (OSError, SQLAlchemyError); callers decide how to degrade.

Backends:
- InMemoryKeyValueStore: dict-backed, for tests and scratch sessions
- JsonFileKeyValueStore: one <key>.json file per slot
- SqlKeyValueStore: one row per slot in the kv_slots table
"""

import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Union

from sqlalchemy import (
    Column, DateTime, MetaData, String, Table, Text, delete, insert, select, update
)
from sqlalchemy.engine import Engine

from .config import APP_CONFIG

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Interface for named string slots"""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the slot value, or None when the slot does not exist"""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Overwrite the slot value"""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Drop the slot. Removing a missing slot is a no-op"""


# ==================== In-memory ====================

class InMemoryKeyValueStore(KeyValueStore):
    """Slots held in a plain dict"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._slots: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._slots.get(key)

    def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"Slot values must be str, got {type(value).__name__}")
        self._slots[key] = value

    def remove(self, key: str) -> None:
        self._slots.pop(key, None)


# ==================== JSON files ====================

class JsonFileKeyValueStore(KeyValueStore):
    """
    One file per slot under a directory

    Writes go to a temporary file in the same directory and are moved into
    place with os.replace, so a reader never sees a half-written slot.
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise ValueError(f"Invalid slot key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        self.directory.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(dir=str(self.directory), prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def remove(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()


# ==================== SQL table ====================

class SqlKeyValueStore(KeyValueStore):
    """
    Slots stored as rows of a SQL table through SQLAlchemy

    The table is created on first use. A write is an UPDATE followed by an
    INSERT when no row matched, both inside one transaction.
    """

    def __init__(self, engine: Optional[Engine] = None, table_name: str = "kv_slots"):
        if engine is None:
            from .db import get_db_engine
            engine = get_db_engine()

        self.engine = engine
        self.metadata = MetaData()
        self.table = Table(
            table_name,
            self.metadata,
            Column("slot_key", String(191), primary_key=True),
            Column("slot_value", Text, nullable=False),
            Column("updated_at", DateTime, nullable=False),
        )
        self._ready = False
        self._lock = threading.Lock()

    def _ensure_table(self):
        if self._ready:
            return
        with self._lock:
            if not self._ready:
                self.metadata.create_all(self.engine, checkfirst=True)
                self._ready = True
                logger.info(f"✅ Storage table ready: {self.table.name}")

    def get(self, key: str) -> Optional[str]:
        self._ensure_table()
        query = select(self.table.c.slot_value).where(self.table.c.slot_key == key)
        with self.engine.connect() as conn:
            row = conn.execute(query).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        self._ensure_table()
        now = datetime.now()
        with self.engine.begin() as conn:
            result = conn.execute(
                update(self.table)
                .where(self.table.c.slot_key == key)
                .values(slot_value=value, updated_at=now)
            )
            if result.rowcount == 0:
                conn.execute(
                    insert(self.table).values(slot_key=key, slot_value=value, updated_at=now)
                )

    def remove(self, key: str) -> None:
        self._ensure_table()
        with self.engine.begin() as conn:
            conn.execute(delete(self.table).where(self.table.c.slot_key == key))


# ==================== Factory ====================

def create_store(backend: Optional[str] = None) -> KeyValueStore:
    """
    Build the configured key-value store

    Args:
        backend: 'sql', 'file' or 'memory'. Defaults to APP_CONFIG['STORAGE_BACKEND']

    Raises:
        ValueError: If the backend name is unknown
    """
    backend = (backend or APP_CONFIG["STORAGE_BACKEND"]).lower()

    if backend == "sql":
        return SqlKeyValueStore()
    if backend == "file":
        return JsonFileKeyValueStore(APP_CONFIG["DATA_DIR"])
    if backend == "memory":
        logger.warning("⚠️ Using in-memory storage - data is lost when the session ends")
        return InMemoryKeyValueStore()

    raise ValueError(f"Unknown storage backend: {backend}")
