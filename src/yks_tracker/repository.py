"""Keyed record collections with swappable backing storage."""
import json
from abc import ABC, abstractmethod
from contextlib import closing
from functools import partial
from typing import Callable

from yks_tracker.db import get_connection, init_db


class Repository(ABC):
    """A collection of records keyed by their ``id`` attribute."""

    @abstractmethod
    def get(self, record_id: str):
        """Return the record or None."""

    @abstractmethod
    def values(self) -> list:
        """Return every record, in no particular order."""

    @abstractmethod
    def put(self, record) -> None:
        """Insert or replace a record."""

    @abstractmethod
    def remove(self, record_id: str) -> bool:
        """Delete a record; return whether it existed."""

    @abstractmethod
    def clear(self) -> None:
        """Delete every record."""

    def __contains__(self, record_id: str) -> bool:
        return self.get(record_id) is not None

    def __len__(self) -> int:
        return len(self.values())


class MemoryRepository(Repository):
    """Process-memory backing; contents are lost on restart."""

    def __init__(self):
        self._items = {}

    def get(self, record_id):
        return self._items.get(record_id)

    def values(self):
        return list(self._items.values())

    def put(self, record):
        self._items[record.id] = record

    def remove(self, record_id):
        return self._items.pop(record_id, None) is not None

    def clear(self):
        self._items.clear()

    def __contains__(self, record_id):
        return record_id in self._items

    def __len__(self):
        return len(self._items)


class SqliteRepository(Repository):
    """Stores records as JSON payloads in the shared ``records`` table."""

    def __init__(self, db_path: str, collection: str, model):
        self.db_path = db_path
        self.collection = collection
        self.model = model

    def _load(self, row):
        return self.model.from_dict(json.loads(row["payload"]))

    def get(self, record_id):
        with closing(get_connection(self.db_path)) as conn:
            row = conn.execute(
                "SELECT payload FROM records WHERE collection = ? AND id = ?",
                (self.collection, record_id),
            ).fetchone()
        return self._load(row) if row else None

    def values(self):
        with closing(get_connection(self.db_path)) as conn:
            rows = conn.execute(
                "SELECT payload FROM records WHERE collection = ?", (self.collection,)
            ).fetchall()
        return [self._load(r) for r in rows]

    def put(self, record):
        data = record.to_dict()
        with closing(get_connection(self.db_path)) as conn:
            conn.execute(
                """INSERT INTO records (collection, id, payload, created_at) VALUES (?, ?, ?, ?)
                ON CONFLICT(collection, id) DO UPDATE SET payload = excluded.payload""",
                (self.collection, record.id, json.dumps(data, ensure_ascii=False),
                 data.get("created_at")),
            )
            conn.commit()

    def remove(self, record_id):
        with closing(get_connection(self.db_path)) as conn:
            cursor = conn.execute(
                "DELETE FROM records WHERE collection = ? AND id = ?", (self.collection, record_id)
            )
            conn.commit()
        return cursor.rowcount > 0

    def clear(self):
        with closing(get_connection(self.db_path)) as conn:
            conn.execute("DELETE FROM records WHERE collection = ?", (self.collection,))
            conn.commit()

    def __len__(self):
        with closing(get_connection(self.db_path)) as conn:
            count = conn.execute(
                "SELECT COUNT(*) FROM records WHERE collection = ?", (self.collection,)
            ).fetchone()[0]
        return count


RepositoryFactory = Callable[[str, type], Repository]


def memory_factory(collection: str, model) -> Repository:
    return MemoryRepository()


def _sqlite_repository(db_path: str, collection: str, model) -> Repository:
    return SqliteRepository(db_path, collection, model)


def sqlite_factory(db_path: str, initialize: bool = True) -> RepositoryFactory:
    """Factory producing SQLite repositories that share one database file."""
    if initialize:
        init_db(db_path)
    return partial(_sqlite_repository, db_path)
