"""Storage backends for engine state.

The engine keeps every record in a namespaced key/value store. Values are
JSON-compatible (dicts, lists, ints, strings, bools, None). Two backends are
provided:

- InMemoryStorage: nested dicts, for tests and embedded use
- SQLiteStorage: a single KeyValue table holding JSON documents

Both support ``transaction()``: all writes inside the block become visible
together, or none do if the block raises.

Example:
    >>> from racebook.core.storage import create_storage
    >>> store = create_storage('memory')
    >>> with store.transaction():
    ...     store.set('balances', 'alice', 1000)
    >>> store.get('balances', 'alice')
    1000
"""

import copy
import json
import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional, Tuple

from racebook.core.config import DB_PATH

# Namespaces
BALANCES = 'balances'
RACES = 'races'
RACERS = 'racers'
BETS = 'bets'
USER_BETS = 'user_bets'
RACE_RESULTS = 'race_results'
META = 'meta'


def racer_key(race_id: int, index: int) -> str:
    return f"{race_id}:{index}"


def user_bets_key(account: str, race_id: int) -> str:
    return f"{account}:{race_id}"


class Storage(ABC):
    """Namespaced key/value store with all-or-nothing transactions."""

    @abstractmethod
    def get(self, namespace: str, key: Any, default: Any = None) -> Any:
        raise NotImplementedError

    @abstractmethod
    def set(self, namespace: str, key: Any, value: Any) -> None:
        raise NotImplementedError

    @abstractmethod
    def items(self, namespace: str) -> List[Tuple[str, Any]]:
        """All (key, value) pairs of a namespace in insertion order."""
        raise NotImplementedError

    @abstractmethod
    def transaction(self):
        raise NotImplementedError

    def next_id(self, counter: str) -> int:
        """Increment and return a named counter, starting from 1."""
        value = int(self.get(META, counter, 0)) + 1
        self.set(META, counter, value)
        return value


class InMemoryStorage(Storage):
    def __init__(self) -> None:
        self._data: Dict[str, Dict[str, Any]] = {}
        self._depth = 0

    def get(self, namespace, key, default=None):
        value = self._data.get(namespace, {}).get(str(key))
        if value is None:
            return default
        return copy.deepcopy(value)

    def set(self, namespace, key, value):
        self._data.setdefault(namespace, {})[str(key)] = copy.deepcopy(value)

    def items(self, namespace):
        return [(k, copy.deepcopy(v)) for k, v in self._data.get(namespace, {}).items()]

    @contextmanager
    def transaction(self) -> Iterator["InMemoryStorage"]:
        if self._depth:
            # Nested blocks join the outer transaction
            self._depth += 1
            try:
                yield self
            finally:
                self._depth -= 1
            return

        snapshot = copy.deepcopy(self._data)
        self._depth = 1
        try:
            yield self
        except BaseException:
            self._data = snapshot
            raise
        finally:
            self._depth = 0


class SQLiteStorage(Storage):
    """SQLite-backed store. One row per (namespace, key), value as JSON."""

    def __init__(self, db_path: str = DB_PATH) -> None:
        self.db_path = db_path
        self.conn: Optional[sqlite3.Connection] = None
        self._depth = 0
        self.create_tables()

    def get_connection(self) -> sqlite3.Connection:
        """Get or create database connection"""
        if not self.conn:
            # Access is serialized by the engine lock
            self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self.conn.row_factory = sqlite3.Row
        return self.conn

    def create_tables(self) -> None:
        conn = self.get_connection()
        cursor = conn.cursor()

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS KeyValue (
                Namespace TEXT NOT NULL,
                Key TEXT NOT NULL,
                Value TEXT NOT NULL,
                UpdatedAt TIMESTAMP,
                PRIMARY KEY (Namespace, Key)
            )
        ''')

        conn.commit()

    def get(self, namespace, key, default=None):
        cursor = self.get_connection().cursor()
        cursor.execute(
            "SELECT Value FROM KeyValue WHERE Namespace = ? AND Key = ?",
            (namespace, str(key)),
        )
        row = cursor.fetchone()
        if row is None:
            return default
        value = json.loads(row['Value'])
        return default if value is None else value

    def set(self, namespace, key, value):
        conn = self.get_connection()
        conn.execute('''
            INSERT INTO KeyValue (Namespace, Key, Value, UpdatedAt)
            VALUES (?, ?, ?, ?)
            ON CONFLICT (Namespace, Key) DO UPDATE SET
                Value = excluded.Value,
                UpdatedAt = excluded.UpdatedAt
        ''', (namespace, str(key), json.dumps(value), datetime.now().strftime('%Y-%m-%d %H:%M:%S')))
        if not self._depth:
            conn.commit()

    def items(self, namespace):
        cursor = self.get_connection().cursor()
        cursor.execute(
            "SELECT Key, Value FROM KeyValue WHERE Namespace = ? ORDER BY rowid",
            (namespace,),
        )
        return [(row['Key'], json.loads(row['Value'])) for row in cursor.fetchall()]

    @contextmanager
    def transaction(self) -> Iterator["SQLiteStorage"]:
        conn = self.get_connection()
        self._depth += 1
        try:
            yield self
        except BaseException:
            self._depth -= 1
            if not self._depth:
                conn.rollback()
            raise
        else:
            self._depth -= 1
            if not self._depth:
                conn.commit()

    def close(self) -> None:
        if self.conn:
            self.conn.close()
            self.conn = None


def create_storage(backend: str, db_path: str = DB_PATH) -> Storage:
    backend = backend.lower().strip()
    if backend == "memory":
        return InMemoryStorage()
    if backend == "sqlite":
        return SQLiteStorage(db_path=db_path)
    raise ValueError(f"Unknown storage backend: {backend}")
