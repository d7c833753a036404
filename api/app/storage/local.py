"""On-device storage adapter.

Queries live as one JSON array under a fixed key of a key-value store, the
same layout a browser keeps in localStorage. Every operation reads the whole
collection, filters or mutates it, and writes it back. Nothing here is
transactional: one writer per device is assumed.
"""
import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from pydantic import ValidationError

from app.core.time import iso_date, iso_timestamp, utc_now
from app.schemas.query import Query, QueryId, Visibility
from app.schemas.user import User
from app.storage.base import StorageAdapter, same_id, validate_visibility
from app.storage.exceptions import LocalStorageError, QueryConflictError

logger = logging.getLogger(__name__)

QUERIES_KEY = "sqlQueries"
USERS_KEY = "users"


class KeyValueStore(Protocol):
    """Synchronous string-keyed storage (get/set/remove)."""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


class MemoryKeyValueStore:
    """Process-local store. Contents vanish with the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        self._items.clear()


class JsonFileKeyValueStore:
    """
    Persistent store backed by a single JSON object on disk.

    Writes go to a temporary file in the same directory that then replaces
    the target, so a crash mid-write leaves the previous contents intact.
    """

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, json.JSONDecodeError) as exc:
            raise LocalStorageError(f"Cannot read store {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise LocalStorageError(f"Store {self.path} does not hold a JSON object")
        return data

    def _dump(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".store-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise LocalStorageError(f"Cannot write store {self.path}: {exc}") from exc

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._dump(data)


class LocalAdapter(StorageAdapter):
    """StorageAdapter over a KeyValueStore."""

    name = "local"

    def __init__(self, store: Optional[KeyValueStore] = None):
        self.store = store if store is not None else MemoryKeyValueStore()

    # ------------------------------------------------------------------
    # collection round-trips
    # ------------------------------------------------------------------

    def _read_collection(self, key: str) -> List[dict]:
        raw = self.store.get_item(key)
        if not raw:
            return []
        try:
            items = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise LocalStorageError(f"Stored '{key}' is not valid JSON") from exc
        if not isinstance(items, list):
            raise LocalStorageError(f"Stored '{key}' is not a JSON array")
        return items

    def _write_collection(self, key: str, items: List[dict]) -> None:
        self.store.set_item(key, json.dumps(items))

    def _read_queries(self) -> List[Query]:
        try:
            return [Query.model_validate(item) for item in self._read_collection(QUERIES_KEY)]
        except ValidationError as exc:
            raise LocalStorageError(f"Stored '{QUERIES_KEY}' holds a malformed query") from exc

    def _write_queries(self, queries: List[Query]) -> None:
        self._write_collection(QUERIES_KEY, [q.to_json() for q in queries])

    @staticmethod
    def _stamp_new(query: Query, queries: List[Query]) -> Query:
        """Give an unsaved query a millisecond id and its creation timestamps."""
        new_id = time.time_ns() // 1_000_000
        while any(same_id(q.id, new_id) for q in queries):
            new_id += 1
        now = utc_now()
        return query.model_copy(update={
            "id": new_id,
            "date": query.date or iso_date(now),
            "timestamp": query.timestamp or iso_timestamp(now),
        })

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------

    def get_queries(self, user_id: str) -> List[Query]:
        return [q for q in self._read_queries() if q.user_id == user_id]

    def save_query(self, query: Query) -> None:
        queries = self._read_queries()
        if query.id is None:
            query = self._stamp_new(query, queries)
        if any(same_id(q.id, query.id) for q in queries):
            raise QueryConflictError(f"Query {query.id!r} already exists")
        # Most recent first
        queries.insert(0, query)
        self._write_queries(queries)

    def update_query(self, query: Query) -> None:
        queries = self._read_queries()
        for index, existing in enumerate(queries):
            if same_id(existing.id, query.id) and existing.user_id == query.user_id:
                queries[index] = query
                self._write_queries(queries)
                return
        logger.debug("update_query: no query %r owned by %r", query.id, query.user_id)

    def delete_query(self, query_id: QueryId, user_id: Optional[str] = None) -> None:
        queries = self._read_queries()
        if user_id is not None:
            kept = [q for q in queries if not (same_id(q.id, query_id) and q.user_id == user_id)]
        else:
            kept = [q for q in queries if not same_id(q.id, query_id)]
        self._write_queries(kept)

    def get_all_queries(self) -> List[Query]:
        return self._read_queries()

    def list_public_queries(self) -> List[Query]:
        return [q for q in self._read_queries() if q.visibility == Visibility.PUBLIC]

    def list_user_queries(self, user_id: str) -> List[Query]:
        return [q for q in self._read_queries() if q.user_id == user_id]

    def set_query_visibility(self, query_id: QueryId, visibility: Visibility, user_id: str) -> None:
        visibility = validate_visibility(visibility)
        queries = self._read_queries()
        for existing in queries:
            if same_id(existing.id, query_id) and existing.user_id == user_id:
                if existing.visibility != visibility:
                    existing.visibility = visibility
                    self._write_queries(queries)
                return
        logger.debug("set_query_visibility: no query %r owned by %r", query_id, user_id)

    # ------------------------------------------------------------------
    # users
    # ------------------------------------------------------------------

    def get_users(self) -> List[User]:
        try:
            return [User.model_validate(item) for item in self._read_collection(USERS_KEY)]
        except ValidationError as exc:
            raise LocalStorageError(f"Stored '{USERS_KEY}' holds a malformed user") from exc

    def delete_user(self, user_id: str) -> None:
        users = [u for u in self.get_users() if u.id != user_id]
        self._write_collection(USERS_KEY, [u.to_json() for u in users])

    def update_user(self, user: User) -> None:
        users = self.get_users()
        for index, existing in enumerate(users):
            if existing.id == user.id:
                users[index] = user
                self._write_collection(USERS_KEY, [u.to_json() for u in users])
                return
