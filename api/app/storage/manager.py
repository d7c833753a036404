"""Adapter selection and forwarding."""
import logging
from typing import List, Optional

import requests
from pydantic import BaseModel

from app.schemas.query import Query, QueryId, Visibility
from app.schemas.user import User
from app.storage.base import StorageAdapter
from app.storage.local import JsonFileKeyValueStore, KeyValueStore, LocalAdapter
from app.storage.remote import RemoteAdapter

logger = logging.getLogger(__name__)


class StorageConfig(BaseModel):
    """Connection parameters that decide which adapter a StorageManager uses."""
    remote_url: Optional[str] = None
    remote_key: Optional[str] = None
    remote_timeout: float = 10.0
    local_store_path: Optional[str] = None

    @property
    def has_remote(self) -> bool:
        return bool(self.remote_url and self.remote_key)

    @classmethod
    def from_settings(cls, settings) -> "StorageConfig":
        return cls(
            remote_url=settings.NOTEBOOK_REMOTE_URL,
            remote_key=settings.NOTEBOOK_REMOTE_KEY,
            remote_timeout=settings.REMOTE_TIMEOUT_SECONDS,
            local_store_path=settings.LOCAL_STORE_PATH,
        )


class StorageManager:
    """
    Front door for query and user storage.

    The adapter is chosen once, in the constructor:
    1. With both remote parameters configured, build a RemoteAdapter.
    2. If that fails for any reason, log it and use a LocalAdapter.
    3. Without remote parameters, use a LocalAdapter.

    Construction never raises. Afterwards every method forwards to the chosen
    adapter unchanged, including its exceptions.
    """

    def __init__(
        self,
        config: Optional[StorageConfig] = None,
        local_store: Optional[KeyValueStore] = None,
        session: Optional[requests.Session] = None,
    ):
        self.config = config or StorageConfig()
        self._local_store = local_store
        self._session = session
        self._adapter = self._create_adapter()
        logger.info("Storage manager using %s adapter", self._adapter.name)

    def _create_adapter(self) -> StorageAdapter:
        if self.config.has_remote:
            try:
                return RemoteAdapter(
                    self.config.remote_url,
                    self.config.remote_key,
                    session=self._session,
                    timeout=self.config.remote_timeout,
                )
            except Exception as exc:
                logger.warning(
                    "Remote storage initialization failed, falling back to local storage: %s", exc
                )
        return self._create_local_adapter()

    def _create_local_adapter(self) -> LocalAdapter:
        if self._local_store is not None:
            return LocalAdapter(self._local_store)
        if self.config.local_store_path:
            return LocalAdapter(JsonFileKeyValueStore(self.config.local_store_path))
        return LocalAdapter()

    @property
    def adapter(self) -> StorageAdapter:
        return self._adapter

    @property
    def backend(self) -> str:
        """Name of the active adapter: "remote" or "local"."""
        return self._adapter.name

    def get_queries(self, user_id: str) -> List[Query]:
        return self._adapter.get_queries(user_id)

    def save_query(self, query: Query) -> None:
        return self._adapter.save_query(query)

    def update_query(self, query: Query) -> None:
        return self._adapter.update_query(query)

    def delete_query(self, query_id: QueryId, user_id: Optional[str] = None) -> None:
        return self._adapter.delete_query(query_id, user_id)

    def get_all_queries(self) -> List[Query]:
        return self._adapter.get_all_queries()

    def list_public_queries(self) -> List[Query]:
        return self._adapter.list_public_queries()

    def list_user_queries(self, user_id: str) -> List[Query]:
        return self._adapter.list_user_queries(user_id)

    def set_query_visibility(self, query_id: QueryId, visibility: Visibility, user_id: str) -> None:
        return self._adapter.set_query_visibility(query_id, visibility, user_id)

    def get_users(self) -> List[User]:
        return self._adapter.get_users()

    def delete_user(self, user_id: str) -> None:
        return self._adapter.delete_user(user_id)

    def update_user(self, user: User) -> None:
        return self._adapter.update_user(user)
