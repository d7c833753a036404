"""Hosted relational storage adapter.

Talks to a PostgREST-style REST API (for example a Supabase project's
`/rest/v1`). Each adapter operation is exactly one HTTP request; a transport
error or any non-2xx response raises RemoteStorageError and nothing is
retried. Row filters use PostgREST operators, e.g. ``?id=eq.7&user_id=eq.u1``.
"""
import logging
from typing import Any, List, Optional
from urllib.parse import urlparse

import requests

from app.schemas.query import Query, QueryId, Visibility
from app.schemas.user import User
from app.storage.base import StorageAdapter, validate_visibility
from app.storage.exceptions import RemoteStorageError, StorageConfigError
from app.storage.mapping import (
    USER_COLUMNS,
    query_from_record,
    query_to_record,
    user_from_record,
    user_to_record,
)

logger = logging.getLogger(__name__)

QUERIES_TABLE = "queries"
USERS_TABLE = "users"
NEWEST_FIRST = "created_at.desc"


def _eq(value: Any) -> str:
    return f"eq.{value}"


class RemoteAdapter(StorageAdapter):
    """StorageAdapter over a hosted REST API."""

    name = "remote"

    def __init__(
        self,
        url: str,
        key: str,
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
        access_token: Optional[str] = None,
    ):
        if not key or not key.strip():
            raise StorageConfigError("Remote storage key is empty")
        parsed = urlparse(url or "")
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise StorageConfigError(f"Remote storage URL is not an http(s) URL: {url!r}")

        self.base_url = url.rstrip("/") + "/rest/v1"
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({
            "apikey": key,
            "Authorization": f"Bearer {access_token or key}",
            "Content-Type": "application/json",
        })

    # ------------------------------------------------------------------
    # transport
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        table: str,
        params: Optional[dict] = None,
        payload: Any = None,
        prefer: Optional[str] = None,
    ) -> Any:
        url = f"{self.base_url}/{table}"
        headers = {"Prefer": prefer} if prefer else None
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, table, exc)
            raise RemoteStorageError(f"{method} {table} failed: {exc}") from exc

        if not response.ok:
            message = self._error_message(response)
            logger.warning("%s %s returned %s: %s", method, table, response.status_code, message)
            raise RemoteStorageError(message, status_code=response.status_code)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteStorageError(
                f"{method} {table} returned a non-JSON body", status_code=response.status_code
            ) from exc

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason or "Remote storage request failed"
        if isinstance(body, dict):
            return body.get("message") or body.get("error") or "Remote storage request failed"
        return str(body)

    def _select_queries(self, **filters) -> List[Query]:
        params = {"select": "*", "order": NEWEST_FIRST}
        params.update({column: _eq(value) for column, value in filters.items()})
        rows = self._request("GET", QUERIES_TABLE, params=params) or []
        try:
            return [query_from_record(row) for row in rows]
        except (KeyError, ValueError) as exc:
            raise RemoteStorageError(f"Malformed query row from backend: {exc}") from exc

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------

    def get_queries(self, user_id: str) -> List[Query]:
        return self._select_queries(user_id=user_id)

    def save_query(self, query: Query) -> None:
        # Duplicate ids come back as 409 from the backend
        self._request("POST", QUERIES_TABLE, payload=query_to_record(query), prefer="return=minimal")

    def update_query(self, query: Query) -> None:
        record = query_to_record(query)
        record.pop("id", None)
        self._request(
            "PATCH",
            QUERIES_TABLE,
            params={"id": _eq(query.id), "user_id": _eq(query.user_id)},
            payload=record,
            prefer="return=minimal",
        )

    def delete_query(self, query_id: QueryId, user_id: Optional[str] = None) -> None:
        params = {"id": _eq(query_id)}
        if user_id is not None:
            params["user_id"] = _eq(user_id)
        self._request("DELETE", QUERIES_TABLE, params=params, prefer="return=minimal")

    def get_all_queries(self) -> List[Query]:
        return self._select_queries()

    def list_public_queries(self) -> List[Query]:
        return self._select_queries(visibility=Visibility.PUBLIC.value)

    def list_user_queries(self, user_id: str) -> List[Query]:
        return self._select_queries(user_id=user_id)

    def set_query_visibility(self, query_id: QueryId, visibility: Visibility, user_id: str) -> None:
        visibility = validate_visibility(visibility)
        # An owner mismatch matches zero rows; the backend answers 204 either way
        self._request(
            "PATCH",
            QUERIES_TABLE,
            params={"id": _eq(query_id), "user_id": _eq(user_id)},
            payload={"visibility": visibility.value},
            prefer="return=minimal",
        )

    # ------------------------------------------------------------------
    # users
    # ------------------------------------------------------------------

    def get_users(self) -> List[User]:
        rows = self._request(
            "GET",
            USERS_TABLE,
            params={"select": ",".join(USER_COLUMNS), "order": NEWEST_FIRST},
        ) or []
        try:
            return [user_from_record(row) for row in rows]
        except (KeyError, ValueError) as exc:
            raise RemoteStorageError(f"Malformed user row from backend: {exc}") from exc

    def delete_user(self, user_id: str) -> None:
        self._request("DELETE", USERS_TABLE, params={"id": _eq(user_id)}, prefer="return=minimal")

    def update_user(self, user: User) -> None:
        self._request(
            "PATCH",
            USERS_TABLE,
            params={"id": _eq(user.id)},
            payload=user_to_record(user),
            prefer="return=minimal",
        )
