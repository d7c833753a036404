"""HTTP client for the notebook API.

Used where a caller wants the network-facing endpoints (and their explicit
403/404/422 answers) instead of talking to a storage adapter directly.
"""
import logging
from typing import List, Optional

import requests

from app.schemas.query import Query, QueryId, Visibility
from app.storage.exceptions import RemoteStorageError

logger = logging.getLogger(__name__)


class NotebookClient:
    """Thin requests wrapper around the notebook HTTP API."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    def _send(self, method: str, path: str, **kwargs) -> requests.Response:
        try:
            response = self.session.request(
                method, f"{self.base_url}{path}", timeout=self.timeout, **kwargs
            )
        except requests.RequestException as exc:
            raise RemoteStorageError(f"{method} {path} failed: {exc}") from exc
        if not response.ok:
            try:
                detail = response.json().get("detail")
            except (ValueError, AttributeError):
                detail = None
            raise RemoteStorageError(
                str(detail or "API request failed"), status_code=response.status_code
            )
        return response

    def set_visibility(self, query_id: QueryId, visibility: Visibility) -> Visibility:
        """PATCH /queries/{id}/visibility. Returns the visibility the server reports."""
        response = self._send(
            "PATCH",
            f"/queries/{query_id}/visibility",
            json={"visibility": Visibility(visibility).value},
        )
        return Visibility(response.json()["visibility"])

    def list_public_queries(self) -> List[Query]:
        response = self._send("GET", "/queries/public")
        return [Query.model_validate(item) for item in response.json()]
