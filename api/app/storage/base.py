"""Storage adapter capability contract."""
import abc
from typing import List, Optional

from app.schemas.query import Query, QueryId, Visibility
from app.schemas.user import User
from app.storage.exceptions import InvalidVisibilityError


def validate_visibility(visibility) -> Visibility:
    """Reject anything other than public/private before a write happens."""
    try:
        return Visibility(visibility)
    except ValueError:
        raise InvalidVisibilityError(f"Invalid visibility value: {visibility!r}") from None


class StorageAdapter(abc.ABC):
    """
    Backend-specific implementation of query and user storage.

    Ownership rules every implementation follows:
    - update_query and set_query_visibility match on id AND owner; when nothing
      matches they do nothing and do not raise.
    - delete_query scopes by owner when user_id is given; without it the
      delete is by id alone and is meant for admin callers only.
    - get_all_queries and the user operations are unscoped. Callers gate them.
    """

    #: short name reported by StorageManager.backend
    name: str = "abstract"

    @abc.abstractmethod
    def get_queries(self, user_id: str) -> List[Query]:
        """Queries owned by user_id."""

    @abc.abstractmethod
    def save_query(self, query: Query) -> None:
        """Insert a new query. Never overwrites an existing id."""

    @abc.abstractmethod
    def update_query(self, query: Query) -> None:
        """Replace the query matching query.id and query.user_id."""

    @abc.abstractmethod
    def delete_query(self, query_id: QueryId, user_id: Optional[str] = None) -> None:
        """Delete by id and owner, or by id alone when user_id is None."""

    @abc.abstractmethod
    def get_all_queries(self) -> List[Query]:
        """Every stored query regardless of owner."""

    @abc.abstractmethod
    def list_public_queries(self) -> List[Query]:
        """Public queries across all owners."""

    @abc.abstractmethod
    def list_user_queries(self, user_id: str) -> List[Query]:
        """All queries of one owner, public and private."""

    @abc.abstractmethod
    def set_query_visibility(self, query_id: QueryId, visibility: Visibility, user_id: str) -> None:
        """Change visibility when user_id owns the query; silent no-op otherwise."""

    @abc.abstractmethod
    def get_users(self) -> List[User]:
        ...

    @abc.abstractmethod
    def delete_user(self, user_id: str) -> None:
        ...

    @abc.abstractmethod
    def update_user(self, user: User) -> None:
        ...


def same_id(left: QueryId | None, right: QueryId | None) -> bool:
    """Ids compare by value across int/str forms (1 == "1")."""
    if left is None or right is None:
        return False
    return str(left) == str(right)
