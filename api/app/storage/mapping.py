"""Field mapping between storage records and the logical query/user models.

Relational backends store one row per query with snake_case columns and
cannot hold nested values, so `versions` and `tags` travel as JSON text.
Both directions are pure functions; `query_from_record(query_to_record(q))`
returns a query equal to `q`.
"""
import json
from typing import Any, Mapping

from app.schemas.query import Query, QueryVersion, Visibility
from app.schemas.user import User

QUERY_PLAIN_FIELDS = ("id", "name", "sql", "description", "result", "date", "timestamp")

USER_COLUMNS = ("id", "email", "name", "is_admin", "created_at", "last_login")


def encode_list(values) -> str:
    return json.dumps(list(values or []))


def decode_list(raw: Any) -> list:
    """Decode a JSON-text array column. Null and empty text decode to []."""
    if raw is None or raw == "":
        return []
    if isinstance(raw, list):
        return raw
    decoded = json.loads(raw)
    if decoded is None:
        return []
    if not isinstance(decoded, list):
        raise ValueError(f"Expected a JSON array, got {type(decoded).__name__}")
    return decoded


def query_to_record(query: Query) -> dict:
    """Logical query -> storage row. `id` is omitted when the backend assigns it."""
    record = {field: getattr(query, field) for field in QUERY_PLAIN_FIELDS}
    if record["id"] is None:
        del record["id"]
    record.update({
        "result_image": query.result_image,
        "last_edited": query.last_edited,
        "versions": encode_list(
            v.model_dump(mode="json", by_alias=True) for v in query.versions
        ),
        "current_version": query.current_version,
        "tags": encode_list(query.tags),
        "is_favorite": query.is_favorite,
        "user_id": query.user_id,
        "visibility": Visibility.resolve(query.visibility).value,
    })
    return record


def query_from_record(record: Mapping[str, Any]) -> Query:
    """Storage row -> logical query. A null visibility reads as private."""
    return Query(
        id=record.get("id"),
        name=record.get("name") or "",
        sql=record.get("sql") or "",
        description=record.get("description") or "",
        result=record.get("result") or "",
        result_image=record.get("result_image"),
        date=record.get("date") or "",
        timestamp=record.get("timestamp") or "",
        last_edited=record.get("last_edited"),
        versions=[QueryVersion.model_validate(v) for v in decode_list(record.get("versions"))],
        current_version=record.get("current_version") or 1,
        tags=decode_list(record.get("tags")),
        is_favorite=bool(record.get("is_favorite")),
        user_id=record["user_id"],
        visibility=Visibility.resolve(record.get("visibility")),
    )


def user_to_record(user: User) -> dict:
    """Columns an admin may change on a user row."""
    return {
        "name": user.name,
        "email": user.email,
        "is_admin": user.is_admin,
    }


def user_from_record(record: Mapping[str, Any]) -> User:
    return User(
        id=str(record["id"]),
        email=record["email"],
        name=record.get("name"),
        is_admin=bool(record.get("is_admin")),
        created_at=record["created_at"],
        last_login=record.get("last_login"),
    )


def row_to_record(row) -> dict:
    """Column dict for an ORM instance, ready for the *_from_record helpers."""
    return {column.name: getattr(row, column.name) for column in row.__table__.columns}
