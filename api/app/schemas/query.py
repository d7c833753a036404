"""Query record schemas.

These are the logical shapes of a saved query. Attribute names are
snake_case; the camelCase aliases are what appears in JSON, both on the HTTP
API and in the local key-value store.
"""
import enum
from typing import List, Optional, Union
from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel


class Visibility(str, enum.Enum):
    """Publication state of a query."""
    PUBLIC = "public"
    PRIVATE = "private"

    @classmethod
    def resolve(cls, value) -> "Visibility":
        """Coerce a stored value; null or missing means private."""
        if value is None or value == "":
            return cls.PRIVATE
        return cls(value)

    def opposite(self) -> "Visibility":
        return Visibility.PRIVATE if self is Visibility.PUBLIC else Visibility.PUBLIC


QueryId = Union[int, str]

_record_config = {
    "alias_generator": to_camel,
    "populate_by_name": True,
    "from_attributes": True,
}


def _dedupe_tags(value):
    if value is None:
        return []
    seen = []
    for tag in value:
        if tag not in seen:
            seen.append(tag)
    return seen


class QueryVersion(BaseModel):
    """Historical snapshot of a query, owned by its parent."""
    version: int = Field(..., ge=1)
    name: str = ""
    sql: str
    description: str = ""
    result: str = ""
    result_image: Optional[str] = None
    edited_at: str
    edited_by: Optional[str] = None
    tags: Optional[List[str]] = None
    is_favorite: Optional[bool] = None

    model_config = _record_config


class Query(BaseModel):
    """A saved query as seen by storage adapters and API callers."""
    id: Optional[QueryId] = None
    name: str = ""
    sql: str
    description: str = ""
    result: str = ""
    result_image: Optional[str] = None
    date: str = ""
    timestamp: str = ""
    last_edited: Optional[str] = None
    versions: List[QueryVersion] = []
    current_version: int = Field(1, ge=1)
    tags: List[str] = []
    is_favorite: bool = False
    user_id: str
    visibility: Visibility = Visibility.PRIVATE

    model_config = _record_config

    @field_validator("visibility", mode="before")
    @classmethod
    def default_private(cls, v):
        return Visibility.resolve(v)

    @field_validator("versions", mode="before")
    @classmethod
    def versions_or_empty(cls, v):
        return [] if v is None else v

    @field_validator("tags", mode="before")
    @classmethod
    def unique_tags(cls, v):
        return _dedupe_tags(v)

    @field_validator("current_version", mode="before")
    @classmethod
    def version_or_first(cls, v):
        return 1 if v is None else v

    @field_validator("is_favorite", mode="before")
    @classmethod
    def favorite_or_false(cls, v):
        return False if v is None else v

    def to_json(self) -> dict:
        """JSON-ready dict using the camelCase field names."""
        return self.model_dump(mode="json", by_alias=True)


class QueryCreate(BaseModel):
    """Body for creating a query. Ownership comes from the session, not the body."""
    name: str = Field("", max_length=255)
    sql: str = Field(..., min_length=1)
    description: str = ""
    result: str = ""
    result_image: Optional[str] = None
    date: Optional[str] = None
    timestamp: Optional[str] = None
    versions: List[QueryVersion] = []
    current_version: int = Field(1, ge=1)
    tags: List[str] = []
    is_favorite: bool = False
    visibility: Visibility = Visibility.PRIVATE

    model_config = _record_config

    @field_validator("tags", mode="before")
    @classmethod
    def unique_tags(cls, v):
        return _dedupe_tags(v)


class QueryUpdate(BaseModel):
    """Body for a full edit of a query's content.

    Visibility is not part of an edit; it changes only through the
    visibility endpoint.
    """
    name: str = Field("", max_length=255)
    sql: str = Field(..., min_length=1)
    description: str = ""
    result: str = ""
    result_image: Optional[str] = None
    tags: List[str] = []
    is_favorite: bool = False

    model_config = _record_config

    @field_validator("tags", mode="before")
    @classmethod
    def unique_tags(cls, v):
        return _dedupe_tags(v)


class VisibilityUpdate(BaseModel):
    """Body of PATCH /queries/{id}/visibility."""
    visibility: Visibility


class VisibilityUpdateResponse(BaseModel):
    success: bool = True
    visibility: Visibility
