"""Tests for record <-> query field mapping."""
import json

import pytest

from app.schemas.query import Query, QueryVersion, Visibility
from app.storage.mapping import decode_list, query_from_record, query_to_record, user_from_record


@pytest.fixture
def versioned_query(make_query):
    return make_query(
        7,
        "u1",
        visibility="public",
        result_image="data:image/png;base64,AAAA",
        last_edited="2023-01-02T09:00:00Z",
        current_version=2,
        tags=["reporting", "finance"],
        is_favorite=True,
        versions=[
            QueryVersion(
                version=1,
                name="Old name",
                sql="SELECT 1",
                edited_at="2023-01-01T12:00:00Z",
                edited_by="u1",
                tags=["reporting"],
                is_favorite=False,
            )
        ],
    )


def test_storage_columns_are_snake_case(versioned_query):
    record = query_to_record(versioned_query)
    assert record["result_image"] == "data:image/png;base64,AAAA"
    assert record["last_edited"] == "2023-01-02T09:00:00Z"
    assert record["current_version"] == 2
    assert record["is_favorite"] is True
    assert record["user_id"] == "u1"
    assert record["visibility"] == "public"
    assert "resultImage" not in record
    assert "userId" not in record


def test_arrays_are_encoded_as_text(versioned_query):
    record = query_to_record(versioned_query)
    assert isinstance(record["tags"], str)
    assert isinstance(record["versions"], str)
    assert json.loads(record["tags"]) == ["reporting", "finance"]
    version = json.loads(record["versions"])[0]
    assert version["editedAt"] == "2023-01-01T12:00:00Z"
    assert version["editedBy"] == "u1"


def test_round_trip_is_lossless(versioned_query):
    assert query_from_record(query_to_record(versioned_query)) == versioned_query


def test_unsaved_query_has_no_id_column(make_query):
    record = query_to_record(make_query(None, "u1"))
    assert "id" not in record


@pytest.mark.parametrize("stored", [None, ""])
def test_missing_visibility_reads_private(make_query, stored):
    record = query_to_record(make_query(1, "u1"))
    record["visibility"] = stored
    assert query_from_record(record).visibility == Visibility.PRIVATE


def test_missing_arrays_read_empty(make_query):
    record = query_to_record(make_query(1, "u1"))
    record["tags"] = None
    del record["versions"]
    query = query_from_record(record)
    assert query.tags == []
    assert query.versions == []


def test_decode_list_rejects_non_arrays():
    with pytest.raises(ValueError):
        decode_list('{"a": 1}')


def test_query_defaults_private_when_visibility_absent():
    query = Query(sql="SELECT 1", user_id="u1")
    assert query.visibility == Visibility.PRIVATE
    assert query.current_version == 1
    assert query.to_json()["visibility"] == "private"


def test_query_rejects_unknown_visibility():
    with pytest.raises(ValueError):
        Query(sql="SELECT 1", user_id="u1", visibility="friends")


def test_user_from_record():
    user = user_from_record({
        "id": "abc",
        "email": "a@example.com",
        "name": None,
        "is_admin": True,
        "created_at": "2024-03-01T10:00:00",
    })
    assert user.is_admin is True
    assert user.last_login is None
    assert user.to_json()["isAdmin"] is True
