"""Saved query routes.

These endpoints are the network-facing counterpart of the storage adapters.
Where an adapter silently ignores a write by a non-owner, the endpoints
answer explicitly: 404 for an unknown id, 403 for somebody else's query.
"""
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query as QueryParam, status
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.deps import get_current_user
from app.core.time import iso_date, iso_timestamp
from app.models.user import User
from app.models.saved_query import SavedQuery
from app.schemas.query import (
    Query,
    QueryCreate,
    QueryUpdate,
    QueryVersion,
    Visibility,
    VisibilityUpdate,
    VisibilityUpdateResponse,
)
from app.storage.mapping import query_from_record, query_to_record, row_to_record

logger = logging.getLogger(__name__)

router = APIRouter()


def to_query(row: SavedQuery) -> Query:
    """ORM row -> logical query, using the same mapping as the remote adapter."""
    return query_from_record(row_to_record(row))


def newest_first(db_query):
    return db_query.order_by(SavedQuery.created_at.desc(), SavedQuery.id.desc())


def get_owned_query(db: Session, query_id: int, user: User, action: str) -> SavedQuery:
    """Load a query the caller owns, or raise 404/403."""
    row = db.query(SavedQuery).filter(SavedQuery.id == query_id).first()
    if not row:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Query not found"
        )
    if row.user_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"You can only {action} your own queries"
        )
    return row


@router.post("/", response_model=Query, status_code=status.HTTP_201_CREATED)
def create_query(
    query_data: QueryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Save a new query owned by the caller. Visibility defaults to private."""
    query = Query(
        **query_data.model_dump(exclude={"date", "timestamp"}),
        date=query_data.date or iso_date(),
        timestamp=query_data.timestamp or iso_timestamp(),
        user_id=current_user.id,
    )
    row = SavedQuery(**query_to_record(query))
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("User %s saved query %s", current_user.id, row.id)
    return to_query(row)


@router.get("/", response_model=List[Query])
def list_queries(
    visibility: Optional[Visibility] = QueryParam(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    The caller's own queries, or with ?visibility=public every public query
    regardless of owner.
    """
    db_query = db.query(SavedQuery)
    if visibility == Visibility.PUBLIC:
        db_query = db_query.filter(SavedQuery.visibility == Visibility.PUBLIC.value)
    else:
        db_query = db_query.filter(SavedQuery.user_id == current_user.id)
    return [to_query(row) for row in newest_first(db_query).all()]


@router.get("/public", response_model=List[Query])
def list_public_queries(db: Session = Depends(get_db)):
    """Public queries from all users. No authentication required."""
    rows = newest_first(
        db.query(SavedQuery).filter(SavedQuery.visibility == Visibility.PUBLIC.value)
    ).all()
    return [to_query(row) for row in rows]


@router.get("/{query_id}", response_model=Query)
def get_query(
    query_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get a specific query."""
    row = db.query(SavedQuery).filter(SavedQuery.id == query_id).first()
    if not row:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Query not found"
        )

    # Check access: must be owner or query must be public
    if row.user_id != current_user.id and row.visibility != Visibility.PUBLIC.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have access to this query"
        )
    return to_query(row)


@router.put("/{query_id}", response_model=Query)
def update_query(
    query_id: int,
    query_data: QueryUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Edit a query's content. The state before the edit is appended to
    `versions` and `currentVersion` moves up by one.
    """
    row = get_owned_query(db, query_id, current_user, "update")
    previous = to_query(row)

    snapshot = QueryVersion(
        version=previous.current_version,
        name=previous.name,
        sql=previous.sql,
        description=previous.description,
        result=previous.result,
        result_image=previous.result_image,
        edited_at=previous.last_edited or previous.timestamp,
        edited_by=current_user.id,
        tags=previous.tags,
        is_favorite=previous.is_favorite,
    )
    updated = previous.model_copy(update={
        **query_data.model_dump(),
        "versions": [*previous.versions, snapshot],
        "current_version": previous.current_version + 1,
        "last_edited": iso_timestamp(),
    })

    record = query_to_record(updated)
    record.pop("id", None)
    for field, value in record.items():
        setattr(row, field, value)

    db.commit()
    db.refresh(row)
    return to_query(row)


@router.patch("/{query_id}/visibility", response_model=VisibilityUpdateResponse)
def set_query_visibility(
    query_id: int,
    visibility_data: VisibilityUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Publish or unpublish a query. Only the owner may do this; setting the
    current value again succeeds without writing.
    """
    row = get_owned_query(db, query_id, current_user, "change the visibility of")

    if row.visibility != visibility_data.visibility.value:
        row.visibility = visibility_data.visibility.value
        db.commit()
        logger.info(
            "Query %s visibility set to %s by %s",
            query_id, visibility_data.visibility.value, current_user.id,
        )

    return {"success": True, "visibility": visibility_data.visibility}


@router.delete("/{query_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_query(
    query_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete a query. Only the owner can delete their query."""
    row = get_owned_query(db, query_id, current_user, "delete")
    db.delete(row)
    db.commit()
    return None
