"""Admin endpoints: user management and unscoped query access."""
import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.queries import newest_first, to_query
from app.core.database import get_db
from app.core.deps import get_current_admin
from app.models.saved_query import SavedQuery
from app.models.user import User
from app.schemas.query import Query
from app.schemas.user import User as UserSchema, UserUpdate

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/users", response_model=List[UserSchema])
def list_users(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin)
):
    """All users, newest first."""
    return db.query(User).order_by(User.created_at.desc()).all()


@router.patch("/users/{user_id}", response_model=UserSchema)
def update_user(
    user_id: str,
    user_data: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin)
):
    """Update a user's name, email or admin flag."""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    update_data = user_data.model_dump(exclude_unset=True)
    if "email" in update_data and update_data["email"] != user.email:
        existing = db.query(User).filter(User.email == update_data["email"]).first()
        if existing:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already in use"
            )

    for field, value in update_data.items():
        setattr(user, field, value)

    db.commit()
    db.refresh(user)
    return user


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin)
):
    """Delete a user and, through the cascade, their queries."""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    # Prevent self-deletion
    if user.id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete your own account"
        )

    db.delete(user)
    db.commit()
    logger.info("Admin %s deleted user %s", current_user.id, user_id)
    return None


@router.get("/admin/queries", response_model=List[Query])
def list_all_queries(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin)
):
    """Every query of every user, regardless of visibility."""
    return [to_query(row) for row in newest_first(db.query(SavedQuery)).all()]


@router.delete("/admin/queries/{query_id}", status_code=status.HTTP_204_NO_CONTENT)
def admin_delete_query(
    query_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin)
):
    """Delete any query by id, without an ownership check."""
    row = db.query(SavedQuery).filter(SavedQuery.id == query_id).first()
    if not row:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Query not found"
        )
    db.delete(row)
    db.commit()
    logger.info("Admin %s deleted query %s owned by %s", current_user.id, query_id, row.user_id)
    return None
