"""User model."""
import uuid
from datetime import datetime
from typing import List, TYPE_CHECKING
from sqlalchemy import String, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import Base
from app.core.time import utc_now

if TYPE_CHECKING:
    from app.models.saved_query import SavedQuery


def _new_user_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    """Notebook account. Owns zero or more queries."""
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_user_id)
    email: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utc_now)
    last_login: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    queries: Mapped[List["SavedQuery"]] = relationship(
        "SavedQuery", back_populates="owner", cascade="all, delete-orphan"
    )
