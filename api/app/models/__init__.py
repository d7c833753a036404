"""Models package."""
from app.models.base import Base
from app.models.user import User
from app.models.saved_query import SavedQuery

__all__ = ["Base", "User", "SavedQuery"]
