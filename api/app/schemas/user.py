"""User schemas."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field
from pydantic.alias_generators import to_camel


_user_config = {
    "alias_generator": to_camel,
    "populate_by_name": True,
    "from_attributes": True,
}


class User(BaseModel):
    """Account record as exposed to admins and storage adapters."""
    id: str
    email: str
    name: Optional[str] = None
    is_admin: bool = False
    created_at: datetime
    last_login: Optional[datetime] = None

    model_config = _user_config

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class AuthUser(BaseModel):
    """Identity of the caller for the current session."""
    id: str
    email: str
    name: Optional[str] = None
    is_admin: bool = False

    model_config = _user_config


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: Optional[str] = None


class UserUpdate(BaseModel):
    email: EmailStr | None = None
    name: str | None = None
    is_admin: bool | None = None

    model_config = _user_config


class Token(BaseModel):
    access_token: str
    token_type: str


class LoginRequest(BaseModel):
    email: EmailStr
    password: str
