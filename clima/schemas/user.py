# clima/schemas/user.py
from datetime import datetime

from pydantic import ConfigDict, field_validator
from pydantic_core import PydanticCustomError
from sqlmodel import SQLModel, Field


def _required(v: str) -> str:
    """Blank strings count as missing, same as an absent key."""
    v = v.strip()
    if not v:
        raise PydanticCustomError("missing", "Field required")
    return v


def _optional(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip()
    return v or None


# ----- Requests -----


class RegisterRequest(SQLModel):
    """
    Sign-up form payload.

    Validation rules:
      - username, email, password are required and non-blank
      - full_name, phone are optional; blank means "not provided"
    """

    model_config = ConfigDict(extra="ignore")

    username: str = Field(max_length=50)
    email: str = Field(max_length=254)
    password: str = Field(max_length=72)
    full_name: str | None = Field(default=None, max_length=200)
    phone: str | None = Field(default=None, max_length=30)

    @field_validator("username", "email")
    @classmethod
    def normalize_required(cls, v: str) -> str:
        return _required(v)

    @field_validator("password")
    @classmethod
    def password_not_blank(cls, v: str) -> str:
        # Passwords are not stripped, only checked for content.
        if not v.strip():
            raise PydanticCustomError("missing", "Field required")
        return v

    @field_validator("full_name", "phone")
    @classmethod
    def normalize_optional(cls, v: str | None) -> str | None:
        return _optional(v)


class LoginRequest(SQLModel):
    model_config = ConfigDict(extra="ignore")

    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _required(v)

    @field_validator("password")
    @classmethod
    def password_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise PydanticCustomError("missing", "Field required")
        return v


class EmailRequest(SQLModel):
    """Body of /checkEmail and /reques."""

    model_config = ConfigDict(extra="ignore")

    email: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _required(v)


class ResetPasswordRequest(SQLModel):
    """
    New password for the (id, email) pair carried by a validated reset link.

    `token` is optional for older clients; when sent it is re-verified
    server-side and must belong to the same (id, email).
    """

    model_config = ConfigDict(extra="ignore")

    id: int
    email: str
    password: str = Field(max_length=72)
    token: str | None = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _required(v)

    @field_validator("password")
    @classmethod
    def password_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise PydanticCustomError("missing", "Field required")
        return v

    @field_validator("token")
    @classmethod
    def normalize_token(cls, v: str | None) -> str | None:
        return _optional(v)


class ProfileUpdate(SQLModel):
    """
    Partial profile update from the profile page.
    Email and password are not editable here.
    """

    model_config = ConfigDict(extra="ignore")

    username: str | None = Field(default=None, max_length=50)
    full_name: str | None = Field(default=None, max_length=200)
    phone: str | None = Field(default=None, max_length=30)
    # display label only; no endpoint authorizes on it
    role: str | None = Field(default=None, max_length=30)

    @field_validator("username")
    @classmethod
    def username_not_empty(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("username cannot be empty")
        return v

    @field_validator("full_name", "phone", "role")
    @classmethod
    def normalize_optional(cls, v: str | None) -> str | None:
        return _optional(v)


# ----- Responses -----


class UserRead(SQLModel):
    """Response schema returned to clients. Never includes the password hash."""

    id: int
    username: str
    email: str
    full_name: str | None = None
    phone: str | None = None
    role: str | None = None
    created_at: datetime | None = None


class MessageResponse(SQLModel):
    message: str


class RegisterResponse(MessageResponse):
    data: UserRead


class LoginResponse(MessageResponse):
    user: UserRead
    token: str


class EmailCheckResponse(SQLModel):
    id: int
    email: str


class ResetLinkResponse(SQLModel):
    id: int
    email: str
    token: str


class ProfileUpdateResponse(MessageResponse):
    user: UserRead
