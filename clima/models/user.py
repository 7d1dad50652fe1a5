# clima/models/user.py
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    One row per registered account in the hosted `usuarios` table.

    The `password` column holds the bcrypt hash, never the plaintext.
    It must never be serialized to clients; read models omit it.
    """

    __tablename__ = "usuarios"

    id: int | None = Field(
        default=None,
        primary_key=True,
        description="Server-assigned, immutable",
    )

    username: str = Field(
        unique=True,
        index=True,
        description="Unique login/display handle",
    )

    email: str = Field(
        unique=True,
        index=True,
        description="Unique contact address; used to log in",
    )

    password: str = Field(
        description="bcrypt hash of the user's password",
    )

    full_name: str | None = Field(default=None)

    phone: str | None = Field(default=None)

    # Application role, free-form ("user" unless changed on the profile)
    role: str | None = Field(default="user")

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
