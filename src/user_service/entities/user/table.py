"""User database table model."""

from sqlalchemy import Index, text
from sqlmodel import Field

from user_service.entities._base import EntityTable


class UserTable(EntityTable, table=True):
    """Database persistence model for users.

    Email uniqueness is enforced by a partial index over live rows only, so a
    soft-deleted user's email can be taken again while two live users can
    never share one.
    """

    __tablename__ = "users"
    __table_args__ = (
        Index(
            "uq_users_email_active",
            "email",
            unique=True,
            sqlite_where=text("deleted_at IS NULL"),
            postgresql_where=text("deleted_at IS NULL"),
        ),
    )

    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)
    middle_name: str | None = Field(default=None, max_length=100)
    email: str = Field(max_length=255)
    password_hash: str = Field(max_length=255)
    phone: str = Field(max_length=32)
    is_active: bool = Field(default=True)
