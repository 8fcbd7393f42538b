from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import Field as PydanticField
from pydantic.alias_generators import to_camel
from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    return datetime.now(UTC)


class Entity(BaseModel):
    """Base read model for rows owned by the store.

    Identifiers and timestamps are assigned by the database, never by the
    caller. Fields serialize to camelCase on the wire and accept either
    spelling on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: int = PydanticField(description="Store-assigned identifier")
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = PydanticField(
        default=None, description="Soft-deletion time; always null on visible records"
    )

    @field_validator("created_at", "updated_at", "deleted_at", mode="after")
    @classmethod
    def _as_utc(cls, value: datetime | None) -> datetime | None:
        if value is None:
            return None
        # SQLite hands back naive datetimes; everything stored is UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)


class EntityTable(SQLModel, table=False):
    """Base persistence model with an integer key, timestamps and soft deletion."""

    id: int | None = Field(default=None, primary_key=True)

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
        nullable=False,
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
        nullable=False,
        sa_column_kwargs={"onupdate": utc_now},
    )
    deleted_at: datetime | None = Field(
        default=None,
        sa_type=DateTime(timezone=True),
        nullable=True,
    )
