"""User domain models: the public record and the write payloads."""

from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator
from pydantic.alias_generators import to_camel

from user_service.entities._base import Entity

PHONE_PATTERN = r"^\+?[0-9][0-9 ()\-]{5,19}$"


class User(Entity):
    """User record as returned to callers.

    Carries no password field. The digest lives only on `UserTable`, so it
    never reaches a response or a cache entry.
    """

    first_name: str = Field(description="User's first name")
    last_name: str = Field(description="User's last name")
    middle_name: str | None = Field(default=None, description="User's middle name")
    email: str = Field(description="User's email address")
    phone: str = Field(description="User's phone number")
    is_active: bool = Field(default=True, description="Whether the account is active")

    def __eq__(self, other: Any) -> bool:
        """Compare users by business attributes, ignoring timestamps."""
        if not isinstance(other, User):
            return False

        return (
            self.id == other.id
            and self.first_name == other.first_name
            and self.last_name == other.last_name
            and self.middle_name == other.middle_name
            and self.email == other.email
            and self.phone == other.phone
            and self.is_active == other.is_active
        )

    def __hash__(self) -> int:
        """Hash based on business attributes, ignoring timestamps."""
        return hash((
            self.id,
            self.first_name,
            self.last_name,
            self.middle_name,
            self.email,
            self.phone,
            self.is_active,
        ))


class _UserPayload(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class UserCreate(_UserPayload):
    """Fields accepted when creating a user."""

    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    middle_name: str | None = Field(default=None, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    phone: str = Field(pattern=PHONE_PATTERN)
    is_active: bool = True


class UserUpdate(_UserPayload):
    """Partial update; only fields present in the payload are applied."""

    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    middle_name: str | None = Field(default=None, max_length=100)
    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=6, max_length=128)
    phone: str | None = Field(default=None, pattern=PHONE_PATTERN)
    is_active: bool | None = None

    @model_validator(mode="after")
    def _reject_null_required(self) -> "UserUpdate":
        nullable = {"middle_name"}
        for name in self.model_fields_set - nullable:
            if getattr(self, name) is None:
                raise ValueError(f"{to_camel(name)} cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        """Fields the caller actually supplied."""
        return self.model_dump(exclude_unset=True)


class UserPage(BaseModel):
    """Cache envelope for one page of a listing."""

    items: list[User] = Field(default_factory=list)
