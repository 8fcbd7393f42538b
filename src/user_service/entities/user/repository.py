"""User repository: the record store behind the service."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Literal

from loguru import logger
from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlmodel import Session, col, select

from user_service.core.exceptions import DependencyUnavailableError, DuplicateKeyError
from user_service.entities._base import utc_now
from user_service.entities.user.entity import User, UserCreate
from user_service.entities.user.table import UserTable

SortOrder = Literal["asc", "desc"]


class UserRepository:
    """Data-access layer for users.

    Every query filters out soft-deleted rows. Write methods commit before
    returning so that callers only observe durable state.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    @staticmethod
    def _visible():
        return select(UserTable).where(col(UserTable.deleted_at).is_(None))

    @staticmethod
    def _to_entity(row: UserTable) -> User:
        return User.model_validate(row, from_attributes=True)

    @contextmanager
    def _store_errors(self, email: str | None = None) -> Iterator[None]:
        """Translate driver failures into service errors, rolling back first."""
        try:
            yield
        except IntegrityError as exc:
            self._session.rollback()
            if email is None:
                raise
            logger.warning("Unique email constraint rejected write for {}", email)
            raise DuplicateKeyError(email) from exc
        except OperationalError as exc:
            self._session.rollback()
            logger.error(
                "Database operation failed",
                extra={
                    "error_type": type(exc).__name__,
                    "error_message": str(exc.orig),
                },
            )
            raise DependencyUnavailableError("database", str(exc.orig)) from exc

    def find_page(self, offset: int, limit: int, order: SortOrder) -> list[User]:
        id_column = col(UserTable.id)
        statement = (
            self._visible()
            .order_by(id_column.desc() if order == "desc" else id_column.asc())
            .offset(offset)
            .limit(limit)
        )
        with self._store_errors():
            rows = self._session.exec(statement).all()
        return [self._to_entity(row) for row in rows]

    def find_by_id(self, user_id: int) -> User | None:
        with self._store_errors():
            row = self._session.exec(
                self._visible().where(col(UserTable.id) == user_id)
            ).first()
        if row is None:
            return None
        return self._to_entity(row)

    def find_by_email(self, email: str) -> User | None:
        with self._store_errors():
            row = self._session.exec(
                self._visible().where(col(UserTable.email) == email)
            ).first()
        if row is None:
            return None
        return self._to_entity(row)

    def insert(self, data: UserCreate, password_hash: str) -> User:
        row = UserTable(
            **data.model_dump(exclude={"password"}),
            password_hash=password_hash,
        )
        with self._store_errors(email=data.email):
            self._session.add(row)
            self._session.commit()
            self._session.refresh(row)
        return self._to_entity(row)

    def apply_update(self, user_id: int, changes: dict[str, Any]) -> User | None:
        """Merge `changes` into the live row; None when no live row matches."""
        with self._store_errors(email=changes.get("email")):
            row = self._session.exec(
                self._visible().where(col(UserTable.id) == user_id)
            ).first()
            if row is None:
                return None

            for field_name, value in changes.items():
                setattr(row, field_name, value)
            row.updated_at = utc_now()

            self._session.add(row)
            self._session.commit()
            self._session.refresh(row)
        return self._to_entity(row)

    def soft_delete(self, user_id: int) -> int:
        """Stamp `deleted_at` on the live row and return the affected count."""
        now = utc_now()
        statement = (
            update(UserTable)
            .where(col(UserTable.id) == user_id, col(UserTable.deleted_at).is_(None))
            .values(deleted_at=now, updated_at=now)
        )
        with self._store_errors():
            result = self._session.exec(statement)
            self._session.commit()
        return result.rowcount

    def count(self) -> int:
        """Number of visible (non-deleted) users."""
        statement = (
            select(func.count())
            .select_from(UserTable)
            .where(col(UserTable.deleted_at).is_(None))
        )
        with self._store_errors():
            return self._session.exec(statement).one()
