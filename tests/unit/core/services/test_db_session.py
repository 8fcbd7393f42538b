"""Tests for the database session service."""

import pytest
from sqlalchemy import StaticPool, inspect

from user_service.core.exceptions import RecordNotFoundError
from user_service.core.services import DbSessionService
from user_service.entities.user import UserTable
from user_service.runtime.config.config_data import DatabaseConfig


class TestDbSessionService:
    def test_in_memory_uses_static_pool(self, db_service):
        assert isinstance(db_service.engine.pool, StaticPool)

    def test_create_all_builds_users_table_and_index(self, db_service):
        inspector = inspect(db_service.engine)

        assert "users" in inspector.get_table_names()
        indexes = {index["name"]: index for index in inspector.get_indexes("users")}
        assert indexes["uq_users_email_active"]["unique"]

    def test_health_check(self, db_service):
        assert db_service.health_check() is True

    def test_session_scope_rolls_back_on_error(self, db_service, make_user_create):
        with pytest.raises(RecordNotFoundError):
            with db_service.session_scope() as session:
                session.add(
                    UserTable(
                        **make_user_create().model_dump(exclude={"password"}),
                        password_hash="digest",
                    )
                )
                session.flush()
                raise RecordNotFoundError(1)

        with db_service.session_scope() as session:
            assert session.get(UserTable, 1) is None

    def test_file_database(self, tmp_path):
        service = DbSessionService(DatabaseConfig(url=f"sqlite:///{tmp_path / 'users.db'}"))
        try:
            service.create_all()
            assert service.health_check() is True
        finally:
            service.dispose()

        assert (tmp_path / "users.db").exists()
