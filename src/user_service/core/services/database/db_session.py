"""Database engine and session factory used across the application."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from loguru import logger
from sqlalchemy import StaticPool, text
from sqlmodel import Session, SQLModel, create_engine

from user_service.core.exceptions import UserServiceError
from user_service.runtime.config.config_data import DatabaseConfig
from user_service.runtime.context import get_config


class DbSessionService:
    def __init__(self, db_config: DatabaseConfig | None = None):
        """Initialize the shared database engine and session factory."""

        logger.info("Setting up database engine and session factory")
        main_config = get_config()
        db_config = db_config or main_config.database
        self._config = db_config

        engine_kwargs: dict[str, Any] = {
            "echo": db_config.echo,
            "connect_args": self._get_connect_args(db_config, main_config.app.environment),
        }

        if db_config.is_in_memory:
            # One shared connection, otherwise every session sees an empty database.
            engine_kwargs["poolclass"] = StaticPool
        elif not db_config.is_sqlite:
            engine_kwargs.update(
                {
                    "pool_size": db_config.pool_size,
                    "max_overflow": db_config.max_overflow,
                    "pool_timeout": db_config.pool_timeout,
                    "pool_recycle": db_config.pool_recycle,
                    "pool_pre_ping": True,
                }
            )

        logger.info("Initializing database engine for {}", db_config.sanitized_url)
        self._engine = create_engine(db_config.connection_string, **engine_kwargs)

    @staticmethod
    def _get_connect_args(db_config: DatabaseConfig, environment: str) -> dict:
        """Get database-specific connection arguments."""
        connect_args: dict[str, Any] = {}

        if "postgresql" in db_config.url:
            connect_args.update(
                {
                    "application_name": f"{environment}_user_service",
                    "connect_timeout": 30,
                }
            )
        elif db_config.is_sqlite:
            connect_args.update(
                {
                    "check_same_thread": False,
                    "timeout": 20,
                }
            )
            if environment == "production":
                logger.warning(
                    "SQLite is not recommended for production use. "
                    "Consider PostgreSQL for better performance and reliability."
                )

        return connect_args

    @property
    def engine(self):
        return self._engine

    def create_all(self) -> None:
        """Create all tables and indexes that do not exist yet."""
        from user_service.entities.user import UserTable  # noqa: F401

        SQLModel.metadata.create_all(self._engine)
        logger.info("Database initialized with tables")

    def get_session(self) -> Session:
        """Return a new SQLModel session bound to the shared engine."""
        return Session(
            self._engine,
            expire_on_commit=False,
            autoflush=True,
        )

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Yield a session that is rolled back on error and always closed."""
        db = self.get_session()
        try:
            yield db
        except UserServiceError:
            db.rollback()
            raise
        except Exception as e:
            db.rollback()
            logger.error(
                "Database session aborted",
                extra={
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
            )
            raise
        finally:
            db.close()

    def health_check(self) -> bool:
        """Perform a health check on the database connection."""
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
                return True
        except Exception as e:
            logger.error(
                "Database health check failed",
                extra={
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
            )
            return False

    def dispose(self) -> None:
        self._engine.dispose()
