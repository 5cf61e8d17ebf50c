"""
Engine and session wiring for the catalog tables.

Catalog rows live in SQLite during development and tests (one shared
in-memory connection) and in PostgreSQL once deployed, where
``DATABASE_URL`` names the server. The process keeps one
``DatabaseManager`` that the catalog services open their sessions from.
"""

import os
from typing import Any, Dict, Optional

from pydantic import BaseModel
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, declarative_base, scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config import get_config
from ..constants import EnvironmentVariable
from ..exceptions import ErrorCode, ServiceError, ValidationError
from ..utils import get_logger

# Shared by the catalog item, override, domain and tenant tables
Base: Any = declarative_base()

SUPPORTED_BACKENDS = ("sqlite", "postgres")
MEMORY_DATABASE = ":memory:"


class DatabaseConfig(BaseModel):
    """Where the catalog tables live; the password never shows in ``repr``."""

    db_type: str = "postgres"
    database: str
    host: str = ""
    port: str = "5432"
    username: str = ""
    password: str = ""
    echo: bool = False
    development_mode: bool = False

    @classmethod
    def from_url(cls, url: str, **overrides: Any) -> "DatabaseConfig":
        parsed = make_url(url)
        if parsed.get_backend_name() == "sqlite":
            database = parsed.database or MEMORY_DATABASE
            fields: Dict[str, Any] = {
                "db_type": "sqlite",
                "database": database,
                "development_mode": database == MEMORY_DATABASE,
            }
        else:
            fields = {
                "db_type": "postgres",
                "host": parsed.host or "",
                "port": str(parsed.port or 5432),
                "database": parsed.database or "",
                "username": parsed.username or "",
                "password": parsed.password or "",
            }
        return cls(**{**fields, **overrides})

    @property
    def backend(self) -> str:
        return self.db_type.lower()

    @property
    def is_memory_sqlite(self) -> bool:
        return self.backend == "sqlite" and self.database in ("", MEMORY_DATABASE)

    def get_connection_string(self) -> str:
        """
        SQLAlchemy URL for this config.

        Raises:
            ValidationError: Unknown backend, or a Postgres config without
                host, database, username and password
        """
        if self.backend not in SUPPORTED_BACKENDS:
            raise ValidationError(
                f"Unsupported catalog database type: {self.db_type}",
                error_code=ErrorCode.INVALID_FORMAT,
                field="db_type",
                value=self.db_type,
            )
        if self.backend == "sqlite":
            return "sqlite://" if self.is_memory_sqlite else f"sqlite:///{self.database}"

        missing = [
            name for name in ("host", "database", "username", "password") if not getattr(self, name)
        ]
        if missing:
            raise ValidationError(
                f"Catalog database config is missing: {', '.join(missing)}",
                error_code=ErrorCode.MISSING_REQUIRED,
                field="database_config",
                value=missing,
            )
        return (
            f"postgresql://{self.username}:{self.password}@"
            f"{self.host}:{self.port}/{self.database}"
        )

    def __repr__(self) -> str:
        return (
            f"DatabaseConfig(db_type='{self.db_type}', host='{self.host}', "
            f"port='{self.port}', database='{self.database}', "
            f"username='{self.username}', password='***')"
        )


class DatabaseManager:
    """Owns the engine and the session factory for the catalog tables."""

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self.engine = self._create_engine()
        self.session_factory = sessionmaker(bind=self.engine)
        self.scoped_session = scoped_session(self.session_factory)

    def _create_engine(self) -> Engine:
        url = self.config.get_connection_string()
        if self.config.backend != "sqlite":
            return create_engine(url, echo=self.config.echo, pool_pre_ping=True)
        options: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if self.config.is_memory_sqlite:
            # Every session must see the same in-memory catalog
            options["poolclass"] = StaticPool
        return create_engine(url, echo=self.config.echo, **options)

    def create_tables(self) -> None:
        Base.metadata.create_all(self.engine)
        get_logger().info(
            "Catalog tables ready",
            extra={"tables": ",".join(sorted(Base.metadata.tables))},
        )

    def drop_tables(self) -> None:
        """Drop every catalog table; refused unless the config is in development mode."""
        if not self.config.development_mode:
            raise ServiceError(
                "Refusing to drop catalog tables outside development mode",
                error_code=ErrorCode.CONFIGURATION_ERROR,
                operation="drop_tables",
                database=self.config.database,
            )
        Base.metadata.drop_all(self.engine)

    def get_session(self) -> Session:
        return self.scoped_session()

    def close_session(self, session: Optional[Session] = None) -> None:
        if session is not None:
            session.close()
        else:
            self.scoped_session.remove()

    def close(self) -> None:
        self.scoped_session.remove()
        self.engine.dispose()


def get_development_config() -> DatabaseConfig:
    """SQLite at ``CATALOG_DEV_DB``, in memory when unset."""
    return DatabaseConfig(
        db_type="sqlite",
        database=os.getenv(EnvironmentVariable.DEV_DB_PATH.value, MEMORY_DATABASE),
        echo=get_config().database.echo,
        development_mode=True,
    )


def get_production_config() -> DatabaseConfig:
    """The database named by ``DATABASE_URL`` (through ``get_config().database``)."""
    database = get_config().database
    return DatabaseConfig.from_url(
        database.connection_string, echo=database.echo, development_mode=False
    )


def import_all_models() -> None:
    """Register every catalog table on ``Base.metadata``."""
    from sqlalchemy.orm import configure_mappers

    from . import db_catalog_models, db_domain_models, db_tenant_models  # noqa: F401

    configure_mappers()


def init_db(db_manager: DatabaseManager) -> None:
    get_logger().info(
        "Initializing catalog database", extra={"db_type": db_manager.config.db_type}
    )
    import_all_models()
    db_manager.create_tables()


_db_manager: Optional[DatabaseManager] = None


def get_db_manager() -> DatabaseManager:
    """
    The process-wide manager set by ``initialize_db``.

    Raises:
        ServiceError: If ``initialize_db`` has not run
    """
    if _db_manager is None:
        raise ServiceError(
            "Catalog database not initialized; call initialize_db() first",
            error_code=ErrorCode.CONFIGURATION_ERROR,
            operation="get_db_manager",
        )
    return _db_manager


def set_db_manager(manager: Optional[DatabaseManager]) -> None:
    global _db_manager
    _db_manager = manager


def initialize_db(config: Optional[DatabaseConfig] = None) -> DatabaseManager:
    """Build the process-wide manager and create the catalog tables."""
    manager = DatabaseManager(config or get_production_config())
    init_db(manager)
    set_db_manager(manager)
    return manager
