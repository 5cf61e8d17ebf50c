"""
Test fixtures for the catalog core.

This module provides shared test fixtures including database setup,
factory wiring, tenants and a clean execution context per test.
"""

import pytest
from sqlalchemy.orm import Session

from catalog_core.config import reset_config
from catalog_core.context.tenant_context import TenantContext
from catalog_core.db import DatabaseConfig, DatabaseManager, import_all_models
from catalog_core.db.db_config import Base, initialize_db
from catalog_core.exceptions import clear_correlation_id
from catalog_core.resolver.catalog_cache import get_catalog_cache
from catalog_core.utils.logger import reset_logging
from tests.fixtures.factories import TenantFactory, configure_factories


@pytest.fixture(scope="session")
def db_config() -> DatabaseConfig:
    """Create SQLite in-memory database configuration for testing."""
    return DatabaseConfig(
        db_type="sqlite",
        database=":memory:",
        echo=False,
        development_mode=True,
    )


@pytest.fixture(scope="session")
def db_manager(db_config: DatabaseConfig) -> DatabaseManager:
    """Create and initialize database manager with all models."""
    # Import all models to ensure they're registered with SQLAlchemy
    import_all_models()

    manager = initialize_db(db_config)

    return manager


@pytest.fixture(scope="function")
def db_session(db_manager: DatabaseManager) -> Session:
    """
    Create a database session for each test.

    Tables are created before and dropped after every test so each test
    starts from an empty database.
    """
    session = db_manager.get_session()

    Base.metadata.create_all(db_manager.engine)
    configure_factories(session)

    yield session

    # Clean up after test
    session.rollback()
    db_manager.close_session()

    # Drop all tables to ensure clean state
    Base.metadata.drop_all(db_manager.engine)


@pytest.fixture(autouse=True)
def clean_context():
    """Reset thread-local and process-wide state between tests."""
    yield
    TenantContext.clear_current_tenant()
    clear_correlation_id()
    get_catalog_cache().clear()
    reset_logging()
    reset_config()


@pytest.fixture
def tenant(db_session):
    """Standard tenant used across tests."""
    return TenantFactory(tenant_id="tenant-a", name="Inmobiliaria A")


@pytest.fixture
def other_tenant(db_session):
    """Second tenant for isolation checks."""
    return TenantFactory(tenant_id="tenant-b", name="Inmobiliaria B")
