"""
Base service with session ownership and consistent error handling.

A service either owns its session (created from the global database manager)
and commits at the end of each ``transaction()``, or joins a session handed in
by the caller (tests, request-scoped sessions) and only flushes.
"""

import logging
from contextlib import contextmanager
from typing import NoReturn, Optional, Union

from sqlalchemy.orm import Session

from ..context.tenant_context import TenantContext
from ..db.db_config import get_db_manager
from ..exceptions import BaseError, ErrorCode, ServiceError, ValidationError
from ..utils.logger import ContextAwareLogger, get_logger


class SessionManagedService:
    """
    Service that owns and manages its own database session.
    """

    def __init__(
        self,
        session: Optional[Session] = None,
        logger: Optional[Union[logging.Logger, ContextAwareLogger]] = None,
    ):
        """
        Initialize service with its own session.

        Args:
            session: Optional existing session (for testing or coordination)
            logger: Optional logger instance
        """
        if session is not None:
            self.session = session
            self._owns_session = False
        else:
            self.session = self._create_session()
            self._owns_session = True

        self.logger = logger or get_logger()

    def _create_session(self) -> Session:
        """Open a new session on the global database manager."""
        return get_db_manager().session_factory()

    def _get_current_tenant_id(self) -> str:
        """Get current tenant ID from context with validation."""
        tenant_id = TenantContext.get_current_tenant_id()
        if not tenant_id:
            raise ValidationError(
                "No tenant context set - ensure tenant_context is active",
                field="tenant_id",
                error_code=ErrorCode.MISSING_REQUIRED,
            )
        return tenant_id

    def _handle_service_exception(
        self, operation: str, exception: Exception, entity_id: Optional[str] = None
    ) -> NoReturn:
        """
        Re-raise typed errors untouched and wrap anything else in ServiceError.

        Args:
            operation: Operation being performed
            exception: Exception that occurred
            entity_id: Optional ID of the entity involved
        """
        if isinstance(exception, BaseError):
            raise exception

        error_msg = f"Error in {operation}: {str(exception)}"
        self.logger.error(
            error_msg,
            extra={
                "operation": operation,
                "entity_id": entity_id,
                "error_type": type(exception).__name__,
            },
            exc_info=True,
        )
        raise ServiceError(
            error_msg,
            error_code=ErrorCode.INTERNAL_ERROR,
            operation=operation,
            entity_id=entity_id,
            cause=exception,
        ) from exception

    @contextmanager
    def transaction(self):
        """
        Context manager for transactional operations.

        Usage:
            with service.transaction():
                service.store.create(...)
                # Commits on success when the service owns its session,
                # rolls back on exception
        """
        try:
            yield self.session
            if self._owns_session:
                self.session.commit()
            else:
                self.session.flush()
        except Exception:
            if self._owns_session:
                self.session.rollback()
            raise

    def commit(self):
        """Manually commit the current transaction."""
        if self._owns_session:
            self.session.commit()

    def rollback(self):
        """Manually rollback the current transaction."""
        if self._owns_session:
            self.session.rollback()

    def close(self):
        """Close the session if we own it."""
        if self._owns_session and self.session:
            self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Auto-close session on exit."""
        if exc_type:
            self.rollback()
        else:
            self.commit()
        self.close()
