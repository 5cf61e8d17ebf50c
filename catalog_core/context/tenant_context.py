"""
Active tenant for the current thread.

The API handlers enter ``tenant_context`` for every tenant-scoped route, so
the catalog services, the log filter and resolvers built without an explicit
tenant all see the tenant named in the request path.

Import this module as ``catalog_core.context.tenant_context``; a second copy
of the module would carry its own thread-local and lose the active tenant.
"""

import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from ..exceptions import ErrorCode, ValidationError
from ..utils.logger import get_logger


class TenantContext:
    """Thread-local holder of the tenant whose catalogs are being served."""

    _thread_local = threading.local()
    _logger = get_logger()

    @classmethod
    def set_current_tenant(cls, tenant_id: str) -> None:
        """
        Make ``tenant_id`` the active tenant of this thread.

        Raises:
            ValidationError: If tenant_id is blank or not a string
        """
        if not isinstance(tenant_id, str) or not tenant_id.strip():
            raise ValidationError(
                "tenant_id must be a non-empty string",
                error_code=ErrorCode.MISSING_REQUIRED,
                field="tenant_id",
                value=tenant_id,
            )
        cls._thread_local.tenant_id = tenant_id.strip()
        cls._logger.debug(f"Catalog tenant set to: {cls._thread_local.tenant_id}")

    @classmethod
    def get_current_tenant_id(cls) -> Optional[str]:
        return getattr(cls._thread_local, "tenant_id", None)

    @classmethod
    def clear_current_tenant(cls) -> None:
        if hasattr(cls._thread_local, "tenant_id"):
            del cls._thread_local.tenant_id


@contextmanager
def tenant_context(tenant_id: str) -> Iterator[str]:
    """Serve catalogs for ``tenant_id`` inside the block, then restore the previous tenant."""
    previous_tenant = TenantContext.get_current_tenant_id()
    TenantContext.set_current_tenant(tenant_id)
    try:
        yield TenantContext.get_current_tenant_id()
    finally:
        if previous_tenant:
            TenantContext.set_current_tenant(previous_tenant)
        else:
            TenantContext.clear_current_tenant()
