"""Execution context: active tenant and service call tracing."""

from .operation_context import OperationContext, operation, service_operation
from .tenant_context import TenantContext, tenant_context

__all__ = [
    "OperationContext",
    "operation",
    "service_operation",
    "TenantContext",
    "tenant_context",
]
