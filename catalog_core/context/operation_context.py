"""
Call tracing for catalog service operations.

``@operation()`` wraps a service method in ``service_operation``: one ENTER
and one EXIT line per call, carrying the tenant, the catalog kind being
served, the size of the result and the duration. Catalog errors raised inside
get the operation name attached before they propagate, so the error body sent
back by the handlers names the service call that failed.
"""

import time
import uuid
from contextlib import contextmanager
from functools import wraps
from typing import Any, Callable, Dict, Iterator, Optional, TypeVar, cast

from ..config import get_config
from ..enums import CatalogKind
from ..exceptions import BaseError, get_correlation_id, set_correlation_id
from ..utils.logger import get_logger
from .tenant_context import TenantContext

F = TypeVar("F", bound=Callable[..., Any])


class OperationContext:
    """One traced service call."""

    def __init__(self, name: str, tenant_id: Optional[str] = None, kind: Optional[str] = None):
        self.name = name
        self.operation_id = str(uuid.uuid4())
        # Nested calls keep the correlation id of the outermost one
        self.correlation_id = get_correlation_id() or str(uuid.uuid4())
        set_correlation_id(self.correlation_id)
        self.tenant_id = tenant_id or TenantContext.get_current_tenant_id()
        self.kind = kind
        self.result_count: Optional[int] = None
        self.start_time = time.perf_counter()

    @property
    def duration_ms(self) -> float:
        return round((time.perf_counter() - self.start_time) * 1000, 3)

    def log_fields(self, **fields: Any) -> Dict[str, Any]:
        base = {
            "operation_id": self.operation_id,
            "correlation_id": self.correlation_id,
            "tenant_id": self.tenant_id,
            "kind": self.kind,
        }
        return {k: v for k, v in {**base, **fields}.items() if v is not None}


@contextmanager
def service_operation(
    name: str, tenant_id: Optional[str] = None, kind: Optional[str] = None
) -> Iterator[OperationContext]:
    logger = get_logger()
    op = OperationContext(name, tenant_id=tenant_id, kind=kind)
    verbose = get_config().features.enable_operation_logging

    if verbose:
        logger.info(f"ENTER: {name}", extra=op.log_fields())
    try:
        yield op
    except BaseError as e:
        e.add_context(operation_name=name, operation_id=op.operation_id)
        # The error already logged its own details when it was built
        logger.error(
            f"ERROR: {name} -> {e.error_code.value}: {e.message}",
            extra=op.log_fields(duration_ms=op.duration_ms, error_id=e.error_id, status="error"),
        )
        raise
    except Exception as e:
        logger.exception(
            f"ERROR: {name} -> {type(e).__name__}: {e}",
            extra=op.log_fields(duration_ms=op.duration_ms, error_type=type(e).__name__, status="error"),
        )
        raise

    if verbose:
        logger.info(
            f"EXIT: {name}",
            extra=op.log_fields(
                duration_ms=op.duration_ms, result_count=op.result_count, status="success"
            ),
        )


def _call_argument(func: Callable, args: tuple, kwargs: Dict[str, Any], name: str) -> Any:
    if name in kwargs:
        return kwargs[name]
    try:
        position = func.__code__.co_varnames[: func.__code__.co_argcount].index(name)
    except ValueError:
        return None
    return args[position] if position < len(args) else None


def _kind_value(kind: Any) -> Optional[str]:
    if isinstance(kind, CatalogKind):
        return kind.value
    return kind if isinstance(kind, str) else None


def _result_count(result: Any) -> Optional[int]:
    if isinstance(result, dict):
        return sum(len(v) if isinstance(v, list) else 1 for v in result.values())
    if isinstance(result, list):
        return len(result)
    return None


def operation(name: Optional[str] = None) -> Callable[[F], F]:
    """
    Trace a service method.

    The operation is named ``Class.method`` unless ``name`` is given; the
    ``tenant_id`` and ``kind`` arguments of the call are picked up by name.
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            op_name = name or func.__qualname__
            with service_operation(
                op_name,
                tenant_id=_call_argument(func, args, kwargs, "tenant_id"),
                kind=_kind_value(_call_argument(func, args, kwargs, "kind")),
            ) as op:
                result = func(*args, **kwargs)
                op.result_count = _result_count(result)
                return result

        return cast(F, wrapper)

    return decorator
