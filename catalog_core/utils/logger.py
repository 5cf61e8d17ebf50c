"""
Logging for the catalog engine.

Catalog log lines carry their identifiers as ``extra`` fields (tenant, kind,
code, item id, operation and correlation ids). ``ContextAwareLogger`` repeats
them after the message so they survive plain console formatters, and
``AzureQueueHandler`` ships them as structured entries to the logs queue when
``features.enable_logs_queue`` is on.
"""

import logging
import sys
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from azure.storage.queue import QueueClient, QueueServiceClient

from ..config import get_config
from ..constants import QueueName
from ..exceptions import get_correlation_id
from .json_utils import dumps

LOGGER_NAME = "catalog_core"

# Promoted to top-level fields of a queued entry, and listed first in console lines
CATALOG_FIELDS = ("tenant_id", "kind", "code", "item_id", "operation_id", "correlation_id")

_RECORD_ATTRIBUTES = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
}

_component_logger: Optional["ContextAwareLogger"] = None


def _ordered_fields(extra: Dict[str, Any]) -> List[tuple]:
    first = [(key, extra[key]) for key in CATALOG_FIELDS if key in extra]
    rest = [(key, value) for key, value in extra.items() if key not in CATALOG_FIELDS]
    return first + rest


class ContextAwareLogger:
    """Wraps a ``logging.Logger`` and appends ``key=value`` extras to each message."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def _log(self, level: str, msg: str, extra: Optional[Dict[str, Any]] = None, **kwargs) -> None:
        extra = extra or {}
        if extra:
            msg = " | ".join([msg] + [f"{k}={v}" for k, v in _ordered_fields(extra)])
        getattr(self.logger, level)(msg, extra=extra, **kwargs)

    def set_level(self, level: Union[int, str]) -> None:
        self.logger.setLevel(level)

    def debug(self, msg, **kwargs):
        self._log("debug", msg, **kwargs)

    def info(self, msg, **kwargs):
        self._log("info", msg, **kwargs)

    def warning(self, msg, **kwargs):
        self._log("warning", msg, **kwargs)

    def error(self, msg, **kwargs):
        self._log("error", msg, **kwargs)

    def exception(self, msg, **kwargs):
        self._log("exception", msg, **kwargs)


class TenantContextFilter(logging.Filter):
    """Stamps the active tenant and correlation id on records that do not carry them."""

    def filter(self, record: logging.LogRecord) -> bool:
        # Imported here: tenant_context itself logs through this module
        from ..context.tenant_context import TenantContext

        if getattr(record, "tenant_id", None) is None:
            tenant_id = TenantContext.get_current_tenant_id()
            if tenant_id:
                record.tenant_id = tenant_id
        if getattr(record, "correlation_id", None) is None:
            correlation_id = get_correlation_id()
            if correlation_id:
                record.correlation_id = correlation_id
        return True


class AzureQueueHandler(logging.Handler):
    """
    Buffers catalog log entries and sends them to an Azure Storage Queue.

    One queue message per entry; the buffer is sent when it reaches
    ``batch_size`` and on flush/close. Delivery failures go to stderr and are
    never raised into the code that logged.
    """

    def __init__(
        self,
        queue_name: str = QueueName.LOGS.value,
        connection_string: Optional[str] = None,
        batch_size: int = 10,
    ):
        super().__init__()
        self.queue_name = queue_name
        self.connection_string = connection_string or get_config().queue.connection_string
        self.batch_size = batch_size
        self.log_buffer: List[Dict[str, Any]] = []

        if not self.connection_string:
            sys.stderr.write("Catalog log queue disabled: no Azure Storage connection string\n")
        else:
            self._ensure_queue_exists()

    def _ensure_queue_exists(self) -> None:
        try:
            service = QueueServiceClient.from_connection_string(self.connection_string)
            existing = {queue.name for queue in service.list_queues(name_starts_with=self.queue_name)}
            if self.queue_name not in existing:
                service.create_queue(self.queue_name)
        except Exception as e:
            sys.stderr.write(f"Failed to prepare catalog log queue {self.queue_name}: {e}\n")

    def build_entry(self, record: logging.LogRecord) -> Dict[str, Any]:
        """Structured form of a record: catalog identifiers on top, other extras under ``context``."""
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "source": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        extras = {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRIBUTES and not key.startswith("_")
        }
        for key in CATALOG_FIELDS:
            if extras.get(key) is not None:
                entry[key] = extras.pop(key)
        if extras:
            entry["context"] = extras

        if record.exc_info and record.exc_info[0]:
            entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": [line.rstrip() for line in traceback.format_exception(*record.exc_info)],
            }
        return entry

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.log_buffer.append(self.build_entry(record))
        except Exception:
            self.handleError(record)
            return
        if len(self.log_buffer) >= self.batch_size:
            self.flush()

    def flush(self) -> None:
        if not self.log_buffer or not self.connection_string:
            return
        entries, self.log_buffer = self.log_buffer, []
        try:
            queue = QueueClient.from_connection_string(
                conn_str=self.connection_string, queue_name=self.queue_name
            )
        except Exception as e:
            sys.stderr.write(f"Dropped {len(entries)} catalog log entries: {e}\n")
            return
        for entry in entries:
            try:
                queue.send_message(dumps(entry))
            except Exception as e:
                sys.stderr.write(f"Dropped catalog log entry: {e}\n")

    def close(self) -> None:
        self.flush()
        super().close()


def _level(value: Optional[Union[int, str]]) -> int:
    if value is None:
        value = get_config().logging.level
    if isinstance(value, str):
        return getattr(logging, value.upper(), logging.INFO)
    return value


def configure_logging(
    component_name: str,
    log_level: Optional[Union[int, str]] = None,
    enable_queue: Optional[bool] = None,
    queue_name: Optional[str] = None,
    queue_batch_size: int = 10,
    connection_string: Optional[str] = None,
) -> ContextAwareLogger:
    """
    Set up the ``catalog_core.<component_name>`` logger used by ``get_logger``.

    Unset arguments come from ``get_config()``: the logging level, the
    ``enable_logs_queue`` flag and the queue settings.
    """
    global _component_logger

    app_config = get_config()
    level = _level(log_level)
    if enable_queue is None:
        enable_queue = app_config.features.enable_logs_queue

    logger = logging.getLogger(f"{LOGGER_NAME}.{component_name}")
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    tenant_filter = TenantContextFilter()
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(app_config.logging.format))
    console_handler.addFilter(tenant_filter)
    logger.addHandler(console_handler)

    if enable_queue:
        queue_handler = AzureQueueHandler(
            queue_name=queue_name or app_config.queue.logs_queue_name,
            connection_string=connection_string or app_config.queue.connection_string,
            batch_size=queue_batch_size,
        )
        queue_handler.setLevel(level)
        queue_handler.addFilter(tenant_filter)
        logger.addHandler(queue_handler)

    _component_logger = ContextAwareLogger(logger)
    _component_logger.info(
        "Catalog logger configured",
        extra={"component": component_name, "queue_logging": enable_queue},
    )
    return _component_logger


def reset_logging() -> None:
    global _component_logger
    _component_logger = None


def get_logger(log_level: Optional[Union[int, str]] = None) -> ContextAwareLogger:
    """The configured component logger, else the ``catalog_core`` package logger."""
    if _component_logger is not None:
        return _component_logger
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(_level(log_level))
    return ContextAwareLogger(logger)
