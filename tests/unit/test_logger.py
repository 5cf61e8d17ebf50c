"""
Unit tests for logger utilities.

Tests ContextAwareLogger, the tenant filter and the Azure queue handler with
the storage clients mocked out.
"""

import json
import logging
from unittest.mock import MagicMock, Mock, patch

import pytest

from catalog_core.context.tenant_context import TenantContext
from catalog_core.exceptions import set_correlation_id
from catalog_core.utils.logger import (
    AzureQueueHandler,
    ContextAwareLogger,
    TenantContextFilter,
    configure_logging,
    get_logger,
    reset_logging,
)


class TestContextAwareLogger:
    def setup_method(self):
        self.mock_logger = Mock(spec=logging.Logger)
        self.context_logger = ContextAwareLogger(self.mock_logger)

    def test_no_extras(self):
        self.context_logger.info("Plain message")

        self.mock_logger.info.assert_called_once_with("Plain message", extra={})

    def test_catalog_fields_come_first(self):
        self.context_logger.info("Saved", extra={"is_new": True, "item_id": "42", "tenant_id": "tenant-a"})

        message = self.mock_logger.info.call_args.args[0]
        assert message == "Saved | tenant_id=tenant-a | item_id=42 | is_new=True"

    def test_extras_are_formatted_into_message(self):
        extra = {"kind": "amenity", "code": "wifi"}

        self.context_logger.warning("Toggled", extra=extra)

        self.mock_logger.warning.assert_called_once_with(
            "Toggled | kind=amenity | code=wifi", extra=extra
        )

    def test_set_level(self):
        self.context_logger.set_level(logging.DEBUG)

        self.mock_logger.setLevel.assert_called_once_with(logging.DEBUG)


class TestTenantContextFilter:
    def test_stamps_current_tenant(self):
        TenantContext.set_current_tenant("tenant-a")
        record = logging.LogRecord("test", logging.INFO, __file__, 1, "msg", None, None)

        assert TenantContextFilter().filter(record) is True
        assert record.tenant_id == "tenant-a"

    def test_no_tenant(self):
        record = logging.LogRecord("test", logging.INFO, __file__, 1, "msg", None, None)

        TenantContextFilter().filter(record)

        assert not hasattr(record, "tenant_id")

    def test_explicit_tenant_is_kept(self):
        TenantContext.set_current_tenant("tenant-a")
        record = logging.LogRecord("test", logging.INFO, __file__, 1, "msg", None, None)
        record.tenant_id = "tenant-b"

        TenantContextFilter().filter(record)

        assert record.tenant_id == "tenant-b"

    def test_stamps_correlation_id(self):
        set_correlation_id("corr-7")
        record = logging.LogRecord("test", logging.INFO, __file__, 1, "msg", None, None)

        TenantContextFilter().filter(record)

        assert record.correlation_id == "corr-7"


class TestAzureQueueHandler:
    @pytest.fixture
    def queue_service(self):
        with patch("catalog_core.utils.logger.QueueServiceClient") as service_cls:
            service = MagicMock()
            service.list_queues.return_value = []
            service_cls.from_connection_string.return_value = service
            yield service

    @pytest.fixture
    def queue_client(self):
        with patch("catalog_core.utils.logger.QueueClient") as client_cls:
            client = MagicMock()
            client_cls.from_connection_string.return_value = client
            yield client

    def _record(self, message="Saved item", **extra):
        record = logging.LogRecord("catalog_core", logging.INFO, __file__, 10, message, None, None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_creates_missing_queue(self, queue_service):
        AzureQueueHandler(queue_name="logs-queue", connection_string="UseDevelopmentStorage=true")

        queue_service.create_queue.assert_called_once_with("logs-queue")

    def test_build_entry_promotes_catalog_fields(self, queue_service):
        handler = AzureQueueHandler(connection_string="UseDevelopmentStorage=true")

        entry = handler.build_entry(
            self._record(tenant_id="tenant-a", kind="amenity", code="wifi", fields=["name"])
        )

        assert entry["message"] == "Saved item"
        assert entry["tenant_id"] == "tenant-a"
        assert entry["kind"] == "amenity"
        assert entry["code"] == "wifi"
        assert entry["context"] == {"fields": ["name"]}
        assert "exception" not in entry

    def test_flushes_at_batch_size(self, queue_service, queue_client):
        handler = AzureQueueHandler(connection_string="UseDevelopmentStorage=true", batch_size=2)

        handler.emit(self._record("first"))
        queue_client.send_message.assert_not_called()

        handler.emit(self._record("second"))
        assert queue_client.send_message.call_count == 2
        sent = json.loads(queue_client.send_message.call_args_list[0][0][0])
        assert sent["message"] == "first"
        assert handler.log_buffer == []

    def test_close_flushes_remaining(self, queue_service, queue_client):
        handler = AzureQueueHandler(connection_string="UseDevelopmentStorage=true", batch_size=10)
        handler.emit(self._record())

        handler.close()

        queue_client.send_message.assert_called_once()

    def test_without_connection_string_nothing_is_sent(self, queue_client):
        with patch.dict("os.environ", {}, clear=True):
            handler = AzureQueueHandler(connection_string=None, batch_size=1)
        handler.emit(self._record())

        queue_client.send_message.assert_not_called()


class TestConfigureLogging:
    def test_component_logger_is_returned_by_get_logger(self):
        logger = configure_logging("catalog-api", log_level="DEBUG", enable_queue=False)

        assert get_logger() is logger
        assert logger.logger.name == "catalog_core.catalog-api"
        assert logger.logger.level == logging.DEBUG

    def test_queue_handler_attached_when_enabled(self):
        with patch("catalog_core.utils.logger.AzureQueueHandler") as handler_cls:
            handler_cls.return_value = MagicMock(spec=logging.Handler)
            handler_cls.return_value.level = logging.INFO
            logger = configure_logging(
                "catalog-worker", enable_queue=True, connection_string="UseDevelopmentStorage=true"
            )

        handler_cls.assert_called_once()
        assert handler_cls.return_value in logger.logger.handlers

    def test_reset_falls_back_to_package_logger(self):
        configure_logging("catalog-api", enable_queue=False)
        reset_logging()

        assert get_logger().logger.name == "catalog_core"
