"""
Tests for Doug logging functionality.
"""

import json
import logging
from io import StringIO

from doug.constants import (
    EVENT_LOGGER_NAME,
    REGISTRY_LOGGER_NAME,
    ROOT_LOGGER_NAME,
    TRACE_LOGGER_NAME,
    TRANSPORT_LOGGER_NAME,
)
from doug.logging import (
    ConsoleHandler,
    get_client_logger,
    get_logger,
    get_registry_logger,
    get_transport_logger,
    setup_logging,
    setup_development_logging,
    setup_production_logging,
    setup_quiet_logging,
    setup_verbose_logging,
)
from doug.logging import (
    ClientCloseEvent,
    ClientConnectEvent,
    ClientErrorEvent,
    EventType,
    TeardownErrorEvent,
)


class TestEventClasses:
    """Test event class functionality."""

    def test_client_connect_event(self):
        """Test ClientConnectEvent creation and serialization."""
        event = ClientConnectEvent(
            client_id="candidate",
            transport_type="http",
            target="http://127.0.0.1:8000/mcp",
            session_id="abc123",
            metadata={"attempt": 1},
        )

        assert event.client_id == "candidate"
        assert event.session_id == "abc123"
        assert event.metadata == {"attempt": 1}
        assert event.event_type == EventType.CLIENT_CONNECT
        assert event.event_id

        event_data = json.loads(str(event))
        assert event_data["event_type"] == "ClientConnect"
        assert event_data["target"] == "http://127.0.0.1:8000/mcp"
        assert event_data["session_id"] == "abc123"

    def test_client_connect_event_without_session(self):
        event = ClientConnectEvent(client_id="echo", transport_type="stdio", target="python server.py")

        event_data = json.loads(event.to_json())
        assert event_data["session_id"] is None
        assert event_data["source"] is None

    def test_client_error_event(self):
        event = ClientErrorEvent(
            client_id="candidate",
            error_type="ConnectionError",
            error_message="stream closed",
        )

        assert event.event_type == EventType.CLIENT_ERROR
        event_data = json.loads(str(event))
        assert event_data["event_type"] == "ClientError"
        assert event_data["error_message"] == "stream closed"

    def test_client_close_event(self):
        event = ClientCloseEvent(client_id="candidate")

        assert event.event_type == EventType.CLIENT_CLOSE
        assert json.loads(str(event))["event_type"] == "ClientClose"

    def test_teardown_error_event(self):
        event = TeardownErrorEvent(
            client_id="candidate",
            stage="close_transport",
            error_type="McpTransportError",
            error_message="boom",
        )

        event_data = json.loads(str(event))
        assert event_data["event_type"] == "TeardownError"
        assert event_data["stage"] == "close_transport"
        # The timestamp is serialized as a string.
        assert isinstance(event_data["timestamp"], str)


class TestLoggerFunctions:
    """Test logger factory functions."""

    def test_get_logger(self):
        logger = get_logger("doug.test", "unit")
        assert logger._logger.name == "doug.test"
        assert logger._source == "unit"

    def test_get_registry_logger(self):
        logger = get_registry_logger("main-registry")
        assert logger._logger.name == REGISTRY_LOGGER_NAME
        assert logger._source == "main-registry"

    def test_get_client_logger(self):
        logger = get_client_logger("doug-client")
        assert logger._logger.name == "doug.client.doug-client"

    def test_get_transport_logger(self):
        logger = get_transport_logger("http")
        assert logger._logger.name == f"{TRANSPORT_LOGGER_NAME}.http"


class TestDougLogger:
    """Test the messages and events written by DougLogger."""

    def test_log_client_connect_with_session(self, caplog):
        caplog.set_level(logging.DEBUG, logger=ROOT_LOGGER_NAME)
        logger = get_registry_logger("main-registry")

        logger.log_client_connect("candidate", "http", "http://127.0.0.1:8000/mcp", session_id="abc123")

        messages = [(r.name, r.levelno, r.getMessage()) for r in caplog.records]
        assert (REGISTRY_LOGGER_NAME, logging.INFO, "Connected client candidate with session ID: abc123") in messages

        events = [r for r in caplog.records if r.name == EVENT_LOGGER_NAME]
        assert len(events) == 1
        event_data = json.loads(events[0].getMessage())
        assert event_data["event_type"] == "ClientConnect"
        assert event_data["source"] == "main-registry"

    def test_log_client_connect_without_session(self, caplog):
        caplog.set_level(logging.DEBUG, logger=ROOT_LOGGER_NAME)
        logger = get_registry_logger("main-registry")

        logger.log_client_connect("echo", "stdio", "python server.py")

        assert "Connected client echo via stdio" in caplog.text

    def test_log_client_error(self, caplog):
        caplog.set_level(logging.DEBUG, logger=ROOT_LOGGER_NAME)
        logger = get_registry_logger("main-registry")

        logger.log_client_error("candidate", ConnectionError("stream closed"))

        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert [r.getMessage() for r in warnings] == ["Client error (candidate): stream closed"]
        events = [json.loads(r.getMessage()) for r in caplog.records if r.name == EVENT_LOGGER_NAME]
        assert events[0]["error_type"] == "ConnectionError"

    def test_log_client_close(self, caplog):
        caplog.set_level(logging.DEBUG, logger=ROOT_LOGGER_NAME)
        logger = get_registry_logger("main-registry")

        logger.log_client_close("candidate")

        assert "Client closed (candidate)" in caplog.text

    def test_log_teardown_error(self, caplog):
        caplog.set_level(logging.DEBUG, logger=ROOT_LOGGER_NAME)
        logger = get_registry_logger("main-registry")

        logger.log_teardown_error("candidate", "terminate_session", RuntimeError("refused"))

        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert [r.getMessage() for r in errors] == ["Error during terminate_session for candidate: refused"]
        events = [json.loads(r.getMessage()) for r in caplog.records if r.name == EVENT_LOGGER_NAME]
        assert events[0]["stage"] == "terminate_session"
        assert events[0]["error_type"] == "RuntimeError"

    def test_trace_goes_to_trace_logger(self, caplog):
        caplog.set_level(logging.DEBUG, logger=ROOT_LOGGER_NAME)
        logger = get_logger("doug.test")

        logger.trace("tracing %s", "value")

        assert [(r.name, r.getMessage()) for r in caplog.records] == [(TRACE_LOGGER_NAME, "tracing value")]


class TestSetupLogging:
    """Test logging setup functions."""

    def test_setup_logging_with_custom_handler(self):
        stream = StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter("%(name)s:%(levelname)s:%(message)s"))

        setup_logging(level=logging.INFO, handlers=[handler])
        get_registry_logger("main-registry").info("Connecting client %s", "candidate")
        get_registry_logger("main-registry").debug("hidden")

        output = stream.getvalue()
        assert "doug.registry:INFO:Connecting client candidate" in output
        assert "hidden" not in output

    def test_repeated_setup_keeps_one_console_handler(self):
        custom = logging.NullHandler()
        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        root_logger.addHandler(custom)

        setup_development_logging()
        setup_production_logging()

        consoles = [h for h in root_logger.handlers if isinstance(h, ConsoleHandler)]
        assert len(consoles) == 1
        assert consoles[0].level == logging.WARNING
        assert custom in root_logger.handlers

    def test_setup_logging_component_levels(self):
        setup_logging(
            level=logging.INFO,
            handlers=[logging.NullHandler()],
            component_levels={"transport": logging.ERROR, "unknown": logging.DEBUG},
        )

        assert logging.getLogger(ROOT_LOGGER_NAME).level == logging.INFO
        assert logging.getLogger(REGISTRY_LOGGER_NAME).level == logging.INFO
        assert logging.getLogger(TRANSPORT_LOGGER_NAME).level == logging.ERROR

    def test_setup_logging_disables_events_and_trace(self):
        setup_logging(level=logging.DEBUG, enable_trace=False, enable_events=False, handlers=[logging.NullHandler()])

        assert logging.getLogger(EVENT_LOGGER_NAME).level == logging.CRITICAL
        assert logging.getLogger(TRACE_LOGGER_NAME).level == logging.CRITICAL

    def test_setup_development_logging(self):
        setup_development_logging()

        assert logging.getLogger(ROOT_LOGGER_NAME).level == logging.DEBUG
        assert logging.getLogger(EVENT_LOGGER_NAME).level == logging.DEBUG

    def test_setup_production_logging(self):
        setup_production_logging()

        assert logging.getLogger(ROOT_LOGGER_NAME).level == logging.WARNING
        assert logging.getLogger(EVENT_LOGGER_NAME).level == logging.CRITICAL

    def test_setup_quiet_logging(self):
        setup_quiet_logging()

        assert logging.getLogger(REGISTRY_LOGGER_NAME).level == logging.ERROR

    def test_setup_verbose_logging(self):
        setup_verbose_logging()

        assert logging.getLogger(TRANSPORT_LOGGER_NAME).level == logging.DEBUG
        assert logging.getLogger(TRACE_LOGGER_NAME).level == logging.DEBUG
