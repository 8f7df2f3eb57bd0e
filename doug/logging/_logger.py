"""
Main logging module for Doug.

This module provides convenient logging functionality for the Doug package,
including structured event logging for the client lifecycle.
"""

import logging
from typing import Any, Dict, List, Optional

from doug.constants import (
    CLIENT_LOGGER_NAME,
    EVENT_LOGGER_NAME,
    REGISTRY_LOGGER_NAME,
    ROOT_LOGGER_NAME,
    TRACE_LOGGER_NAME,
    TRANSPORT_LOGGER_NAME,
)

from ._log_event import (
    BaseEvent,
    ClientCloseEvent,
    ClientConnectEvent,
    ClientErrorEvent,
    TeardownErrorEvent,
)


class DougLogger:
    """Logger of one Doug component.

    Plain messages go to the component logger `name`. Lifecycle events are written
    twice: as a readable message on the component logger, and as a JSON event on the
    `doug.events` logger, tagged with `source`.

    Parameters
    ----------
    name : str
        Name of the component logger.
    source : str, optional
        The component instance reported as the source of events, e.g. a registry name.
    """

    def __init__(self, name: str, source: Optional[str] = None):
        self._logger = logging.getLogger(name)
        self._event_logger = logging.getLogger(EVENT_LOGGER_NAME)
        self._source = source

    def _log_event(self, event: BaseEvent) -> None:
        if not self._event_logger.isEnabledFor(logging.DEBUG):
            return
        if self._source:
            event.source = self._source
        self._event_logger.debug(event)

    # Client lifecycle events
    def log_client_connect(
        self,
        client_id: str,
        transport_type: str,
        target: str,
        session_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Log client connect event.

        Parameters
        ----------
        client_id : str
            The ID of the client
        transport_type : str
            Kind of transport, `http` or `stdio`
        target : str
            The URL or the command line the client connected to
        session_id : str, optional
            The session identifier assigned by the server
        metadata : Dict[str, Any], optional
            What is known about the server, e.g. its name and version
        """
        if session_id is not None:
            self._logger.info("Connected client %s with session ID: %s", client_id, session_id)
        else:
            self._logger.info("Connected client %s via %s", client_id, transport_type)
        event = ClientConnectEvent(
            client_id=client_id,
            transport_type=transport_type,
            target=target,
            session_id=session_id,
            metadata=metadata or {},
        )
        self._log_event(event)

    def log_client_error(self, client_id: str, error: BaseException) -> None:
        """Log an asynchronous client error.

        Parameters
        ----------
        client_id : str
            The ID of the client
        error : BaseException
            The reported error
        """
        self._logger.warning("Client error (%s): %s", client_id, error)
        event = ClientErrorEvent(
            client_id=client_id,
            error_type=type(error).__name__,
            error_message=str(error),
        )
        self._log_event(event)

    def log_client_close(self, client_id: str) -> None:
        """Log client close event.

        Parameters
        ----------
        client_id : str
            The ID of the client
        """
        self._logger.info("Client closed (%s)", client_id)
        self._log_event(ClientCloseEvent(client_id=client_id))

    def log_teardown_error(
        self,
        client_id: str,
        stage: str,
        error: BaseException,
    ) -> None:
        """Log a failed teardown step.

        Parameters
        ----------
        client_id : str
            The ID of the client
        stage : str
            The teardown step that failed
        error : BaseException
            The error raised by the step
        """
        self._logger.error("Error during %s for %s: %s", stage, client_id, error)
        event = TeardownErrorEvent(
            client_id=client_id,
            stage=stage,
            error_type=type(error).__name__,
            error_message=str(error),
        )
        self._log_event(event)

    # Plain logging methods
    def trace(self, message: str, *args, **kwargs) -> None:
        """Log a trace message on the trace logger."""
        logging.getLogger(TRACE_LOGGER_NAME).debug(message, *args, **kwargs)

    def debug(self, message: str, *args, **kwargs) -> None:
        """Log a debug message."""
        self._logger.debug(message, *args, **kwargs)

    def info(self, message: str, *args, **kwargs) -> None:
        """Log an info message."""
        self._logger.info(message, *args, **kwargs)

    def warning(self, message: str, *args, **kwargs) -> None:
        """Log a warning message."""
        self._logger.warning(message, *args, **kwargs)

    def error(self, message: str, *args, **kwargs) -> None:
        """Log an error message."""
        self._logger.error(message, *args, **kwargs)


def get_logger(name: str, source: Optional[str] = None) -> DougLogger:
    """Get a Doug logger instance.

    Parameters
    ----------
    name : str
        Logger name
    source : str, optional
        Source component name

    Returns
    -------
    DougLogger
        DougLogger instance
    """
    return DougLogger(name, source)


def get_registry_logger(registry_name: str) -> DougLogger:
    """Get a logger for a client registry.

    Parameters
    ----------
    registry_name : str
        Name of the registry, used as the event source

    Returns
    -------
    DougLogger
        DougLogger instance for registry logging
    """
    return DougLogger(REGISTRY_LOGGER_NAME, registry_name)


def get_client_logger(client_name: str) -> DougLogger:
    """Get a logger for a protocol client."""
    return DougLogger(f"{CLIENT_LOGGER_NAME}.{client_name}", client_name)


def get_transport_logger(transport_kind: str) -> DougLogger:
    """Get a logger for a transport kind (`http` or `stdio`)."""
    return DougLogger(f"{TRANSPORT_LOGGER_NAME}.{transport_kind}", transport_kind)


_COMPONENT_LOGGERS = {
    'registry': REGISTRY_LOGGER_NAME,
    'client': CLIENT_LOGGER_NAME,
    'transport': TRANSPORT_LOGGER_NAME,
    'events': EVENT_LOGGER_NAME,
    'trace': TRACE_LOGGER_NAME,
}

_CONSOLE_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'


class ConsoleHandler(logging.StreamHandler):
    """The stderr handler installed by `setup_logging()` when no handlers are given.

    A later setup replaces it instead of stacking another one.
    """

    def __init__(self, level: int = logging.NOTSET):
        super().__init__()
        self.setLevel(level)
        self.setFormatter(logging.Formatter(_CONSOLE_FORMAT))


def setup_logging(
    level: int = logging.INFO,
    enable_trace: bool = True,
    enable_events: bool = True,
    handlers: Optional[List[logging.Handler]] = None,
    component_levels: Optional[Dict[str, int]] = None,
) -> None:
    """Configure the `doug` logger hierarchy.

    Parameters
    ----------
    level : int, default=logging.INFO
        Level of the package root logger and of the registry, client and transport loggers.
    enable_trace : bool, default=True
        Whether trace messages are emitted.
    enable_events : bool, default=True
        Whether the structured lifecycle events are emitted. Events are written at
        DEBUG level to their own logger.
    handlers : List[logging.Handler], optional
        Handlers attached to the package root logger. A console handler is used
        when none are given.
    component_levels : Dict[str, int], optional
        Levels overriding `level` per component. Known components are 'registry',
        'client', 'transport', 'events' and 'trace'; other keys are ignored.
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)

    for handler in list(root_logger.handlers):
        if isinstance(handler, ConsoleHandler):
            root_logger.removeHandler(handler)
    for handler in handlers or [ConsoleHandler(level)]:
        root_logger.addHandler(handler)

    levels = {component: level for component in _COMPONENT_LOGGERS}
    levels['trace'] = logging.DEBUG if enable_trace else logging.CRITICAL
    levels['events'] = logging.DEBUG if enable_events else logging.CRITICAL
    levels.update({
        component: component_level
        for component, component_level in (component_levels or {}).items()
        if component in _COMPONENT_LOGGERS
    })

    for component, logger_name in _COMPONENT_LOGGERS.items():
        # Records propagate to the handlers of the package root logger.
        logging.getLogger(logger_name).setLevel(levels[component])


def setup_development_logging() -> None:
    """Log everything at DEBUG, lifecycle events and traces included."""
    setup_logging(level=logging.DEBUG, enable_trace=True, enable_events=True)


def setup_production_logging() -> None:
    """Log warnings and errors only.

    Teardown failures are logged at ERROR, so they stay visible.
    """
    setup_logging(level=logging.WARNING, enable_trace=False, enable_events=False)


def setup_quiet_logging() -> None:
    """Log errors only."""
    setup_logging(level=logging.ERROR, enable_trace=False, enable_events=False)


def setup_verbose_logging() -> None:
    """Log everything at DEBUG, with explicit DEBUG levels for the client and transport loggers."""
    setup_logging(
        level=logging.DEBUG,
        enable_trace=True,
        enable_events=True,
        component_levels={
            'client': logging.DEBUG,
            'transport': logging.DEBUG,
        },
    )
