from ._log_event import *
from ._logger import *

__all__ = [
    # Event types
    "EventType",
    # Event classes
    "BaseEvent",
    "ClientEvent",
    "ClientConnectEvent",
    "ClientErrorEvent",
    "ClientCloseEvent",
    "TeardownErrorEvent",
    # Logger class
    "DougLogger",
    "ConsoleHandler",
    # Logger factory functions
    "get_logger",
    "get_registry_logger",
    "get_client_logger",
    "get_transport_logger",
    # Setup functions
    "setup_logging",
    "setup_development_logging",
    "setup_production_logging",
    "setup_quiet_logging",
    "setup_verbose_logging",
]
