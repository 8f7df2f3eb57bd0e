"""
Logging constants for Doug.

This module defines the logger names and other constants used throughout the Doug package.
"""

ROOT_LOGGER_NAME = "doug"
"""Logger name used for root logger"""

EVENT_LOGGER_NAME = "doug.events"
"""Logger name used for structured event logging"""

TRACE_LOGGER_NAME = "doug.trace"
"""Logger name used for developer intended trace logging. The content and format of this log should not be depended upon."""

REGISTRY_LOGGER_NAME = "doug.registry"
"""Logger name used for client registry logging"""

CLIENT_LOGGER_NAME = "doug.client"
"""Logger name used for protocol client logging"""

TRANSPORT_LOGGER_NAME = "doug.transport"
"""Logger name used for transport logging"""

# Teardown stages
STAGE_TERMINATE_SESSION = "terminate_session"
"""Teardown stage that terminates a transport session"""

STAGE_CLOSE_CLIENT = "close_client"
"""Teardown stage that closes the protocol client"""

STAGE_CLOSE_TRANSPORT = "close_transport"
"""Teardown stage that closes the transport"""

STAGE_TEARDOWN = "teardown"
"""Any other failure raised while tearing down an entry"""
