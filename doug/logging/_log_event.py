"""
Structured logging events for Doug.

This module provides structured event classes for logging the lifecycle of
the clients managed by a registry.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional
from uuid import uuid4

from pydantic import BaseModel, Field


class EventType(str, Enum):
    """Types of events that can be logged.

    Attributes
    ----------
    CLIENT_CONNECT : str
        Client connect event
    CLIENT_ERROR : str
        Asynchronous client error event
    CLIENT_CLOSE : str
        Client close event
    TEARDOWN_ERROR : str
        Teardown failure event
    """
    CLIENT_CONNECT = "ClientConnect"
    CLIENT_ERROR = "ClientError"
    CLIENT_CLOSE = "ClientClose"
    TEARDOWN_ERROR = "TeardownError"


class BaseEvent(BaseModel):
    """Base class for all structured events.

    Attributes
    ----------
    event_id : str
        Unique identifier for this event
    timestamp : datetime
        Timestamp when the event occurred
    event_type : EventType
        Type of the event
    source : str, optional
        Source component that generated the event
    metadata : Dict[str, Any]
        Additional metadata about the event
    """

    event_id: str = Field(default_factory=lambda: str(uuid4()))
    """Unique identifier for this event."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    """Timestamp when the event occurred."""

    event_type: EventType
    """Type of the event."""

    source: Optional[str] = None
    """Source component that generated the event."""

    metadata: Dict[str, Any] = Field(default_factory=dict)
    """Additional metadata about the event."""

    def to_json(self) -> str:
        """Convert the event to JSON string."""
        return json.dumps(self.model_dump(), default=str)

    def __str__(self) -> str:
        """String representation of the event."""
        return self.to_json()


class ClientEvent(BaseEvent):
    """Base class for client-related events.

    Attributes
    ----------
    client_id : str
        The ID under which the client is registered
    """

    client_id: str
    """The ID under which the client is registered."""


class ClientConnectEvent(ClientEvent):
    """Event emitted when a client has connected to its server.

    Attributes
    ----------
    transport_type : str
        Kind of transport, `http` or `stdio`
    target : str
        The URL or the command line the client connected to
    session_id : str, optional
        The session identifier assigned by the server, if any
    """

    event_type: EventType = EventType.CLIENT_CONNECT

    transport_type: str
    """Kind of transport, `http` or `stdio`."""

    target: str
    """The URL or the command line the client connected to."""

    session_id: Optional[str] = None
    """The session identifier assigned by the server, if any."""


class ClientErrorEvent(ClientEvent):
    """Event emitted when a connected client reports an asynchronous error.

    Attributes
    ----------
    error_type : str
        Type of the error
    error_message : str
        Error message
    """

    event_type: EventType = EventType.CLIENT_ERROR

    error_type: str
    """Type of the error."""

    error_message: str
    """Error message."""


class ClientCloseEvent(ClientEvent):
    """Event emitted when a client session has been closed."""

    event_type: EventType = EventType.CLIENT_CLOSE


class TeardownErrorEvent(ClientEvent):
    """Event emitted when one step of a client teardown fails.

    Attributes
    ----------
    stage : str
        The teardown step that failed
    error_type : str
        Type of the error
    error_message : str
        Error message
    """

    event_type: EventType = EventType.TEARDOWN_ERROR

    stage: str
    """The teardown step that failed."""

    error_type: str
    """Type of the error."""

    error_message: str
    """Error message."""
