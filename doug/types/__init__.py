from ._error import (
    ClientNotFoundError,
    McpTransportError,
    ClientNotConnectedError,
    CapabilityUnavailableError,
    ResourceReadError,
)
from ._teardown import TeardownFailure

__all__ = [
    "ClientNotFoundError",
    "McpTransportError",
    "ClientNotConnectedError",
    "CapabilityUnavailableError",
    "ResourceReadError",
    "TeardownFailure",
]
