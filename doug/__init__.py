"""
Doug manages a collection of MCP server clients: it connects them over streamable HTTP
or stdio, aggregates their capabilities and resources, and closes all of them reliably.
"""

from doug._doug import Doug, ResourceContents
from doug.mcp import ClientRegistry, McpClient
from doug.types import TeardownFailure

__version__ = "0.0.1"

__all__ = [
    "Doug",
    "ResourceContents",
    "ClientRegistry",
    "McpClient",
    "TeardownFailure",
]
