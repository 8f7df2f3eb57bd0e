"""
The MCP module manages the clients Doug talks to MCP (Model Context Protocol) servers with.
It provides:

- **Transports**: channels to an MCP server, either streamable HTTP (`StreamableHttpTransport`,
  whose server session can be terminated explicitly) or a subprocess spoken to over stdio
  (`StdioTransport`).
- **Client**: `McpClient` is bound to one transport, negotiates capabilities with the server
  and reads resources from it.
- **Registry**: `ClientRegistry` owns clients and their transports by client ID, connects them,
  and tears all of them down concurrently, absorbing the failures of misbehaving clients.

Aggregation across all registered clients is provided by `doug.Doug`.
"""

from doug.mcp._transport import (
    McpTransport,
    McpSessionTransport,
    StdioTransport,
    StreamableHttpTransport,
)
from doug.mcp._client import McpClient
from doug.mcp._client_registry import ClientRegistry, split_args

__all__ = [
    "McpTransport",
    "McpSessionTransport",
    "StdioTransport",
    "StreamableHttpTransport",
    "McpClient",
    "ClientRegistry",
    "split_args",
]
