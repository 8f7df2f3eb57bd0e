from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Tuple

import httpx
from mcp.client.stdio import stdio_client, StdioServerParameters
from mcp.client.streamable_http import streamablehttp_client, MCP_SESSION_ID

from doug.config import HttpClientConfig, create_http_client_from_config, resolve_http_client_kwargs
from doug.logging import get_transport_logger
from doug.types import McpTransportError
from doug.utils import AsyncContextOwner

TransportStreams = Tuple[Any, Any]
"""The (read_stream, write_stream) pair a client session is built on."""


class McpTransport(ABC):
    """
    The abstract base class for a bidirectional channel to an MCP server.

    A transport opens the channel with `connect()`, which returns the read and write
    streams a client session is built on, and releases it with `close()`. The
    underlying SDK context is held open by a dedicated owner task, so `connect()` and
    `close()` may be called from different tasks.

    Methods
    -------
    connect
        Open the channel and return its streams.
    close
        Close the channel. Closing a transport that is not connected is a no-op.
    open_streams
        The SDK async context that produces the streams.
    """

    kind: str
    """The kind of the transport, used in logs."""

    on_error: Optional[Callable[[BaseException], None]]
    """Observer called when the channel fails after it was connected."""

    def __init__(self):
        self.on_error = None
        self._owner = AsyncContextOwner(name=f"{self.kind}-transport", on_failure=self._report_failure)

    @property
    def is_connected(self) -> bool:
        return self._owner.is_open

    @property
    def session_id(self) -> Optional[str]:
        """The session identifier assigned by the server, if the transport has one."""
        return None

    @property
    @abstractmethod
    def target(self) -> str:
        """A readable description of what the transport connects to."""
        ...

    @abstractmethod
    def open_streams(self) -> Any:
        """
        Get the async context that opens the channel.

        Returns
        -------
        AsyncContextManager[TransportStreams]
            An async context manager yielding the read and write streams.
        """
        ...

    async def connect(self) -> TransportStreams:
        """
        Open the channel.

        Returns
        -------
        TransportStreams
            The read and write streams of the channel.

        Raises
        ------
        McpTransportError
            If the channel could not be opened.
        """
        try:
            return await self._owner.open(self.open_streams)
        except McpTransportError:
            raise
        except Exception as ex:
            raise McpTransportError(f"Failed to connect {self.kind} transport: target={self.target}, error={ex}") from ex

    async def close(self) -> None:
        """
        Close the channel.

        Raises
        ------
        McpTransportError
            If the channel failed while closing.
        """
        try:
            await self._owner.close()
        except Exception as ex:
            raise McpTransportError(f"Failed to close {self.kind} transport: target={self.target}, error={ex}") from ex

    def _report_failure(self, error: BaseException) -> None:
        if self.on_error is not None:
            self.on_error(error)


class McpSessionTransport(McpTransport):
    """
    A transport whose server keeps a session that can be terminated explicitly.
    """

    @abstractmethod
    async def terminate_session(self) -> None:
        """
        Ask the server to terminate the session of this transport.
        """
        ...


class StdioTransport(McpTransport):
    """
    The transport to an MCP server launched as a subprocess and spoken to over stdio.
    """
    kind = "stdio"

    def __init__(
        self,
        command: str,
        args: Optional[List[str]] = None,
        *,
        env: Optional[Dict[str, str]] = None,
        encoding: Optional[str] = None,
        **kwargs: Any,
    ):
        self.command = command
        self.args = list(args or [])
        self.env = env
        self.encoding = encoding or "utf-8"
        self.server_kwargs = kwargs
        super().__init__()

    @property
    def target(self) -> str:
        return " ".join([self.command, *self.args])

    def open_streams(self) -> Any:
        start_args = {
            "command": self.command,
            "args": self.args,
            "env": self.env,
            "encoding": self.encoding,
        }
        if self.server_kwargs:
            start_args.update(self.server_kwargs)

        return stdio_client(server=StdioServerParameters(**start_args))


class StreamableHttpTransport(McpSessionTransport):
    """
    The transport to an MCP server over streamable HTTP.
    """
    kind = "http"

    url: str
    """The URL of the MCP server."""

    def __init__(
        self,
        url: str,
        *,
        http_client_config: Optional[HttpClientConfig] = None,
        sse_read_timeout: Optional[float] = None,
        **kwargs: Any,
    ):
        self.url = url
        self.http_client_config = http_client_config
        self.sse_read_timeout = sse_read_timeout
        self.client_kwargs = kwargs
        self._get_session_id: Optional[Callable[[], Optional[str]]] = None
        self._logger = get_transport_logger(self.kind)
        super().__init__()

    @property
    def target(self) -> str:
        return self.url

    @property
    def session_id(self) -> Optional[str]:
        if self._get_session_id is None:
            return None
        return self._get_session_id()

    def open_streams(self) -> Any:
        return self._open_streams()

    @asynccontextmanager
    async def _open_streams(self) -> AsyncIterator[TransportStreams]:
        start_args: Dict[str, Any] = {
            "url": self.url,
            # The session is terminated explicitly by terminate_session().
            "terminate_on_close": False,
        }
        http_kwargs = resolve_http_client_kwargs(self.http_client_config)
        if "headers" in http_kwargs:
            start_args["headers"] = http_kwargs["headers"]
        if "auth" in http_kwargs:
            start_args["auth"] = http_kwargs["auth"]
        if self.sse_read_timeout is not None:
            start_args["sse_read_timeout"] = self.sse_read_timeout
        if self.client_kwargs:
            start_args.update(self.client_kwargs)

        async with streamablehttp_client(**start_args) as (read_stream, write_stream, get_session_id):
            self._get_session_id = get_session_id
            try:
                yield read_stream, write_stream
            finally:
                self._get_session_id = None

    async def terminate_session(self) -> None:
        """
        Terminate the server session with an HTTP DELETE request.

        Does nothing when no session was established. A server answering
        `405 Method Not Allowed` does not support explicit termination, which is not
        treated as an error.

        Raises
        ------
        McpTransportError
            If the request failed or the server rejected it.
        """
        session_id = self.session_id
        if session_id is None:
            return

        try:
            async with create_http_client_from_config(self.http_client_config) as client:
                response = await client.delete(self.url, headers={MCP_SESSION_ID: session_id})
        except httpx.HTTPError as ex:
            raise McpTransportError(f"Failed to terminate session {session_id} at {self.url}: {ex}") from ex

        if response.status_code == 405:
            self._logger.debug("Server at %s does not support session termination", self.url)
        elif response.is_error:
            raise McpTransportError(
                f"Failed to terminate session {session_id} at {self.url}: HTTP {response.status_code}"
            )
        else:
            self._logger.debug("Terminated session %s at %s", session_id, self.url)
