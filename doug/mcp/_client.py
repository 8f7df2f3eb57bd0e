from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Any, AsyncIterator, Callable, Optional, Tuple

from pydantic import AnyUrl
from mcp.client.session import ClientSession
from mcp.types import Implementation, InitializeResult, ReadResourceResult, ServerCapabilities

from doug.logging import get_client_logger
from doug.mcp._transport import McpTransport
from doug.types import ClientNotConnectedError, McpTransportError
from doug.utils import AsyncContextOwner


class McpClient:
    """
    A client of one MCP server, bound to exactly one transport.

    The client announces itself with a name and a version, negotiates capabilities
    with the server when it connects, and then issues requests to it. Errors that
    happen while the session runs in the background are reported to the `on_error`
    observer, and `on_close` is called once the session has been closed.

    Parameters
    ----------
    name : str
        The name the client announces to the server.
    version : str
        The version the client announces to the server.
    request_timeout : Optional[float]
        Read timeout in seconds for requests to the server. None means no timeout.

    Example
    -------
    >>> client = McpClient(name="doug-client", version="1.0.0")
    >>> await client.connect(StdioTransport("python", ["server.py"]))
    >>> result = await client.read_resource("candidate-info://resume-url")
    >>> await client.close()
    """

    client_info: Implementation
    """The implementation info announced to the server."""

    request_timeout: Optional[float]
    """Read timeout in seconds for requests to the server."""

    on_error: Optional[Callable[[BaseException], None]]
    """Observer called with errors raised while the session runs. Never awaited."""

    on_close: Optional[Callable[[], None]]
    """Observer called after the session was closed. Never awaited."""

    def __init__(self, name: str, version: str, *, request_timeout: Optional[float] = None):
        self.client_info = Implementation(name=name, version=version)
        self.request_timeout = request_timeout
        self.on_error = None
        self.on_close = None

        self._transport: Optional[McpTransport] = None
        self._session: Optional[ClientSession] = None
        self._initialize_result: Optional[InitializeResult] = None
        self._owner = AsyncContextOwner(name=f"client-{name}", on_failure=self._report_error)
        self._logger = get_client_logger(name)

    @property
    def name(self) -> str:
        return self.client_info.name

    @property
    def transport(self) -> Optional[McpTransport]:
        """The transport the client was connected with."""
        return self._transport

    @property
    def is_connected(self) -> bool:
        return self._session is not None

    async def connect(self, transport: McpTransport) -> None:
        """
        Connect to the server behind `transport` and negotiate capabilities.

        The transport is connected first if needed, and its background errors are
        forwarded to the `on_error` observer of this client.

        Raises
        ------
        McpTransportError
            If the transport could not be opened or the session could not be initialized.
        """
        self._transport = transport
        transport.on_error = self._report_error

        if transport.is_connected:
            raise McpTransportError(f"Transport of client {self.name} is already in use: target={transport.target}")
        streams = await transport.connect()

        try:
            session, result = await self._owner.open(lambda: self._open_session(streams))
        except Exception as ex:
            raise McpTransportError(
                f"Failed to create session to MCP server: client={self.name}, target={transport.target}, error={ex}"
            ) from ex

        self._session = session
        self._initialize_result = result
        self._logger.debug(
            "Client %s initialized with %s (protocol %s)",
            self.name, result.serverInfo.name, result.protocolVersion,
        )

    async def close(self) -> None:
        """
        Close the session. The transport is left open; it is closed separately.

        Closing a client that is not connected is a no-op.
        """
        was_connected = self._session is not None
        self._session = None
        try:
            await self._owner.close()
        finally:
            if was_connected and self.on_close is not None:
                self.on_close()

    def get_server_capabilities(self) -> Optional[ServerCapabilities]:
        """
        Get the capabilities negotiated with the server.

        Returns
        -------
        Optional[ServerCapabilities]
            The server capabilities, or None before the negotiation completed.
        """
        if self._initialize_result is None:
            return None
        return self._initialize_result.capabilities

    def get_server_version(self) -> Optional[Implementation]:
        """
        Get the implementation info the server announced, or None before the negotiation completed.
        """
        if self._initialize_result is None:
            return None
        return self._initialize_result.serverInfo

    async def read_resource(self, uri: str) -> ReadResourceResult:
        """
        Read one resource from the server.

        Parameters
        ----------
        uri : str
            The URI of the resource.

        Returns
        -------
        ReadResourceResult
            The result holding the contents of the resource.

        Raises
        ------
        ClientNotConnectedError
            If the client has no open session.
        """
        if self._session is None:
            raise ClientNotConnectedError(f"Client {self.name} is not connected")
        return await self._session.read_resource(AnyUrl(uri))

    ###########################################################################
    # Protected methods that run within the owner task of the session.
    ###########################################################################

    @asynccontextmanager
    async def _open_session(self, streams: Tuple[Any, Any]) -> AsyncIterator[Tuple[ClientSession, InitializeResult]]:
        read_stream, write_stream = streams
        read_timeout = timedelta(seconds=self.request_timeout) if self.request_timeout is not None else None
        async with ClientSession(
            read_stream=read_stream,
            write_stream=write_stream,
            read_timeout_seconds=read_timeout,
            message_handler=self._handle_message,
            client_info=self.client_info,
        ) as session:
            result = await session.initialize()
            yield session, result

    async def _handle_message(self, message: Any) -> None:
        # Requests and notifications from the server are not handled by this client.
        if isinstance(message, Exception):
            self._report_error(message)

    def _report_error(self, error: BaseException) -> None:
        if self.on_error is not None:
            self.on_error(error)
        else:
            self._logger.warning("Client error (%s): %s", self.name, error)
