import asyncio
import threading
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Union

from doug.constants import (
    DEFAULT_REGISTRY_NAME,
    STAGE_CLOSE_CLIENT,
    STAGE_CLOSE_TRANSPORT,
    STAGE_TEARDOWN,
    STAGE_TERMINATE_SESSION,
)
from doug.logging import get_registry_logger
from doug.mcp._client import McpClient
from doug.mcp._transport import McpSessionTransport, McpTransport, StdioTransport, StreamableHttpTransport
from doug.types import ClientNotFoundError, TeardownFailure

HttpTransportFactory = Callable[[str], McpTransport]
"""Builds a streamable HTTP transport from a URL."""

StdioTransportFactory = Callable[[str, List[str]], McpTransport]
"""Builds a stdio transport from a command and its argument tokens."""


def split_args(args: Union[str, Sequence[str], None]) -> List[str]:
    """
    Turn command arguments into a token list.

    A string is split on whitespace; quoting and escaping are not supported, so an
    argument containing spaces has to be given in a pre-split sequence, which is used
    verbatim.
    """
    if args is None:
        return []
    if isinstance(args, str):
        return args.split()
    return list(args)


class ClientRegistry:
    """
    Owns a set of MCP clients together with their transports, keyed by client ID.

    A client is added first, then connected over a streamable HTTP or a stdio
    transport, and is finally released by `remove_client()` or by the bulk teardown
    of `disconnect_all()`. The registry is the only owner of its entries: a
    client is never shared by two registries.

    Parameters
    ----------
    name : str
        The name of the registry, used in logs.
    http_transport_factory : Optional[HttpTransportFactory]
        Builds the transport used by `connect_http()`. Defaults to `StreamableHttpTransport`.
    stdio_transport_factory : Optional[StdioTransportFactory]
        Builds the transport used by `connect_stdio()`. Defaults to `StdioTransport`.
    """

    _name: str

    _lock: threading.Lock
    _clients: Dict[str, McpClient]
    _transports: Dict[str, McpTransport]

    def __init__(
        self,
        name: str = DEFAULT_REGISTRY_NAME,
        *,
        http_transport_factory: Optional[HttpTransportFactory] = None,
        stdio_transport_factory: Optional[StdioTransportFactory] = None,
    ):
        self._name = name
        self._lock = threading.Lock()
        self._clients = {}
        self._transports = {}
        self._http_transport_factory = http_transport_factory or StreamableHttpTransport
        self._stdio_transport_factory = stdio_transport_factory or StdioTransport
        self._logger = get_registry_logger(name)

    @property
    def name(self) -> str:
        return self._name

    @property
    def client_ids(self) -> List[str]:
        """
        A snapshot of the registered client IDs, in registration order.
        """
        with self._lock:
            return list(self._clients.keys())

    def add_client(self, client: McpClient, client_id: str) -> None:
        """
        Register a client under `client_id`, without a transport.

        Registering under an ID that is already taken replaces the previous entry and
        drops its transport; the replaced client is not closed.

        Parameters
        ----------
        client : McpClient
            The client to register.
        client_id : str
            The ID to register the client under.
        """
        with self._lock:
            replaced = self._clients.get(client_id)
            self._clients[client_id] = client
            self._transports.pop(client_id, None)
        if replaced is not None and replaced is not client:
            self._logger.warning("Client %s was replaced by a new client without being closed", client_id)

    def get_client(self, client_id: str) -> Optional[McpClient]:
        """
        Get the client registered under `client_id`, or None.
        """
        with self._lock:
            return self._clients.get(client_id)

    def get_transport(self, client_id: str) -> Optional[McpTransport]:
        """
        Get the transport of the client registered under `client_id`, or None if it was never connected.
        """
        with self._lock:
            return self._transports.get(client_id)

    def remove_client(self, client_id: str) -> Optional[McpClient]:
        """
        Remove a client and its transport from the registry.

        Nothing is closed; the removed client still references its transport. Removing
        an unknown ID does nothing.

        Returns
        -------
        Optional[McpClient]
            The removed client, or None if no client was registered under `client_id`.
        """
        with self._lock:
            self._transports.pop(client_id, None)
            return self._clients.pop(client_id, None)

    async def connect_http(self, client_id: str, url: str) -> None:
        """
        Connect a registered client to the MCP server at `url` over streamable HTTP.

        Parameters
        ----------
        client_id : str
            The ID of a registered client.
        url : str
            The URL of the MCP server.

        Raises
        ------
        ClientNotFoundError
            If no client is registered under `client_id`.
        McpTransportError
            If the connection could not be established.
        """
        client = self._require_client(client_id)
        self._logger.info("Connecting client %s to %s...", client_id, url)

        transport = self._http_transport_factory(url)
        self._install_hooks(client_id, client, observe_close=True)
        self._store_transport(client_id, transport)

        await client.connect(transport)
        self._logger.log_client_connect(
            client_id=client_id,
            transport_type="http",
            target=url,
            session_id=transport.session_id,
            metadata=self._server_metadata(client),
        )

    async def connect_stdio(self, client_id: str, command: str, args: Union[str, Sequence[str]]) -> None:
        """
        Connect a registered client to an MCP server launched as `command` over stdio.

        Parameters
        ----------
        client_id : str
            The ID of a registered client.
        command : str
            The command launching the server.
        args : Union[str, Sequence[str]]
            The arguments of the command, either as a whitespace separated string or as
            a sequence of tokens.

        Raises
        ------
        ClientNotFoundError
            If no client is registered under `client_id`.
        McpTransportError
            If the server could not be launched or the session could not be initialized.
        """
        client = self._require_client(client_id)
        tokens = split_args(args)
        self._logger.info("Connecting client %s via stdio to command: %s %s...", client_id, command, " ".join(tokens))

        transport = self._stdio_transport_factory(command, tokens)
        self._install_hooks(client_id, client, observe_close=False)
        self._store_transport(client_id, transport)

        await client.connect(transport)
        self._logger.log_client_connect(
            client_id=client_id,
            transport_type="stdio",
            target=transport.target,
            metadata=self._server_metadata(client),
        )

    async def disconnect_all(self) -> List[TeardownFailure]:
        """
        Tear down every registered client concurrently, then empty the registry.

        For each entry, the session of a session transport is terminated first, then
        the client is closed, then the transport is closed. Every step runs even if a
        previous one failed, and a failing entry never stops the teardown of the
        others. Failures are logged and returned; this method never raises them.

        Returns
        -------
        List[TeardownFailure]
            The failures absorbed during the teardown, empty if everything closed cleanly.
        """
        with self._lock:
            entries = [
                (client_id, client, self._transports.get(client_id))
                for client_id, client in self._clients.items()
            ]

        failures: List[TeardownFailure] = []
        await asyncio.gather(*(
            self._teardown_entry(client_id, client, transport, failures)
            for client_id, client, transport in entries
        ))

        with self._lock:
            self._transports.clear()
            self._clients.clear()
        return failures

    def _require_client(self, client_id: str) -> McpClient:
        client = self.get_client(client_id)
        if client is None:
            raise ClientNotFoundError(client_id)
        return client

    def _store_transport(self, client_id: str, transport: McpTransport) -> None:
        with self._lock:
            self._transports[client_id] = transport

    @staticmethod
    def _server_metadata(client: McpClient) -> Dict[str, Any]:
        server = client.get_server_version()
        if server is None:
            return {}
        return {"server_name": server.name, "server_version": server.version}

    def _install_hooks(self, client_id: str, client: McpClient, observe_close: bool) -> None:
        client.on_error = lambda error: self._logger.log_client_error(client_id, error)
        if observe_close:
            client.on_close = lambda: self._logger.log_client_close(client_id)

    async def _teardown_entry(
        self,
        client_id: str,
        client: McpClient,
        transport: Optional[McpTransport],
        failures: List[TeardownFailure],
    ) -> None:
        try:
            self._logger.info("Attempting to disconnect client %s", client_id)

            if isinstance(transport, McpSessionTransport):
                self._logger.trace("Terminating session for client %s", client_id)
                await self._run_step(client_id, STAGE_TERMINATE_SESSION, transport.terminate_session, failures)

            self._logger.trace("Closing client %s", client_id)
            await self._run_step(client_id, STAGE_CLOSE_CLIENT, client.close, failures)

            if transport is not None:
                self._logger.trace("Closing transport for client %s", client_id)
                await self._run_step(client_id, STAGE_CLOSE_TRANSPORT, transport.close, failures)
        except Exception as ex:
            self._record_failure(client_id, STAGE_TEARDOWN, ex, failures)

    async def _run_step(
        self,
        client_id: str,
        stage: str,
        step: Callable[[], Awaitable[None]],
        failures: List[TeardownFailure],
    ) -> None:
        try:
            await step()
        except Exception as ex:
            self._record_failure(client_id, stage, ex, failures)

    def _record_failure(
        self,
        client_id: str,
        stage: str,
        error: Exception,
        failures: List[TeardownFailure],
    ) -> None:
        self._logger.log_teardown_error(client_id, stage, error)
        failures.append(TeardownFailure.from_error(client_id, stage, error))
