import asyncio
from functools import partial
from typing import List, Optional, Sequence, Union

from mcp.types import BlobResourceContents, ServerCapabilities, TextResourceContents

from doug.config import DougSetting
from doug.mcp import (
    ClientRegistry,
    McpClient,
    StdioTransport,
    StreamableHttpTransport,
)
from doug.types import (
    CapabilityUnavailableError,
    ClientNotFoundError,
    ResourceReadError,
    TeardownFailure,
)

ResourceContents = Union[TextResourceContents, BlobResourceContents]


class Doug:
    """
    A collection of MCP servers behind a single interface.

    Doug creates one client per server, keeps them in a `ClientRegistry`, and fans
    requests out to all of them, merging the results. Defaults that are not passed
    explicitly are read from `DougSetting`.

    Parameters
    ----------
    default_client_name : Optional[str]
        The name announced by clients added without an explicit name.
    client_version : Optional[str]
        The version announced by the clients.
    request_timeout : Optional[float]
        Read timeout in seconds for requests to servers. None means no timeout.
    registry : Optional[ClientRegistry]
        The registry holding the clients. A new one is created by default.

    Example
    -------
    >>> async with Doug() as doug:
    ...     await doug.add_stdio_client("python", "server.py --transport stdio")
    ...     await doug.add_http_client("http://127.0.0.1:8000/mcp")
    ...     capabilities = await doug.get_client_capabilities()
    ...     resources = await doug.get_resource_values(["candidate-info://resume-url"])
    """

    def __init__(
        self,
        default_client_name: Optional[str] = None,
        client_version: Optional[str] = None,
        request_timeout: Optional[float] = None,
        registry: Optional[ClientRegistry] = None,
    ):
        setting = DougSetting.read()
        self.default_client_name = default_client_name or setting.default_client_name
        self.client_version = client_version or setting.client_version
        self.request_timeout = request_timeout if request_timeout is not None else setting.request_timeout
        self._registry = registry or ClientRegistry(
            http_transport_factory=partial(StreamableHttpTransport, http_client_config=setting.http_client_config),
            stdio_transport_factory=StdioTransport,
        )

    @property
    def registry(self) -> ClientRegistry:
        return self._registry

    @property
    def client_ids(self) -> List[str]:
        return self._registry.client_ids

    def get_client(self, client_id: str) -> Optional[McpClient]:
        return self._registry.get_client(client_id)

    def remove_client(self, client_id: str) -> Optional[McpClient]:
        return self._registry.remove_client(client_id)

    async def add_http_client(
        self,
        url: str,
        name: Optional[str] = None,
        client_id: Optional[str] = None,
    ) -> McpClient:
        """
        Create a client, register it and connect it to the server at `url` over streamable HTTP.

        Parameters
        ----------
        url : str
            The URL of the MCP server.
        name : Optional[str]
            The name the client announces. Defaults to `default_client_name`.
        client_id : Optional[str]
            The ID to register the client under. Defaults to `url`.

        Returns
        -------
        McpClient
            The connected client.
        """
        client = self._new_client(name)
        client_id = client_id or url
        self._registry.add_client(client, client_id)
        await self._registry.connect_http(client_id, url)
        return client

    async def add_stdio_client(
        self,
        command: str,
        args: Union[str, Sequence[str]],
        name: Optional[str] = None,
        client_id: Optional[str] = None,
    ) -> McpClient:
        """
        Create a client, register it and connect it to a server launched as `command` over stdio.

        Parameters
        ----------
        command : str
            The command launching the server.
        args : Union[str, Sequence[str]]
            The arguments of the command, as a whitespace separated string or a token sequence.
        name : Optional[str]
            The name the client announces. Defaults to `default_client_name`.
        client_id : Optional[str]
            The ID to register the client under. Defaults to `"<command>-<args>"`.

        Returns
        -------
        McpClient
            The connected client.
        """
        client = self._new_client(name)
        if client_id is None:
            args_text = args if isinstance(args, str) else " ".join(args)
            client_id = f"{command}-{args_text}"
        self._registry.add_client(client, client_id)
        await self._registry.connect_stdio(client_id, command, args)
        return client

    async def get_client_capabilities(self) -> List[ServerCapabilities]:
        """
        Get the server capabilities negotiated by every client, in registration order.

        Returns
        -------
        List[ServerCapabilities]
            One capability set per client.

        Raises
        ------
        ClientNotFoundError
            If a registered ID resolves to no client.
        CapabilityUnavailableError
            If a client has not completed the capability negotiation.
        """
        capabilities: List[ServerCapabilities] = []
        for client_id in self._registry.client_ids:
            client = self._registry.get_client(client_id)
            if client is None:
                raise ClientNotFoundError(client_id)
            server_capabilities = client.get_server_capabilities()
            if server_capabilities is None:
                raise CapabilityUnavailableError(client_id)
            capabilities.append(server_capabilities)
        return capabilities

    async def get_resource_values(self, resource_uris: Sequence[str]) -> List[ResourceContents]:
        """
        Read every resource in `resource_uris` from every client and flatten the contents.

        All reads run concurrently. The contents are ordered by client in registration
        order, then by URI in the given order, then in the order the server returned them.

        Parameters
        ----------
        resource_uris : Sequence[str]
            The URIs of the resources to read from each client.

        Returns
        -------
        List[ResourceContents]
            The contents of all resources of all clients.

        Raises
        ------
        ClientNotFoundError
            If a registered ID resolves to no client.
        ResourceReadError
            If any read fails; the remaining reads are cancelled.
        """
        clients = []
        for client_id in self._registry.client_ids:
            client = self._registry.get_client(client_id)
            if client is None:
                raise ClientNotFoundError(client_id)
            clients.append((client_id, client))

        reads = [
            asyncio.ensure_future(self._read_resource(client_id, client, uri))
            for client_id, client in clients
            for uri in resource_uris
        ]
        try:
            results = await asyncio.gather(*reads)
        except BaseException:
            for read in reads:
                read.cancel()
            raise

        return [contents for result in results for contents in result]

    async def close(self) -> List[TeardownFailure]:
        """
        Close all clients and empty the registry.

        Returns
        -------
        List[TeardownFailure]
            The failures absorbed while closing, empty if everything closed cleanly.
        """
        return await self._registry.disconnect_all()

    async def __aenter__(self) -> "Doug":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _new_client(self, name: Optional[str]) -> McpClient:
        return McpClient(
            name=name or self.default_client_name,
            version=self.client_version,
            request_timeout=self.request_timeout,
        )

    @staticmethod
    async def _read_resource(client_id: str, client: McpClient, uri: str) -> List[ResourceContents]:
        try:
            result = await client.read_resource(uri)
        except Exception as ex:
            raise ResourceReadError(client_id, uri, ex) from ex
        return list(result.contents)
