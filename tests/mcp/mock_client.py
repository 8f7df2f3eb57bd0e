"""
In-memory stand-ins for MCP transports and clients.

They record every lifecycle call in a shared journal, so tests can check the order of
teardown steps, and can be told to fail or to delay any step.
"""
import asyncio
from typing import Any, Dict, List, Optional, Sequence, Tuple

from mcp.types import (
    Implementation,
    ReadResourceResult,
    ResourcesCapability,
    ServerCapabilities,
    TextResourceContents,
)

from doug.mcp import McpClient, McpSessionTransport, McpTransport
from doug.types import ClientNotConnectedError, McpTransportError


def text_contents(uri: str, text: str) -> TextResourceContents:
    return TextResourceContents(uri=uri, text=text, mimeType="text/plain")


def capabilities_named(name: str) -> ServerCapabilities:
    # The experimental field carries a marker to tell capability sets apart.
    return ServerCapabilities(
        experimental={name: {}},
        resources=ResourcesCapability(subscribe=False, listChanged=False),
    )


class MockTransport(McpTransport):
    kind = "mock"

    def __init__(
        self,
        target: str,
        journal: Optional[List[Tuple[str, str]]] = None,
        fail_on: Sequence[str] = (),
        close_delay: float = 0.0,
    ):
        self._target = target
        self.journal = journal if journal is not None else []
        self.fail_on = set(fail_on)
        self.close_delay = close_delay
        self.connected = False
        super().__init__()

    @property
    def target(self) -> str:
        return self._target

    @property
    def is_connected(self) -> bool:
        return self.connected

    def open_streams(self) -> Any:
        raise NotImplementedError

    async def connect(self) -> Tuple[Any, Any]:
        self.journal.append((self._target, "connect_transport"))
        if "connect" in self.fail_on:
            raise McpTransportError(f"connect failed: {self._target}")
        self.connected = True
        return (None, None)

    async def close(self) -> None:
        if self.close_delay:
            await asyncio.sleep(self.close_delay)
        self.journal.append((self._target, "close_transport"))
        self.connected = False
        if "close" in self.fail_on:
            raise McpTransportError(f"close failed: {self._target}")


class MockSessionTransport(McpSessionTransport, MockTransport):
    kind = "mock-http"

    def __init__(self, target: str, session_id: Optional[str] = "session-1", **kwargs: Any):
        self._session_id = session_id
        MockTransport.__init__(self, target, **kwargs)

    @property
    def session_id(self) -> Optional[str]:
        return self._session_id

    async def terminate_session(self) -> None:
        self.journal.append((self._target, "terminate_session"))
        if "terminate" in self.fail_on:
            raise McpTransportError(f"terminate failed: {self._target}")


class MockClient(McpClient):
    """
    A client answering from in-memory capability sets and resources.

    Parameters
    ----------
    capabilities : Optional[ServerCapabilities]
        The capabilities negotiated on connect. None simulates an unfinished negotiation.
    resources : Optional[Dict[str, List[TextResourceContents]]]
        The contents returned per URI.
    read_delays : Optional[Dict[str, float]]
        Seconds to wait before answering a read, per URI.
    """

    def __init__(
        self,
        name: str = "mock-client",
        capabilities: Optional[ServerCapabilities] = None,
        resources: Optional[Dict[str, List[TextResourceContents]]] = None,
        read_delays: Optional[Dict[str, float]] = None,
        fail_on: Sequence[str] = (),
        journal: Optional[List[Tuple[str, str]]] = None,
        server_info: Optional[Implementation] = None,
    ):
        super().__init__(name=name, version="0.0.0")
        self.server_info = server_info
        self.capabilities = capabilities
        self.resources = resources or {}
        self.read_delays = read_delays or {}
        self.fail_on = set(fail_on)
        self.journal = journal if journal is not None else []
        self.connected = False
        self.reads: List[str] = []

    @property
    def is_connected(self) -> bool:
        return self.connected

    async def connect(self, transport: McpTransport) -> None:
        self._transport = transport
        transport.on_error = self._report_error
        await transport.connect()
        self.connected = True

    async def close(self) -> None:
        self.journal.append((self.name, "close_client"))
        self.connected = False
        if self.on_close is not None:
            self.on_close()
        if "close" in self.fail_on:
            raise RuntimeError(f"close failed: {self.name}")

    def get_server_capabilities(self) -> Optional[ServerCapabilities]:
        return self.capabilities if self.connected else None

    def get_server_version(self) -> Optional[Implementation]:
        return self.server_info if self.connected else None

    async def read_resource(self, uri: str) -> ReadResourceResult:
        if not self.connected:
            raise ClientNotConnectedError(f"Client {self.name} is not connected")
        delay = self.read_delays.get(uri, 0.0)
        if delay:
            await asyncio.sleep(delay)
        self.reads.append(uri)
        if uri not in self.resources:
            raise ValueError(f"Unknown resource: {uri}")
        return ReadResourceResult(contents=self.resources[uri])
