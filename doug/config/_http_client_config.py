"""
HTTP configuration of the streamable HTTP transport.

The configuration is a plain dict, so that it can be kept in `DougSetting` and
passed around freely. It is resolved into the arguments of the SDK's streamable
HTTP client and into the `httpx` client that sends session termination requests.
"""

from typing import Optional, Dict, TypedDict, Literal, Any
import httpx


class HttpClientTimeoutConfig(TypedDict, total=False):
    """
    Per-phase HTTP timeouts in seconds. A missing or None phase has no timeout.
    """
    connect: Optional[float]
    read: Optional[float]
    write: Optional[float]
    pool: Optional[float]


class HttpClientAuthConfig(TypedDict, total=False):
    """
    Credentials sent to the MCP server.

    Attributes
    ----------
    type : Literal["basic", "bearer"]
        The authentication scheme.
    username : Optional[str]
        User name, for the "basic" scheme.
    password : Optional[str]
        Password, for the "basic" scheme.
    token : Optional[str]
        Token, for the "bearer" scheme.
    """
    type: Literal["basic", "bearer"]
    username: Optional[str]
    password: Optional[str]
    token: Optional[str]


class HttpClientConfig(TypedDict, total=False):
    """
    HTTP settings applied to every request of a streamable HTTP transport.

    Attributes
    ----------
    headers : Optional[Dict[str, str]]
        Extra headers, e.g. an API gateway key.
    timeout : Optional[HttpClientTimeoutConfig]
        Timeouts of the termination requests.
    auth : Optional[HttpClientAuthConfig]
        Credentials for the server.
    """
    headers: Optional[Dict[str, str]]
    timeout: Optional[HttpClientTimeoutConfig]
    auth: Optional[HttpClientAuthConfig]


def _build_timeout(timeout_config: HttpClientTimeoutConfig) -> httpx.Timeout:
    return httpx.Timeout(
        connect=timeout_config.get("connect"),
        read=timeout_config.get("read"),
        write=timeout_config.get("write"),
        pool=timeout_config.get("pool"),
    )


def _apply_auth(auth_config: HttpClientAuthConfig, kwargs: Dict[str, Any]) -> None:
    scheme = auth_config.get("type")

    if scheme == "basic":
        username, password = auth_config.get("username"), auth_config.get("password")
        if username is None or password is None:
            raise ValueError("Basic auth of the HTTP transport needs both 'username' and 'password'.")
        kwargs["auth"] = httpx.BasicAuth(username=username, password=password)
    elif scheme == "bearer":
        token = auth_config.get("token")
        if token is None:
            raise ValueError("Bearer auth of the HTTP transport needs a 'token'.")
        # An explicit Authorization header wins over the token.
        kwargs.setdefault("headers", {}).setdefault("Authorization", f"Bearer {token}")
    else:
        raise ValueError(f"Unsupported auth type of the HTTP transport: {scheme!r}. Use 'basic' or 'bearer'.")


def resolve_http_client_kwargs(config: Optional[HttpClientConfig]) -> Dict[str, Any]:
    """
    Resolve a configuration into `headers`, `timeout` and `auth` keyword arguments.

    Only the configured keys appear in the result. Bearer credentials are turned into
    an `Authorization` header.

    Raises
    ------
    ValueError
        If the auth configuration is incomplete or uses an unknown scheme.
    """
    kwargs: Dict[str, Any] = {}
    if not config:
        return kwargs

    if config.get("headers"):
        kwargs["headers"] = dict(config["headers"])
    if config.get("timeout"):
        kwargs["timeout"] = _build_timeout(config["timeout"])
    if config.get("auth"):
        _apply_auth(config["auth"], kwargs)
    return kwargs


def create_http_client_from_config(config: Optional[HttpClientConfig]) -> httpx.AsyncClient:
    """
    Create the async HTTP client used to talk to an MCP server outside of the SDK session.

    Parameters
    ----------
    config : Optional[HttpClientConfig]
        The HTTP configuration. If None, a client with default settings is created.

    Returns
    -------
    httpx.AsyncClient
        A client following redirects. The caller is responsible for closing it.

    Raises
    ------
    ValueError
        If the auth configuration is invalid.

    Example
    -------
    >>> config = {
    ...     "headers": {"X-Team": "recruiting"},
    ...     "auth": {"type": "bearer", "token": "secret"},
    ... }
    >>> async with create_http_client_from_config(config) as client:
    ...     await client.delete(url, headers={"mcp-session-id": session_id})
    """
    return httpx.AsyncClient(follow_redirects=True, **resolve_http_client_kwargs(config))
