"""
Process-wide settings for Doug.
"""

from typing import Any, Dict, Optional, ClassVar
from pydantic import BaseModel
from threading import Lock

from doug.constants import DEFAULT_CLIENT_NAME, DEFAULT_CLIENT_VERSION
from doug.config._http_client_config import HttpClientConfig


class DougSetting(BaseModel):
    """
    Process-wide settings for Doug.

    This class uses a singleton pattern. The singleton instance is accessed via
    `DougSetting.read()` and can be configured via `DougSetting.set()`.

    The settings supply the defaults of every `Doug` instance created afterwards;
    arguments passed to `Doug` directly take precedence.

    Attributes
    ----------
    default_client_name : str
        The display name announced by clients created without an explicit name.
    client_version : str
        The client version announced to servers.
    request_timeout : Optional[float]
        Read timeout in seconds for requests sent to servers. None means no timeout.
    http_client_config : Optional[HttpClientConfig]
        Headers, timeouts and auth applied to streamable HTTP transports.
    """

    default_client_name: str = DEFAULT_CLIENT_NAME
    """The display name announced by clients created without an explicit name."""

    client_version: str = DEFAULT_CLIENT_VERSION
    """The client version announced to servers."""

    request_timeout: Optional[float] = None
    """Read timeout in seconds for requests sent to servers. None means no timeout."""

    http_client_config: Optional[Dict[str, Any]] = None
    """Headers, timeouts and auth applied to streamable HTTP transports."""

    # Singleton instance
    _instance: ClassVar[Optional["DougSetting"]] = None
    _lock: ClassVar[Lock] = Lock()

    @classmethod
    def read(cls) -> "DougSetting":
        """
        Get the singleton setting instance.

        Returns
        -------
        DougSetting
            The singleton setting instance.
        """
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def set(
        cls,
        default_client_name: Optional[str] = None,
        client_version: Optional[str] = None,
        request_timeout: Optional[float] = None,
        http_client_config: Optional[HttpClientConfig] = None,
    ) -> None:
        """
        Set setting fields.

        Only the fields that are given are changed.

        Parameters
        ----------
        default_client_name : Optional[str]
            The display name announced by clients created without an explicit name.
        client_version : Optional[str]
            The client version announced to servers.
        request_timeout : Optional[float]
            Read timeout in seconds for requests sent to servers.
        http_client_config : Optional[HttpClientConfig]
            Headers, timeouts and auth applied to streamable HTTP transports.
        """
        instance = cls.read()
        with cls._lock:
            if default_client_name is not None:
                instance.default_client_name = default_client_name
            if client_version is not None:
                instance.client_version = client_version
            if request_timeout is not None:
                instance.request_timeout = request_timeout
            if http_client_config is not None:
                instance.http_client_config = http_client_config

    @classmethod
    def reset(cls) -> None:
        """
        Restore every field to its default value.
        """
        with cls._lock:
            cls._instance = cls()
