"""
Configuration management module for Doug.
"""

from ._http_client_config import (
    HttpClientConfig,
    HttpClientTimeoutConfig,
    HttpClientAuthConfig,
    create_http_client_from_config,
    resolve_http_client_kwargs,
)
from ._setting import DougSetting

__all__ = [
    "DougSetting",
    "HttpClientConfig",
    "HttpClientTimeoutConfig",
    "HttpClientAuthConfig",
    "create_http_client_from_config",
    "resolve_http_client_kwargs",
]
