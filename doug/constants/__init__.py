from ._logging import *
from ._client import *

__all__ = [
    "ROOT_LOGGER_NAME",
    "EVENT_LOGGER_NAME",
    "TRACE_LOGGER_NAME",
    "REGISTRY_LOGGER_NAME",
    "CLIENT_LOGGER_NAME",
    "TRANSPORT_LOGGER_NAME",
    "STAGE_TERMINATE_SESSION",
    "STAGE_CLOSE_CLIENT",
    "STAGE_CLOSE_TRANSPORT",
    "STAGE_TEARDOWN",
    "DEFAULT_CLIENT_NAME",
    "DEFAULT_CLIENT_VERSION",
    "DEFAULT_REGISTRY_NAME",
]
