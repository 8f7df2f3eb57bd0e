"""
Client defaults for Doug.
"""

DEFAULT_CLIENT_NAME = "doug-client"
"""Display name announced to servers when none is given"""

DEFAULT_CLIENT_VERSION = "1.0.0"
"""Client version announced to servers"""

DEFAULT_REGISTRY_NAME = "default-client-registry"
"""Name of a registry created without an explicit name"""
