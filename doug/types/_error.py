###########################################################
# Registry Errors
###########################################################

class ClientNotFoundError(KeyError):
    """
    Raised when an operation references a client ID that is not registered.
    """
    def __init__(self, client_id: str):
        super().__init__(client_id)
        self.client_id = client_id

    def __str__(self) -> str:
        return f"Client not found: {self.client_id}"

###########################################################
# Client Errors
###########################################################

class McpTransportError(RuntimeError):
    """
    Raised when a transport fails to connect, close or terminate its session.
    """
    pass

class ClientNotConnectedError(RuntimeError):
    """
    Raised when a request is issued on a client that has no open session.
    """
    pass

class CapabilityUnavailableError(RuntimeError):
    """
    Raised when a connected client has not completed capability negotiation yet.
    """
    def __init__(self, client_id: str):
        super().__init__(f"Server capabilities not found for client: {client_id}")
        self.client_id = client_id

###########################################################
# Aggregation Errors
###########################################################

class ResourceReadError(RuntimeError):
    """
    Raised when reading one resource fails while aggregating resources across clients.
    """
    def __init__(self, client_id: str, uri: str, cause: BaseException):
        super().__init__(f"Failed to read resource: client={client_id}, uri={uri}, error={cause}")
        self.client_id = client_id
        self.uri = uri
