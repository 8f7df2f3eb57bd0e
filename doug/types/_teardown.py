from pydantic import BaseModel


class TeardownFailure(BaseModel):
    """
    One failure absorbed while tearing down the clients of a registry.

    Attributes
    ----------
    client_id : str
        The ID of the client whose teardown failed.
    stage : str
        The teardown step that failed, one of `terminate_session`, `close_client`,
        `close_transport` or `teardown`.
    error_type : str
        The class name of the error.
    error_message : str
        The error message.
    """
    client_id: str
    stage: str
    error_type: str
    error_message: str

    @classmethod
    def from_error(cls, client_id: str, stage: str, error: BaseException) -> "TeardownFailure":
        return cls(
            client_id=client_id,
            stage=stage,
            error_type=type(error).__name__,
            error_message=str(error),
        )
