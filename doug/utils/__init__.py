from ._context_owner import AsyncContextOwner

__all__ = [
    "AsyncContextOwner",
]
