from .namespace import LocalNamespace, LocalStub
from .state import ActorState, ActorStorage

__all__ = [
    "ActorState",
    "ActorStorage",
    "LocalNamespace",
    "LocalStub",
]
