__version__ = "0.1.0"

from .codec import Envelope, EnvelopeKind, MethodInvocation
from .conf import RpcSettings, settings
from .dispatcher import ActorDispatcher, create_actor
from .exceptions import (
    ActorUnavailable,
    DispatchError,
    DurapiError,
    MethodNotFound,
    RemoteCallError,
    StatusError,
    TransportError,
)
from .identity import ActorId, resolve_id
from .namespace import RpcNamespace, extend_env, with_actors
from .retry import RetryPolicy, RetryState
from .stub import ActorStub

__all__ = [
    "ActorDispatcher",
    "ActorId",
    "ActorStub",
    "ActorUnavailable",
    "DispatchError",
    "DurapiError",
    "Envelope",
    "EnvelopeKind",
    "MethodInvocation",
    "MethodNotFound",
    "RemoteCallError",
    "RetryPolicy",
    "RetryState",
    "RpcNamespace",
    "RpcSettings",
    "StatusError",
    "TransportError",
    "create_actor",
    "extend_env",
    "resolve_id",
    "settings",
    "with_actors",
]
