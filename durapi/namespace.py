from __future__ import annotations

"""
RPC wrapping for host runtime namespaces.

Namespaces are never modified. `extend_env(...)` returns a new mapping in which
every namespace is replaced by an `RpcNamespace` wrapper whose `get(...)`
resolves identities and returns `ActorStub` proxies.
"""

from collections.abc import Mapping
from typing import Any

from starlette.requests import Request

from .conf import RpcSettings
from .identity import resolve_id
from .retry import RetryPolicy
from .stub import ActorStub
from .typing import ActorNamespace, NativeStub

__all__ = [
    "ActorNamespace",
    "NativeStub",
    "RpcNamespace",
    "extend_env",
    "is_namespace",
    "with_actors",
]


class RpcNamespace:
    """
    Wrapper adding RPC stubs to an actor namespace.

    The native identity operations are delegated unchanged; only the result
    of a lookup is wrapped.
    """

    def __init__(
        self,
        namespace: ActorNamespace,
        *,
        policy: RetryPolicy | None = None,
        settings: RpcSettings | None = None,
    ) -> None:
        if isinstance(namespace, RpcNamespace):
            namespace = namespace.namespace
        self._namespace = namespace
        self._policy = policy
        self._settings = settings

    @property
    def namespace(self) -> ActorNamespace:
        return self._namespace

    def id_from_name(self, name: str) -> Any:
        return self._namespace.id_from_name(name)

    def id_from_string(self, raw: str) -> Any:
        return self._namespace.id_from_string(raw)

    def new_unique_id(self) -> Any:
        return self._namespace.new_unique_id()

    def get_native(self, actor_id: Any) -> NativeStub:
        return self._namespace.get(actor_id)

    def get(self, actor_id: Any = None) -> ActorStub:
        """
        Look up an actor and return its stub.

        `actor_id` may be omitted (new unique actor), an id object, a 64
        character canonical id string or a name.
        """
        resolved = resolve_id(self._namespace, actor_id)
        return ActorStub(
            self._namespace.get(resolved),
            resolved,
            policy=self._policy,
            settings=self._settings,
        )

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self._namespace, name)

    def __repr__(self) -> str:
        return f"<RpcNamespace {self._namespace!r}>"


def is_namespace(value: Any) -> bool:
    return callable(getattr(value, "id_from_name", None))


def extend_env(
    env: Mapping[str, Any],
    *,
    policy: RetryPolicy | None = None,
    settings: RpcSettings | None = None,
) -> dict[str, Any]:
    """
    Return a copy of `env` with every actor namespace wrapped in `RpcNamespace`.

    Values already wrapped and values that are not namespaces are copied as-is.
    """
    extended: dict[str, Any] = {}
    for key, value in env.items():
        if isinstance(value, RpcNamespace) or not is_namespace(value):
            extended[key] = value
        else:
            extended[key] = RpcNamespace(value, policy=policy, settings=settings)
    return extended


def with_actors(request: Request, env: Mapping[str, Any]) -> dict[str, Any]:
    """
    Attach the extended environment to `request.state.env` and return it.
    """
    extended = extend_env(env)
    request.state.env = extended
    return extended
