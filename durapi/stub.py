from __future__ import annotations

"""
Client side actor stub.

An `ActorStub` wraps the native stub handed out by the host runtime. Its
`fetch` is the native transport primitive, untouched. Every other public
attribute the native stub does not have becomes an async function that calls
the method of the same name on the remote actor:

    stub = namespace.get("counter")
    await stub.increment()          # POST https://durable/increment  []
    await stub.add(3, 4)            # POST https://durable/add        [3, 4]
"""

from collections.abc import Callable, Sequence
from typing import Any

from .codec import MethodInvocation, create_request, decode_response
from .conf import RpcSettings, settings as default_settings
from .retry import RetryPolicy
from .typing import NativeStub


class ActorStub:
    """Proxy bound to one actor identity. Holds no actor state."""

    def __init__(
        self,
        native: NativeStub,
        actor_id: Any = None,
        *,
        policy: RetryPolicy | None = None,
        settings: RpcSettings | None = None,
    ) -> None:
        self._native = native
        self._id = actor_id if actor_id is not None else getattr(native, "id", None)
        self._settings = settings or default_settings
        self._policy = policy or RetryPolicy.from_settings(self._settings)
        self._methods: dict[str, Callable[..., Any]] = {}

    @property
    def id(self) -> Any:
        return self._id

    @property
    def native(self) -> NativeStub:
        return self._native

    @property
    def fetch(self) -> Callable[..., Any]:
        """The native transport primitive, not wrapped in any RPC logic."""
        return self._native.fetch

    def __getattr__(self, name: str) -> Any:
        # Only reached when regular attribute lookup fails.
        if name.startswith("_"):
            raise AttributeError(name)

        method = self._methods.get(name)
        if method is not None:
            return method

        if hasattr(self._native, name):
            return getattr(self._native, name)

        method = self._make_method(name)
        self._methods[name] = method
        return method

    async def invoke(self, name: str, args: Sequence[Any] = ()) -> Any:
        """
        Call `name(*args)` on the remote actor and return its decoded result.

        Raises
        ------
        RemoteCallError
            If the actor answered with an error descriptor.
        Exception
            The transport failure, once retries are exhausted or immediately
            when it is not transient.
        """
        invocation = MethodInvocation.of(name, args)

        async def attempt() -> Any:
            request = create_request(invocation, settings=self._settings)
            response = await self._native.fetch(request)
            return await decode_response(response, settings=self._settings)

        return await self._policy.run(attempt)

    def _make_method(self, name: str) -> Callable[..., Any]:
        async def remote_method(*args: Any) -> Any:
            return await self.invoke(name, args)

        remote_method.__name__ = name
        remote_method.__qualname__ = f"{type(self).__name__}.{name}"
        return remote_method

    def __repr__(self) -> str:
        return f"<ActorStub id={self._id}>"
