from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

import httpx


@runtime_checkable
class NativeStub(Protocol):
    """
    Transport primitive of the host runtime: send a request to one actor.
    """

    async def fetch(self, request: httpx.Request) -> httpx.Response: ...


@runtime_checkable
class ActorNamespace(Protocol):
    """
    Protocol for the host runtime's actor namespace.

    The namespace owns identity management and hands out native stubs. The
    RPC layer only wraps what `get(...)` returns.
    """

    def id_from_name(self, name: str) -> Any: ...

    def id_from_string(self, raw: str) -> Any: ...

    def new_unique_id(self) -> Any: ...

    def get(self, actor_id: Any) -> NativeStub: ...

