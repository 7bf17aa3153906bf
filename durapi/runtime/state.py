from __future__ import annotations
"""
Per-actor state handed to actor factories by the local runtime.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from ..identity import ActorId

T = TypeVar("T")

_MISSING = object()


class ActorStorage:
    """
    In-memory key/value storage owned by one actor.

    Lives as long as the namespace that created it.
    """

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    async def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    async def put(self, key: str, value: Any) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> bool:
        return self._data.pop(key, _MISSING) is not _MISSING

    async def list(self) -> dict[str, Any]:
        return dict(self._data)


@dataclass(frozen=True, slots=True)
class ActorState:
    """
    Runtime state injected into every actor.

    Attributes
    ----------
    id:
        Identity of the actor.
    storage:
        Durable storage for the actor.
    """

    id: ActorId
    storage: ActorStorage = field(default_factory=ActorStorage)

    async def block_concurrency_while(self, fn: Callable[[], Awaitable[T]]) -> T:
        """
        Run `fn` before the actor handles anything else.

        Local actors already process one request at a time, so this simply
        awaits `fn`.
        """
        return await fn()
