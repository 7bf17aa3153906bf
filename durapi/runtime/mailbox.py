from __future__ import annotations
"""
Per-actor request queue. The actor loop takes one delivery at a time, so
calls to the same identity never run concurrently.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

import anyio
import anyio.abc

from ..exceptions import ActorUnavailable
from ._envelope import Delivery, _Stop

Item = Union[Delivery, _Stop]


@dataclass(slots=True)
class Mailbox:
    """
    Deliveries waiting for one actor, on an AnyIO memory object stream.

    `capacity` bounds the queue; `None` leaves it unbounded. Callers block in
    `put` while the queue is full.
    """

    capacity: Optional[int] = 1024
    _send: anyio.abc.ObjectSendStream[Item] = field(init=False)
    _recv: anyio.abc.ObjectReceiveStream[Item] = field(init=False)
    _closed: bool = field(init=False, default=False)

    def __post_init__(self) -> None:
        size = float("inf") if self.capacity is None else self.capacity
        send, recv = anyio.create_memory_object_stream[Item](size)
        self._send = send
        self._recv = recv
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def put(self, item: Item) -> None:
        """Queue `item`, or raise `ActorUnavailable` once the actor has stopped."""
        if self._closed:
            raise ActorUnavailable("Actor mailbox is closed.")
        try:
            await self._send.send(item)
        except (anyio.ClosedResourceError, anyio.BrokenResourceError) as e:
            raise ActorUnavailable("Actor mailbox is closed.") from e

    async def get(self) -> Item:
        # EndOfStream once closed and empty.
        return await self._recv.receive()

    def drain(self) -> list[Item]:
        """Remove and return everything still queued, without waiting."""
        items: list[Item] = []
        while True:
            try:
                items.append(self._recv.receive_nowait())
            except (anyio.WouldBlock, anyio.EndOfStream):
                return items

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._send.aclose()
