from __future__ import annotations
"""
What travels through a local actor's mailbox: deliveries, their replies and
the stop marker.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import anyio.abc
import httpx

if TYPE_CHECKING:
    from ..identity import ActorId


class _Stop:
    """Queued by `LocalNamespace.aclose()`; the loop exits once it reaches it."""

    __slots__ = ()

    def __repr__(self) -> str:  # pragma: no cover
        return "<DurapiStop>"


STOP = _Stop()


@dataclass(frozen=True, slots=True)
class Delivery:
    """
    A transport request queued for an actor.

    Attributes
    ----------
    request:
        The request handed to the actor's ASGI application.
    reply:
        One-shot channel the actor loop answers on.
    chain:
        `(namespace, id)` of every actor awaiting this request, the target
        last. Used to refuse calls back into a busy actor.
    """

    request: httpx.Request
    reply: anyio.abc.ObjectSendStream["Reply"]
    chain: tuple[tuple[Any, "ActorId"], ...] = ()


@dataclass(frozen=True, slots=True)
class Reply:
    """The response to a delivery, or the error raised while producing it."""

    value: Any = None
    error: BaseException | None = None
