from __future__ import annotations

"""
LocalNamespace: an in-process host runtime for actors.

It owns:
- the task group where actor loops run,
- one actor instance per identity, created on first delivery,
- one mailbox per actor, so calls to the same identity never overlap,
- shutdown semantics.

Requests reach the actor's ASGI application through `httpx.ASGITransport`,
exactly as they would over a network transport.
"""

import logging
from collections.abc import Callable, Mapping
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, Optional

import anyio
import anyio.abc
import httpx
from starlette.types import ASGIApp

from ..exceptions import ActorUnavailable
from ..identity import ActorId
from ._envelope import STOP, Delivery, Reply
from .mailbox import Mailbox
from .state import ActorState

logger = logging.getLogger(__name__)

AppFactory = Callable[[ActorState, Mapping[str, Any]], ASGIApp]

# Actors whose handlers are awaiting the current call, outermost first.
_handling: ContextVar[tuple[tuple["LocalNamespace", ActorId], ...]] = ContextVar(
    "durapi_handling", default=()
)


@dataclass(slots=True)
class _ActorRuntime:
    """
    Internal runtime record for a single actor.
    """

    state: ActorState
    app: ASGIApp
    mailbox: Mailbox
    transport: httpx.ASGITransport = field(init=False)
    alive: bool = True

    def __post_init__(self) -> None:
        self.transport = httpx.ASGITransport(app=self.app)


@dataclass(frozen=True, slots=True)
class LocalStub:
    """
    Native stub for a local actor: the bare `fetch` transport primitive.
    """

    id: ActorId
    _deliver: Callable[[ActorId, httpx.Request], Any] = field(repr=False)

    @property
    def name(self) -> str | None:
        return self.id.name

    async def fetch(
        self,
        request: httpx.Request | str,
        method: str = "GET",
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Send a request to the actor and return its response.

        `request` is an `httpx.Request`, or a URL from which one is built
        with `method` and the remaining keyword arguments.
        """
        if not isinstance(request, httpx.Request):
            request = httpx.Request(method, request, **kwargs)
        return await self._deliver(self.id, request)


class LocalNamespace:
    """
    Actor namespace hosting one class of actors in the current process.

    Parameters
    ----------
    factory:
        Called with `(state, env)` to create the ASGI application of an
        actor, usually the result of `create_actor(...)`.
    name:
        Namespace name; scopes name-derived ids.
    env:
        Environment passed to every actor. Kept by reference, so bindings
        added after construction (other namespaces) are visible to actors.
    """

    def __init__(
        self,
        factory: AppFactory,
        *,
        name: str = "default",
        env: Optional[dict[str, Any]] = None,
        mailbox_capacity: Optional[int] = 1024,
    ) -> None:
        self.name = name
        self.env: dict[str, Any] = env if env is not None else {}
        self._factory = factory
        self._mailbox_capacity = mailbox_capacity

        self._tg: anyio.abc.TaskGroup | None = None
        self._closed = False
        self._actors: dict[ActorId, _ActorRuntime] = {}

    def id_from_name(self, name: str) -> ActorId:
        return ActorId.from_name(name, scope=self.name)

    def id_from_string(self, raw: str) -> ActorId:
        return ActorId.parse(raw)

    def new_unique_id(self) -> ActorId:
        return ActorId.unique()

    def get(self, actor_id: ActorId) -> LocalStub:
        if not isinstance(actor_id, ActorId):
            raise TypeError(f"Expected an ActorId, got {type(actor_id).__name__}.")
        return LocalStub(id=actor_id, _deliver=self._deliver)

    @property
    def running(self) -> bool:
        return self._tg is not None and not self._closed

    async def start(self) -> None:
        """Start the namespace. Must be called before any delivery."""
        if self._closed:
            raise ActorUnavailable("Actor namespace is closed.")
        if self._tg is not None:
            return
        self._tg = await anyio.create_task_group().__aenter__()

    def _runtime_for(self, actor_id: ActorId) -> _ActorRuntime:
        rt = self._actors.get(actor_id)
        if rt is not None:
            return rt

        if self._tg is None:
            raise ActorUnavailable("Actor namespace is not running.")

        state = ActorState(id=actor_id)
        rt = _ActorRuntime(
            state=state,
            app=self._factory(state, self.env),
            mailbox=Mailbox(capacity=self._mailbox_capacity),
        )
        self._actors[actor_id] = rt
        self._tg.start_soon(self._run_actor, rt)
        logger.debug("Started actor %s in namespace %r", actor_id, self.name)
        return rt

    async def _deliver(self, actor_id: ActorId, request: httpx.Request) -> httpx.Response:
        if not self.running:
            raise ActorUnavailable("Actor namespace is not running. Did you call await namespace.start()?")

        chain = _handling.get()
        if (self, actor_id) in chain:
            raise ActorUnavailable(
                f"Re-entrant call to actor {actor_id} would deadlock: it is still handling an earlier request."
            )

        rt = self._runtime_for(actor_id)
        send, recv = anyio.create_memory_object_stream[Reply](1)

        try:
            await rt.mailbox.put(Delivery(request=request, reply=send, chain=(*chain, (self, actor_id))))
            try:
                reply = await recv.receive()
            except anyio.EndOfStream as e:
                raise ActorUnavailable("Actor stopped before replying.") from e

            if reply.error is not None:
                raise reply.error

            return reply.value
        finally:
            await send.aclose()
            await recv.aclose()

    async def _run_actor(self, rt: _ActorRuntime) -> None:
        """Actor loop: handle deliveries one at a time until stopped."""
        try:
            while True:
                try:
                    item = await rt.mailbox.get()
                except anyio.EndOfStream:
                    break

                if item is STOP:
                    break

                token = _handling.set(item.chain)
                try:
                    response = await rt.transport.handle_async_request(item.request)
                    await response.aread()
                    response.request = item.request
                    reply = Reply(value=response)
                except Exception as e:
                    reply = Reply(error=e)
                finally:
                    _handling.reset(token)

                try:
                    await item.reply.send(reply)
                except (anyio.ClosedResourceError, anyio.BrokenResourceError):
                    logger.debug("Caller of actor %s went away before the reply", rt.state.id)
        finally:
            rt.alive = False
            await rt.mailbox.aclose()
            for pending in rt.mailbox.drain():
                if pending is STOP:
                    continue
                try:
                    await pending.reply.send(Reply(error=ActorUnavailable("Actor stopped before replying.")))
                except (anyio.ClosedResourceError, anyio.BrokenResourceError):
                    logger.debug("Caller of actor %s went away before the reply", rt.state.id)

    async def aclose(self) -> None:
        """Stop every actor after the requests already queued, then close."""
        if self._closed:
            return

        for rt in list(self._actors.values()):
            if rt.alive:
                try:
                    await rt.mailbox.put(STOP)
                except ActorUnavailable:
                    rt.alive = False

        self._closed = True

        if self._tg is not None:
            tg = self._tg
            self._tg = None
            await tg.__aexit__(None, None, None)

    async def __aenter__(self) -> "LocalNamespace":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"<LocalNamespace {self.name!r}>"
