from __future__ import annotations

"""
Server side dispatch of RPC calls.

`ActorDispatcher` is the ASGI application an actor is served as. Requests
under the reserved authority are routed by Starlette to the method named by
the last path segment; everything else reaches the actor's own `fetch(...)`
handler untouched.

Example
-------
@create_actor
class Counter:
    def __init__(self, state: ActorState, env: dict) -> None:
        self.state = state

    async def increment(self) -> int:
        value = await self.state.storage.get("count", 0) + 1
        await self.state.storage.put("count", value)
        return value

    def add(self, a: int, b: int) -> int:
        return a + b
"""

import inspect
from collections.abc import Callable, Mapping
from typing import Any

import httpx
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Route, Router
from starlette.types import Receive, Scope, Send

from .codec import as_server_response, create_response, error_response
from .conf import RpcSettings, settings as default_settings
from .exceptions import DispatchError, MethodNotFound
from .namespace import extend_env

ActorFactory = Callable[[Any, Mapping[str, Any]], Any]

NATIVE_HANDLER = "fetch"


class ActorDispatcher:
    """
    ASGI application turning RPC requests into calls on `api`.

    `api` is any object (or mapping of callables) whose public callables are
    remotely invocable. Errors raised while dispatching are answered with a
    JSON error descriptor; they never reach the transport.
    """

    def __init__(self, api: Any, *, settings: RpcSettings | None = None) -> None:
        self.api = api
        self._settings = settings or default_settings

        self._prefix = httpx.URL(self._settings.authority).path or "/"
        self.router = Router(
            routes=[Route(f"{self._prefix}{{prop}}", self._dispatch, methods=["POST"])],
            default=self._unmatched,
            redirect_slashes=False,
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.router(scope, receive, send)
            return

        request = Request(scope, receive)
        if str(request.url).startswith(self._settings.authority):
            if request.method != "POST":
                response = error_response(405, f"RPC calls must use POST, not {request.method}")
                await response(scope, receive, send)
                return
            await self.router(scope, receive, send)
            return

        response = await self.handle_native(request)
        await response(scope, receive, send)

    async def _unmatched(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.router.not_found(scope, receive, send)
            return

        # Empty names and names with "/" never match the method route.
        name = Request(scope).url.path[len(self._prefix):]
        exc = MethodNotFound(name)
        response = error_response(exc.status, str(exc))
        await response(scope, receive, send)

    def lookup(self, name: str) -> Callable[..., Any] | None:
        """Return the public callable `name` of the actor, or None."""
        if name.startswith("_"):
            return None

        if isinstance(self.api, Mapping):
            member = self.api.get(name)
        else:
            member = getattr(self.api, name, None)

        return member if callable(member) else None

    async def handle_native(self, request: Request) -> Response:
        """Forward non-RPC traffic to the actor's `fetch(...)` handler."""
        handler = self.lookup(NATIVE_HANDLER)
        result = None
        if handler is not None:
            result = handler(request)
            if inspect.isawaitable(result):
                result = await result

        if result is None:
            return error_response(500, "Actor cannot handle request")
        if isinstance(result, httpx.Response):
            return as_server_response(result)
        if isinstance(result, Response):
            return result
        return create_response(result, settings=self._settings)

    async def _dispatch(self, request: Request) -> Response:
        try:
            return await self._invoke(request)
        except Exception as exc:
            status = getattr(exc, "status", 500)
            return error_response(status if isinstance(status, int) else 500, str(exc))

    async def _invoke(self, request: Request) -> Response:
        prop = request.path_params["prop"]
        method = self.lookup(prop)
        if method is None:
            raise MethodNotFound(prop)

        if prop == NATIVE_HANDLER:
            result = method(request)
        else:
            args = await self._read_arguments(request)
            result = method(*args)

        if inspect.isawaitable(result):
            result = await result

        return create_response(result, settings=self._settings)

    async def _read_arguments(self, request: Request) -> list[Any]:
        if not await request.body():
            return []

        try:
            content = await request.json()
        except ValueError as exc:
            raise DispatchError("RPC request body is not valid JSON") from exc

        if not isinstance(content, list):
            raise DispatchError("RPC arguments must be a JSON array")
        return content


def create_actor(
    factory: ActorFactory,
    *,
    settings: RpcSettings | None = None,
) -> Callable[[Any, Mapping[str, Any]], ActorDispatcher]:
    """
    Turn an actor factory into a constructor for its dispatcher.

    `factory` is a class or function called with `(state, env)`. The env it
    receives has its namespaces wrapped, so the actor can call other actors
    through stubs.
    """

    def build(state: Any, env: Mapping[str, Any]) -> ActorDispatcher:
        api = factory(state, extend_env(env, settings=settings))
        return ActorDispatcher(api, settings=settings)

    build.__name__ = getattr(factory, "__name__", "actor")
    build.__qualname__ = getattr(factory, "__qualname__", build.__name__)
    build.__doc__ = getattr(factory, "__doc__", None)
    return build
