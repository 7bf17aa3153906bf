from __future__ import annotations

"""
Wire codec for RPC calls.

A call travels as `POST <authority><method>` with a JSON array body. The answer
is one of:

- an encoded result: a JSON body (or plain text) holding the return value;
- a raw passthrough: any response the method returned itself, flagged with the
  direct response header and handed to the caller untouched;
- an error descriptor: `{"status": <int>, "error": <str>}` with the same status
  on the transport response.

Internally the first two are represented by `Envelope` so callers branch on
`EnvelopeKind` instead of header strings.
"""

import json
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx
from starlette.responses import JSONResponse, Response

from .conf import RpcSettings, settings as default_settings
from .exceptions import RemoteCallError

# Recomputed by Starlette for the re-rendered body.
_HOP_HEADERS = frozenset({"content-length", "content-encoding", "transfer-encoding", "connection"})


class EnvelopeKind(str, Enum):
    """
    RAW
        The payload is a transport response object, passed through verbatim.
    ENCODED
        The payload is the decoded return value of the remote method.
    """

    RAW = "raw"
    ENCODED = "encoded"


@dataclass(frozen=True, slots=True)
class Envelope:
    kind: EnvelopeKind
    payload: Any

    @property
    def is_raw(self) -> bool:
        return self.kind is EnvelopeKind.RAW


@dataclass(frozen=True, slots=True)
class MethodInvocation:
    """
    A single remote call: method name and positional arguments.

    Built fresh for every call and never retained.
    """

    name: str
    args: tuple[Any, ...] = ()

    @classmethod
    def of(cls, name: str, args: Sequence[Any]) -> "MethodInvocation":
        return cls(name=name, args=tuple(args))


def create_request(
    invocation: MethodInvocation,
    *,
    settings: RpcSettings | None = None,
) -> httpx.Request:
    """Encode an invocation as a transport request under the reserved authority."""
    cfg = settings or default_settings
    return httpx.Request(
        "POST",
        f"{cfg.authority}{invocation.name}",
        headers={"Content-Type": "application/json"},
        content=json.dumps(list(invocation.args)).encode("utf-8"),
    )


async def read_envelope(
    response: httpx.Response,
    *,
    settings: RpcSettings | None = None,
) -> Envelope:
    """
    Decode a transport response into an `Envelope`.

    Never raises for a reachable response. The body degrades from JSON to
    text, and to the response object itself when it cannot be read.
    """
    cfg = settings or default_settings

    if cfg.direct_header in response.headers:
        del response.headers[cfg.direct_header]
        return Envelope(EnvelopeKind.RAW, response)

    try:
        await response.aread()
        text = response.text
    except (httpx.HTTPError, httpx.StreamError):
        return Envelope(EnvelopeKind.RAW, response)

    try:
        return Envelope(EnvelopeKind.ENCODED, json.loads(text))
    except ValueError:
        return Envelope(EnvelopeKind.ENCODED, text)


def raise_for_error(response: httpx.Response, envelope: Envelope) -> None:
    """
    Raise `RemoteCallError` if the envelope carries the dispatcher's error descriptor.
    """
    if envelope.is_raw or not response.is_error:
        return

    payload = envelope.payload
    if isinstance(payload, dict) and "error" in payload:
        status = payload.get("status", response.status_code)
        raise RemoteCallError(str(payload["error"]), status=int(status))


async def decode_response(
    response: httpx.Response,
    *,
    settings: RpcSettings | None = None,
) -> Any:
    """Return the value a remote call resolves to."""
    envelope = await read_envelope(response, settings=settings)
    raise_for_error(response, envelope)
    return envelope.payload


def create_response(value: Any, *, settings: RpcSettings | None = None) -> Response:
    """
    Encode a method's return value as the dispatcher's response.

    Responses returned by the method are flagged for passthrough instead of
    being encoded twice. Values that cannot be JSON encoded are sent as a raw
    body. `None` is encoded as `null`.
    """
    cfg = settings or default_settings

    if isinstance(value, httpx.Response):
        value = as_server_response(value)

    if isinstance(value, Response):
        value.headers[cfg.direct_header] = "true"
        return value

    try:
        return JSONResponse(value)
    except (TypeError, ValueError):
        return Response(value if isinstance(value, (bytes, str)) else str(value))


def error_response(status: int, message: str) -> JSONResponse:
    return JSONResponse({"status": status, "error": message}, status_code=status)


def as_server_response(response: httpx.Response) -> Response:
    headers = {
        key: value
        for key, value in response.headers.items()
        if key.lower() not in _HOP_HEADERS
    }
    return Response(content=response.content, status_code=response.status_code, headers=headers)
