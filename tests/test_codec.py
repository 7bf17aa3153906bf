import json

import httpx
import pytest
from starlette.responses import PlainTextResponse, Response

from durapi.codec import (
    EnvelopeKind,
    MethodInvocation,
    create_request,
    create_response,
    decode_response,
    error_response,
    read_envelope,
)
from durapi.conf import RpcSettings
from durapi.exceptions import RemoteCallError

pytestmark = pytest.mark.anyio


class BrokenStream(httpx.AsyncByteStream):
    async def __aiter__(self):
        raise httpx.ReadError("connection dropped mid-body")
        yield b""  # pragma: no cover


class Point:
    def __init__(self, x, y):
        self.x = x
        self.y = y

    def __str__(self) -> str:
        return f"Point({self.x}, {self.y})"


def test_request_targets_reserved_authority():
    request = create_request(MethodInvocation.of("add", [3, 4]))

    assert request.method == "POST"
    assert str(request.url) == "https://durable/add"
    assert request.headers["content-type"] == "application/json"
    assert json.loads(request.content) == [3, 4]


def test_request_with_no_arguments_sends_empty_array():
    request = create_request(MethodInvocation("increment"))

    assert request.content == b"[]"


def test_request_honours_custom_authority():
    cfg = RpcSettings(authority="https://actors.internal/")

    request = create_request(MethodInvocation("ping"), settings=cfg)

    assert str(request.url) == "https://actors.internal/ping"


def test_json_values_are_encoded():
    response = create_response({"a": [1, 2, {"b": None}]})

    assert response.status_code == 200
    assert json.loads(response.body) == {"a": [1, 2, {"b": None}]}
    assert "x-direct-response" not in response.headers


def test_none_is_encoded_as_null():
    assert create_response(None).body == b"null"


def test_responses_are_marked_for_passthrough():
    original = PlainTextResponse("hello", status_code=202)

    response = create_response(original)

    assert response is original
    assert response.headers["x-direct-response"] == "true"
    assert response.body == b"hello"


def test_client_responses_are_converted_and_marked():
    upstream = httpx.Response(201, content=b"payload", headers={"x-trace": "abc"})

    response = create_response(upstream)

    assert isinstance(response, Response)
    assert response.status_code == 201
    assert response.body == b"payload"
    assert response.headers["x-trace"] == "abc"
    assert response.headers["x-direct-response"] == "true"


def test_unencodable_values_fall_back_to_raw_body():
    assert create_response(Point(1, 2)).body == b"Point(1, 2)"
    assert create_response(b"\x00\x01").body == b"\x00\x01"
    assert create_response(float("nan")).body == b"nan"


def test_error_response_shape():
    response = error_response(418, "teapot")

    assert response.status_code == 418
    assert json.loads(response.body) == {"status": 418, "error": "teapot"}


async def test_passthrough_marker_is_stripped_and_body_untouched():
    response = httpx.Response(
        201,
        headers={"X-Direct-Response": "true", "content-type": "application/json"},
        content=b'{"not": "decoded"}',
    )

    envelope = await read_envelope(response)

    assert envelope.kind is EnvelopeKind.RAW
    assert envelope.payload is response
    assert "x-direct-response" not in response.headers
    assert response.status_code == 201
    assert response.content == b'{"not": "decoded"}'


async def test_json_body_is_decoded():
    envelope = await read_envelope(httpx.Response(200, content=b"[1, 2.5, true, null]"))

    assert envelope.kind is EnvelopeKind.ENCODED
    assert envelope.payload == [1, 2.5, True, None]


async def test_text_body_degrades_to_string():
    assert await decode_response(httpx.Response(200, content=b"plain words")) == "plain words"
    assert await decode_response(httpx.Response(200, content=b"")) == ""


async def test_unreadable_body_degrades_to_response():
    response = httpx.Response(200, stream=BrokenStream())

    envelope = await read_envelope(response)

    assert envelope.kind is EnvelopeKind.RAW
    assert envelope.payload is response


async def test_error_descriptor_raises_remote_call_error():
    response = httpx.Response(500, json={"status": 500, "error": "Actor does not contain method foo()"})

    with pytest.raises(RemoteCallError) as exc_info:
        await decode_response(response)

    assert exc_info.value.status == 500
    assert "foo" in str(exc_info.value)


async def test_error_shaped_success_is_a_plain_value():
    response = httpx.Response(200, json={"status": 404, "error": "not found"})

    assert await decode_response(response) == {"status": 404, "error": "not found"}
