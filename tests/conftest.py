import pytest

from tests.doubles import RecordingNamespace


@pytest.fixture(scope="module")
def anyio_backend():
    return ("asyncio", {"debug": True})


@pytest.fixture
def recording_namespace() -> RecordingNamespace:
    return RecordingNamespace()
