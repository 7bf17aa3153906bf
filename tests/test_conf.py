import pytest

from durapi.conf import DEFAULT_AUTHORITY, DIRECT_RESPONSE_HEADER, TRANSIENT_PHRASES, RpcSettings


def test_defaults():
    cfg = RpcSettings()

    assert cfg.authority == DEFAULT_AUTHORITY == "https://durable/"
    assert cfg.direct_header == DIRECT_RESPONSE_HEADER == "X-Direct-Response"
    assert cfg.max_attempts == 11
    assert cfg.base_delay == 0.01
    assert cfg.transient_phrases == TRANSIENT_PHRASES


def test_from_env_reads_prefixed_variables():
    cfg = RpcSettings.from_env(
        environ={
            "DURAPI_AUTHORITY": "https://actors.internal",
            "DURAPI_MAX_ATTEMPTS": "4",
            "DURAPI_BASE_DELAY": "0.5",
            "OTHER_MAX_ATTEMPTS": "99",
        }
    )

    assert cfg.authority == "https://actors.internal/"
    assert cfg.max_attempts == 4
    assert cfg.base_delay == 0.5


def test_from_env_custom_prefix():
    cfg = RpcSettings.from_env(prefix="APP_", environ={"APP_MAX_ATTEMPTS": "2"})

    assert cfg.max_attempts == 2
    assert cfg.authority == DEFAULT_AUTHORITY


def test_from_env_rejects_garbage():
    with pytest.raises(ValueError):
        RpcSettings.from_env(environ={"DURAPI_MAX_ATTEMPTS": "lots"})
