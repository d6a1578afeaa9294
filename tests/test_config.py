import pytest
from pydantic import ValidationError

from core.config import Settings


def test_defaults():
    s = Settings(_env_file=None)
    assert s.server.host == "127.0.0.1"
    assert s.server.port == 8080
    assert s.realtime.overflow_policy == "drop_oldest"
    assert s.realtime.client_id_param == "client_id"


def test_cors_origins_accepts_csv_and_json():
    assert Settings(_env_file=None, CORS_ORIGINS="http://a, http://b").CORS_ORIGINS == ["http://a", "http://b"]
    assert Settings(_env_file=None, CORS_ORIGINS='["http://c"]').CORS_ORIGINS == ["http://c"]


def test_nested_env(monkeypatch):
    monkeypatch.setenv("SERVER__PORT", "9090")
    monkeypatch.setenv("REALTIME__OVERFLOW_POLICY", "DROP_NEW")
    s = Settings(_env_file=None)
    assert s.server.port == 9090
    assert s.realtime.overflow_policy == "drop_new"


def test_unknown_overflow_policy_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, realtime={"overflow_policy": "block"})
