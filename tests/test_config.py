from __future__ import annotations

import pytest

from chatline.config import Settings
from chatline.security.secrets import MissingSecretError, require_secret
from chatline.store import MemoryChatStore, build_store


def test_defaults(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("BROADCAST_WORKERS", raising=False)
    monkeypatch.delenv("CORS_ORIGINS", raising=False)
    monkeypatch.setattr("chatline.config.os.cpu_count", lambda: 3)
    settings = Settings(_env_file=None)

    assert settings.broadcast_queue_size == 1000
    assert settings.worker_count == 3
    assert settings.allowed_origins == ["*"]
    assert isinstance(build_store(settings), MemoryChatStore)


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("BROADCAST_QUEUE_SIZE", "16")
    monkeypatch.setenv("BROADCAST_WORKERS", "2")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.test, https://b.test,")
    settings = Settings(_env_file=None)

    assert settings.broadcast_queue_size == 16
    assert settings.worker_count == 2
    assert settings.allowed_origins == ["https://a.test", "https://b.test"]


@pytest.mark.parametrize("backend", ["mongo", "cassandra"])
def test_build_store_rejects_unusable_backends(monkeypatch: pytest.MonkeyPatch, backend):
    monkeypatch.setenv("STORE_BACKEND", backend)
    monkeypatch.delenv("MONGO_URI", raising=False)
    with pytest.raises(RuntimeError):
        build_store(Settings(_env_file=None))


@pytest.mark.parametrize("value", [None, "", "   ", "changeme", "Secret"])
def test_require_secret_rejects_empty_and_sample_values(monkeypatch: pytest.MonkeyPatch, value):
    if value is None:
        monkeypatch.delenv("CHATLINE_TEST_SECRET", raising=False)
    else:
        monkeypatch.setenv("CHATLINE_TEST_SECRET", value)
    with pytest.raises(MissingSecretError) as excinfo:
        require_secret("CHATLINE_TEST_SECRET")
    assert excinfo.value.name == "CHATLINE_TEST_SECRET"


def test_require_secret_returns_trimmed_value(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("CHATLINE_TEST_SECRET", "  s3cr3t-signing-key \n")
    assert require_secret("CHATLINE_TEST_SECRET") == "s3cr3t-signing-key"
