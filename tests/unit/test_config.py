"""Settings validation for task store and scope lock backends."""

import pytest
from pydantic import ValidationError

from aigency.core.config import Settings


def test_memory_backend_needs_no_credentials() -> None:
    settings = Settings(database_backend="memory", _env_file=None)
    assert settings.scope_lock_backend == "memory"


def test_firestore_backend_requires_credentials(monkeypatch) -> None:
    monkeypatch.delenv("FIREBASE_SERVICE_ACCOUNT_KEY", raising=False)
    monkeypatch.delenv("FIREBASE_SERVICE_ACCOUNT_PATH", raising=False)
    with pytest.raises(ValidationError, match="FIREBASE_SERVICE_ACCOUNT"):
        Settings(database_backend="firestore", _env_file=None)


def test_firestore_backend_with_key_path() -> None:
    settings = Settings(
        database_backend="firestore",
        firebase_service_account_path="/etc/keys/sa.json",
        _env_file=None,
    )
    assert settings.database_backend == "firestore"


def test_unknown_backends_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(database_backend="postgres", _env_file=None)
    with pytest.raises(ValidationError):
        Settings(database_backend="memory", scope_lock_backend="zookeeper", _env_file=None)


def test_scope_lock_timeout_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        Settings(database_backend="memory", scope_lock_timeout_seconds=0, _env_file=None)
