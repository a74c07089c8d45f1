"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Backend-specific requirements (Firestore credentials,
Redis for the shared scope lock) are validated at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment and .env."""

    # App
    app_name: str = "aigency"
    app_version: str = "1.0.0"
    debug: bool = False

    # Task store: "firestore" (companyTasks collection) or "memory" (local dev, tests)
    database_backend: str = "firestore"

    # Firebase / Firestore: use key (env) or path (file)
    firebase_service_account_key: SecretStr | None = None
    firebase_service_account_path: str | None = None

    # Automated-task executor. Unset = trigger signals are only logged.
    automation_trigger_url: str | None = None
    automation_trigger_timeout_seconds: float = 10.0

    # Per-company serialization of status propagation: "memory" (single
    # process) or "redis" (shared between workers)
    scope_lock_backend: str = "memory"
    scope_lock_timeout_seconds: int = 30
    scope_lock_wait_seconds: float = 10.0

    # Redis (only used when scope_lock_backend is "redis")
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:9002"

    # Request / middleware
    request_timeout_seconds: int = 60
    request_id_header: str = "X-Request-ID"
    correlation_id_header: str = "X-Correlation-ID"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_backends(self) -> "Settings":
        """Validate the task store and scope lock backends.

        - Firestore: FIREBASE_SERVICE_ACCOUNT_KEY or FIREBASE_SERVICE_ACCOUNT_PATH required.
        - Memory: nothing required (state is lost on restart).
        """
        if self.database_backend == "firestore":
            has_key = (
                self.firebase_service_account_key
                and self.firebase_service_account_key.get_secret_value()
            )
            if not has_key and not self.firebase_service_account_path:
                raise ValueError(
                    "When database_backend is 'firestore', set FIREBASE_SERVICE_ACCOUNT_KEY (full JSON string) "
                    "or FIREBASE_SERVICE_ACCOUNT_PATH (path to JSON file)."
                )
        elif self.database_backend != "memory":
            raise ValueError(
                f"database_backend must be 'firestore' or 'memory', got: {self.database_backend!r}"
            )
        if self.scope_lock_backend not in ("memory", "redis"):
            raise ValueError(
                f"scope_lock_backend must be 'memory' or 'redis', got: {self.scope_lock_backend!r}"
            )
        if self.scope_lock_timeout_seconds <= 0:
            raise ValueError("scope_lock_timeout_seconds must be positive")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached settings (validated on first call, not at import).

    In tests, call get_settings.cache_clear() after changing env vars.
    """
    return Settings()
