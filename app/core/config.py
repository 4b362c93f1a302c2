from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]

DEFAULT_EXACT_BASE_URL = "https://start.exactonline.nl"
DEFAULT_EXACT_REDIRECT_URI = "http://localhost:8000/public/authenticate"


def _getenv(name: str, default: str) -> str:
    return os.environ.get(name, default).strip()


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    database_url: str | None
    redis_url: str | None
    exact_base_url: str = DEFAULT_EXACT_BASE_URL
    exact_client_id: str = ""
    exact_client_secret: str = ""
    exact_redirect_uri: str = DEFAULT_EXACT_REDIRECT_URI
    exact_http_timeout_seconds: float = 10.0
    auth_session_ttl_seconds: int = 600

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("", "0", "false", "no", "off"):
        return False
    raise ValueError(f"{name} must be true|false (got {raw!r})")


def _parse_number(name: str, raw: str, cast: type[int] | type[float], *, positive: bool):
    kind = "an integer" if cast is int else "a number"
    try:
        value = cast(raw)
    except ValueError:
        raise ValueError(f"{name} must be {kind} (got {raw!r})") from None
    if positive and value <= 0:
        raise ValueError(f"{name} must be positive (got {raw!r})")
    return value


def _choice(name: str, raw: str, allowed: tuple[str, ...]) -> str:
    if raw not in allowed:
        raise ValueError(f"{name} must be {'|'.join(allowed)} (got {raw!r})")
    return raw


def load_settings() -> Settings:
    """Read and validate the environment.  Raises ValueError on the first bad value."""
    return Settings(  # type: ignore[arg-type]
        app_env=_choice("APP_ENV", _getenv("APP_ENV", "dev").lower(), ("dev", "test", "prod")),
        log_level=_choice(
            "LOG_LEVEL",
            _getenv("LOG_LEVEL", "info").lower(),
            ("debug", "info", "warning", "error"),
        ),
        log_json=_parse_bool("LOG_JSON", _getenv("LOG_JSON", "false")),
        port=_parse_number("PORT", _getenv("PORT", "8000"), int, positive=False),
        database_url=_getenv("DATABASE_URL", "") or None,
        redis_url=_getenv("REDIS_URL", "") or None,
        exact_base_url=_getenv("EXACT_BASE_URL", DEFAULT_EXACT_BASE_URL).rstrip("/"),
        exact_client_id=_getenv("EXACT_CLIENT_ID", ""),
        exact_client_secret=_getenv("EXACT_CLIENT_SECRET", ""),
        exact_redirect_uri=_getenv("EXACT_REDIRECT_URI", DEFAULT_EXACT_REDIRECT_URI),
        exact_http_timeout_seconds=_parse_number(
            "EXACT_HTTP_TIMEOUT_SECONDS",
            _getenv("EXACT_HTTP_TIMEOUT_SECONDS", "10"),
            float,
            positive=True,
        ),
        auth_session_ttl_seconds=_parse_number(
            "AUTH_SESSION_TTL_SECONDS",
            _getenv("AUTH_SESSION_TTL_SECONDS", "600"),
            int,
            positive=True,
        ),
    )


SETTINGS = load_settings()
