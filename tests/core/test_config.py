from __future__ import annotations

import pytest

from app.core.config import AppEnv, Settings, load_settings

# ---- APP_ENV / LOG_LEVEL ----


def test_load_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("APP_ENV", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    settings = load_settings()
    assert settings.app_env == "dev"
    assert settings.log_level == "info"


@pytest.mark.parametrize(
    ("app_env", "log_level", "expected"),
    [
        ("prod", "error", ("prod", "error")),
        ("PROD", "DEBUG", ("prod", "debug")),
        ("  test  ", "  warning  ", ("test", "warning")),
    ],
)
def test_load_settings_normalizes_env_vars(
    monkeypatch: pytest.MonkeyPatch,
    app_env: str,
    log_level: str,
    expected: tuple[str, str],
) -> None:
    monkeypatch.setenv("APP_ENV", app_env)
    monkeypatch.setenv("LOG_LEVEL", log_level)
    settings = load_settings()
    assert (settings.app_env, settings.log_level) == expected


@pytest.mark.parametrize("raw", ["staging", ""])
def test_load_settings_rejects_app_env(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("APP_ENV", raw)
    with pytest.raises(ValueError, match=r"APP_ENV must be dev\|test\|prod"):
        load_settings()


@pytest.mark.parametrize("raw", ["verbose", ""])
def test_load_settings_rejects_log_level(
    monkeypatch: pytest.MonkeyPatch, raw: str
) -> None:
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.setenv("LOG_LEVEL", raw)
    with pytest.raises(ValueError, match=r"LOG_LEVEL must be debug\|info\|warning\|error"):
        load_settings()


# ---- Settings properties ----


def _make_settings(app_env: AppEnv = "dev") -> Settings:
    return Settings(
        app_env=app_env,
        log_level="info",
        log_json=False,
        port=8000,
        database_url=None,
        redis_url=None,
    )


@pytest.mark.parametrize("app_env", ["dev", "test", "prod"])
def test_settings_env_flags(app_env: AppEnv) -> None:
    s = _make_settings(app_env)
    assert (s.is_dev, s.is_test, s.is_prod) == (
        app_env == "dev",
        app_env == "test",
        app_env == "prod",
    )


def test_settings_is_frozen() -> None:
    s = _make_settings()
    with pytest.raises(AttributeError):
        s.app_env = "prod"  # type: ignore[misc]


# ---- Exact settings ----


def test_load_settings_exact_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "EXACT_BASE_URL",
        "EXACT_CLIENT_ID",
        "EXACT_CLIENT_SECRET",
        "EXACT_REDIRECT_URI",
        "EXACT_HTTP_TIMEOUT_SECONDS",
        "AUTH_SESSION_TTL_SECONDS",
        "LOG_JSON",
    ):
        monkeypatch.delenv(name, raising=False)
    settings = load_settings()
    assert settings.exact_base_url == "https://start.exactonline.nl"
    assert settings.exact_redirect_uri == "http://localhost:8000/public/authenticate"
    assert settings.exact_client_id == ""
    assert settings.exact_http_timeout_seconds == 10.0
    assert settings.auth_session_ttl_seconds == 600
    assert settings.log_json is False


def test_load_settings_exact_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXACT_BASE_URL", "https://start.exactonline.be/")
    monkeypatch.setenv("EXACT_CLIENT_ID", " client-1 ")
    monkeypatch.setenv("EXACT_CLIENT_SECRET", "s3cret")
    monkeypatch.setenv("EXACT_HTTP_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("AUTH_SESSION_TTL_SECONDS", "120")
    settings = load_settings()
    assert settings.exact_base_url == "https://start.exactonline.be"
    assert settings.exact_client_id == "client-1"
    assert settings.exact_client_secret == "s3cret"
    assert settings.exact_http_timeout_seconds == 2.5
    assert settings.auth_session_ttl_seconds == 120


@pytest.mark.parametrize("raw", ["fast", "0", "-1"])
def test_load_settings_rejects_bad_http_timeout(
    monkeypatch: pytest.MonkeyPatch, raw: str
) -> None:
    monkeypatch.setenv("EXACT_HTTP_TIMEOUT_SECONDS", raw)
    with pytest.raises(ValueError, match="EXACT_HTTP_TIMEOUT_SECONDS must be"):
        load_settings()


@pytest.mark.parametrize("raw", ["ten", "1.5", "0"])
def test_load_settings_rejects_bad_session_ttl(
    monkeypatch: pytest.MonkeyPatch, raw: str
) -> None:
    monkeypatch.setenv("AUTH_SESSION_TTL_SECONDS", raw)
    with pytest.raises(ValueError, match="AUTH_SESSION_TTL_SECONDS must be"):
        load_settings()


def test_load_settings_rejects_bad_port(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PORT", "eighty")
    with pytest.raises(ValueError, match="PORT must be an integer"):
        load_settings()


@pytest.mark.parametrize(("raw", "expected"), [("true", True), ("1", True), ("off", False)])
def test_load_settings_log_json(
    monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool
) -> None:
    monkeypatch.setenv("LOG_JSON", raw)
    assert load_settings().log_json is expected


def test_load_settings_rejects_bad_log_json(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_JSON", "maybe")
    with pytest.raises(ValueError, match=r"LOG_JSON must be true\|false"):
        load_settings()


def test_settings_empty_urls_are_none(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "  ")
    monkeypatch.setenv("REDIS_URL", "")
    settings = load_settings()
    assert settings.database_url is None
    assert settings.redis_url is None
