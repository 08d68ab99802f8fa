import pytest

import sitescraper.settings as settings_module
from sitescraper.settings import DEFAULT_USER_AGENTS, SettingsError, load_settings

ENV_KEYS = [
    "WEB_REQUESTS_LIMIT",
    "PATH_DEPTH",
    "INCLUDE_PATH",
    "USER_AGENTS",
    "TIMEOUT_MS",
    "SKIP_WORDS",
    "OUTPUT_HTTP_CODE",
    "DELAY_MS",
    "SORT_OUTPUT",
    "TRIM_ENDING_SLASH",
    "EXCLUDE_QUERY_STRING",
    "EXCLUDE_FRAGMENT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.setattr(settings_module, "load_dotenv", lambda *_args, **_kwargs: False)
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_load_settings_defaults():
    settings = load_settings()

    assert settings.requests_limit == 0
    assert settings.path_depth == 3
    assert settings.include_path is None
    assert settings.user_agents == list(DEFAULT_USER_AGENTS)
    assert settings.timeout_ms == 10_000
    assert settings.skip_words == []
    assert settings.output_http_code is False
    assert settings.delay_ms == 0
    assert settings.sort_output is True
    assert settings.trim_ending_slash is True
    assert settings.exclude_query_string is True
    assert settings.exclude_fragment is True


def test_load_settings_uses_environment(monkeypatch):
    monkeypatch.setenv("WEB_REQUESTS_LIMIT", "50")
    monkeypatch.setenv("PATH_DEPTH", "1")
    monkeypatch.setenv("INCLUDE_PATH", "/docs")
    monkeypatch.setenv("USER_AGENTS", '["Mozilla/5.0 (KHTML, like Gecko)", "Bot/1.0"]')
    monkeypatch.setenv("TIMEOUT_MS", "2000")
    monkeypatch.setenv("SKIP_WORDS", "logout, .pdf ,,")
    monkeypatch.setenv("OUTPUT_HTTP_CODE", "true")
    monkeypatch.setenv("DELAY_MS", "300")
    monkeypatch.setenv("SORT_OUTPUT", "no")
    monkeypatch.setenv("TRIM_ENDING_SLASH", "0")
    monkeypatch.setenv("EXCLUDE_QUERY_STRING", "false")
    monkeypatch.setenv("EXCLUDE_FRAGMENT", "YES")

    settings = load_settings()

    assert settings.requests_limit == 50
    assert settings.path_depth == 1
    assert settings.include_path == "/docs"
    assert settings.user_agents == ["Mozilla/5.0 (KHTML, like Gecko)", "Bot/1.0"]
    assert settings.timeout_ms == 2000
    assert settings.skip_words == ["logout", ".pdf"]
    assert settings.output_http_code is True
    assert settings.delay_ms == 300
    assert settings.sort_output is False
    assert settings.trim_ending_slash is False
    assert settings.exclude_query_string is False
    assert settings.exclude_fragment is True


def test_blank_values_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("PATH_DEPTH", "  ")
    monkeypatch.setenv("INCLUDE_PATH", "")
    monkeypatch.setenv("SORT_OUTPUT", "")

    settings = load_settings()

    assert settings.path_depth == 3
    assert settings.include_path is None
    assert settings.sort_output is True


@pytest.mark.parametrize(
    "key, value",
    [
        ("WEB_REQUESTS_LIMIT", "many"),
        ("PATH_DEPTH", "-1"),
        ("USER_AGENTS", "[not json"),
        ("TIMEOUT_MS", "1.5"),
    ],
)
def test_invalid_values_raise_settings_error(monkeypatch, key, value):
    monkeypatch.setenv(key, value)

    with pytest.raises(SettingsError):
        load_settings()
