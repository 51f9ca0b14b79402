import pytest

from config import ServerSettings, ConfigurationError, normalize_log_level

ENV_VARS = [
    "CONFLUENCE_BASE_URL", "CONFLUENCE_EMAIL", "CONFLUENCE_API_TOKEN", "CONFLUENCE_MAIN_PAGE_ID",
    "USE_HTTP", "HOST", "PORT", "LOG_LEVEL", "LOG_JSON", "LOG_FILE", "REQUEST_TIMEOUT",
    "MAX_RETRIES", "BUILTIN_GUIDELINES", "ALLOWED_ORIGINS", "PUBLIC_URL",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    settings = ServerSettings.from_env()
    assert settings.use_http is True
    assert settings.port == 8080
    assert settings.log_level == "INFO"
    assert settings.allowed_origins == ["*"]
    assert settings.server_url == "http://localhost:8080/mcp"
    assert settings.builtin_disabled is False


def test_from_env(clean_env):
    clean_env.setenv("CONFLUENCE_BASE_URL", "https://wiki.example.com/wiki")
    clean_env.setenv("CONFLUENCE_EMAIL", "me@example.com")
    clean_env.setenv("CONFLUENCE_API_TOKEN", "secret")
    clean_env.setenv("CONFLUENCE_MAIN_PAGE_ID", "100")
    clean_env.setenv("USE_HTTP", "false")
    clean_env.setenv("PORT", "9090")
    clean_env.setenv("LOG_LEVEL", "warn")
    clean_env.setenv("ALLOWED_ORIGINS", "http://a.example.com, http://b.example.com")
    clean_env.setenv("BUILTIN_GUIDELINES", "none")

    settings = ServerSettings.from_env()

    assert settings.use_http is False
    assert settings.port == 9090
    assert settings.log_level == "WARNING"
    assert settings.allowed_origins == ["http://a.example.com", "http://b.example.com"]
    assert settings.server_url == "http://localhost:9090/mcp"
    assert settings.builtin_disabled is True
    assert settings.missing_required() == []
    settings.require()


def test_missing_required(clean_env):
    clean_env.setenv("CONFLUENCE_BASE_URL", "https://wiki.example.com/wiki")
    settings = ServerSettings.from_env()

    assert settings.missing_required() == [
        "CONFLUENCE_EMAIL", "CONFLUENCE_API_TOKEN", "CONFLUENCE_MAIN_PAGE_ID"
    ]
    with pytest.raises(ConfigurationError, match="CONFLUENCE_MAIN_PAGE_ID"):
        settings.require()


def test_public_url_override(clean_env):
    clean_env.setenv("PUBLIC_URL", "https://guidelines.example.com/mcp")
    assert ServerSettings.from_env().server_url == "https://guidelines.example.com/mcp"


@pytest.mark.parametrize("raw,expected", [
    ("ERROR", "ERROR"),
    ("warn", "WARNING"),
    ("Warning", "WARNING"),
    ("debug", "DEBUG"),
    ("verbose", "INFO"),
    (None, "INFO"),
])
def test_normalize_log_level(raw, expected):
    assert normalize_log_level(raw) == expected


@pytest.mark.parametrize("name", ["PORT", "REQUEST_TIMEOUT", "MAX_RETRIES"])
def test_non_integer_setting_is_configuration_error(clean_env, name):
    clean_env.setenv(name, "eighty")
    with pytest.raises(ConfigurationError, match=name):
        ServerSettings.from_env()
