from __future__ import annotations

import pytest

from ai_news_ingest.core.config import ImageResolverConfig, ServerSettings, _parse_image_size
from ai_news_ingest.core.errors import ConfigError

_REQUIRED = {
    "SUPABASE_URL": "https://abcd1234.supabase.co",
    "SUPABASE_SERVICE_ROLE_KEY": "service",
    "ADMIN_API_KEY": "admin",
    "API_ALLOWED_ORIGINS": "https://a.example.com, https://b.example.com",
    "OPENROUTER_API_KEY": "or-key",
}


def _set_env(monkeypatch: pytest.MonkeyPatch, **overrides: str) -> None:
    monkeypatch.delenv("VITE_SUPABASE_URL", raising=False)
    for name, value in {**_REQUIRED, **overrides}.items():
        monkeypatch.setenv(name, value)


def test_server_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_env(monkeypatch)
    settings = ServerSettings.from_env()
    assert settings.allowed_origins == ("https://a.example.com", "https://b.example.com")
    assert settings.supabase_project_ref == "abcd1234"


def test_missing_variables_are_listed(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_env(monkeypatch, ADMIN_API_KEY="", OPENROUTER_API_KEY="")
    with pytest.raises(ConfigError) as excinfo:
        ServerSettings.from_env()
    assert "ADMIN_API_KEY" in str(excinfo.value)
    assert "OPENROUTER_API_KEY" in str(excinfo.value)


def test_vite_supabase_url_alias(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_env(monkeypatch, SUPABASE_URL="")
    monkeypatch.setenv("VITE_SUPABASE_URL", "https://zzz.supabase.co")
    assert ServerSettings.from_env().supabase_url == "https://zzz.supabase.co"


def test_origins_must_contain_a_domain(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_env(monkeypatch, API_ALLOWED_ORIGINS=" , ")
    with pytest.raises(ConfigError):
        ServerSettings.from_env()


def test_image_config_helpers() -> None:
    assert _parse_image_size("768x512") == (768, 512)
    assert _parse_image_size("bad") == (1024, 576)
    config = ImageResolverConfig(hf_image_model="org/m", hf_image_endpoint="")
    assert config.endpoint == "https://router.huggingface.co/hf-inference/models/org/m"
    assert ImageResolverConfig(hf_image_endpoint="https://custom/x").endpoint == "https://custom/x"
