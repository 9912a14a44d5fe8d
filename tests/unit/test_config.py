from pathlib import Path

from secassess.core.config import Settings
from secassess.core.config import settings


def test_config_defaults():
    assert isinstance(settings.model_id, str)
    assert Settings(_env_file=None).model_id == "gpt-4.1-mini"
    assert isinstance(settings.report_tmp_dir, Path)
    assert settings.max_request_bytes == 1024 * 1024


def test_missing_api_key_does_not_break_startup(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    assert Settings(_env_file=None).openai_api_key is None


def test_cors_origins_from_comma_separated_env(monkeypatch):
    monkeypatch.setenv("CORS_ALLOWED_ORIGINS", "https://a.test, https://b.test")
    assert Settings(_env_file=None).cors_allowed_origins == ["https://a.test", "https://b.test"]


def test_cors_origins_default(monkeypatch):
    monkeypatch.delenv("CORS_ALLOWED_ORIGINS", raising=False)
    assert Settings(_env_file=None).cors_allowed_origins == ["*"]


def test_port_from_env(monkeypatch):
    monkeypatch.setenv("PORT", "8080")
    assert Settings(_env_file=None).port == 8080
