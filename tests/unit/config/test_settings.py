# tests/unit/config/test_settings.py — v2
"""Tests for config/settings.py — typed Settings and validation rules."""

from __future__ import annotations

from pathlib import Path

import pytest

from lexassist.config.settings import ConfigurationError, Settings, load_settings


class TestSettingsDefaults:
    def test_default_provider_unset(self):
        s = Settings(_env_file=None)
        assert s.model_provider == ""
        assert s.app_env == "development"
        assert s.is_hosted is False

    def test_default_ollama(self):
        s = Settings(_env_file=None)
        assert s.ollama_base_url == "http://localhost:11434"
        assert s.ollama_text_model == "gemma3:4b"
        assert s.ollama_vision_model == "llava:7b"

    def test_default_gemini(self):
        s = Settings(_env_file=None)
        assert s.gemini_api_key == ""
        assert s.gemini_text_model == "gemini-2.0-flash"

    def test_default_logging(self):
        s = Settings(_env_file=None)
        assert s.log_level == "INFO"
        assert s.log_format == "text"
        assert s.log_file is None


class TestSettingsNormalization:
    def test_provider_lowercased(self):
        assert Settings(_env_file=None, model_provider="  Gemini ").model_provider == "gemini"

    def test_app_env_lowercased(self):
        s = Settings(_env_file=None, app_env="PRODUCTION")
        assert s.app_env == "production"
        assert s.is_hosted is True

    @pytest.mark.parametrize("field", ["vercel", "netlify"])
    def test_hosted_flags(self, field):
        assert Settings(_env_file=None, **{field: "1"}).is_hosted is True


class TestSettingsValidation:
    def test_timeout_must_be_positive(self):
        with pytest.raises(ConfigurationError, match="LLM_REQUEST_TIMEOUT_S"):
            Settings(_env_file=None, llm_request_timeout_s=0)

    def test_retention_non_negative(self):
        with pytest.raises(ConfigurationError, match="LOG_RETENTION"):
            Settings(_env_file=None, log_retention=-1)

    def test_rotation_format(self):
        with pytest.raises(ConfigurationError, match="LOG_ROTATION"):
            Settings(_env_file=None, log_rotation="lots")

    def test_errors_aggregated(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Settings(_env_file=None, llm_request_timeout_s=-1, log_retention=-1)
        assert "LLM_REQUEST_TIMEOUT_S" in str(exc_info.value)
        assert "LOG_RETENTION" in str(exc_info.value)


class TestSettingsSources:
    def test_environment(self, monkeypatch):
        monkeypatch.setenv("MODEL_PROVIDER", "mock")
        monkeypatch.setenv("OLLAMA_TEXT_MODEL", "gemma3:12b")
        s = Settings()
        assert s.model_provider == "mock"
        assert s.ollama_text_model == "gemma3:12b"

    def test_dotenv_file(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("GEMINI_API_KEY=from-dotenv\nLOG_FORMAT=json\n")
        monkeypatch.chdir(tmp_path)
        s = Settings()
        assert s.gemini_api_key == "from-dotenv"
        assert s.log_format == "json"

    def test_environment_beats_dotenv(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("MODEL_PROVIDER=gemini\n")
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("MODEL_PROVIDER", "mock")
        assert Settings().model_provider == "mock"

    def test_unknown_keys_ignored(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("SOMETHING_ELSE=1\n")
        monkeypatch.chdir(tmp_path)
        Settings()


class TestLoadSettings:
    def test_overrides(self):
        s = load_settings(_env_file=None, model_provider="mock", log_file=Path("/tmp/x.log"))
        assert s.model_provider == "mock"
        assert s.log_file == Path("/tmp/x.log")

    def test_invalid_raises(self):
        with pytest.raises(ConfigurationError):
            load_settings(_env_file=None, log_rotation="")
