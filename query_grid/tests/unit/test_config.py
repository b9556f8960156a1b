"""Unit tests for query_grid.config."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from query_grid.config import Settings, load_settings


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in (
        "QUERY_GRID_DEBUG",
        "QUERY_GRID_STRUCTURED_LOGGING",
        "QUERY_GRID_METADATA_CACHE_ENABLED",
        "QUERY_GRID_METADATA_CACHE_MAX_ENTRIES",
        "QUERY_GRID_JSON_CAST",
    ):
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_defaults(self):
        settings = Settings()
        assert settings.debug is False
        assert settings.structured_logging is False
        assert settings.metadata_cache_enabled is True
        assert settings.metadata_cache_max_entries == 256
        assert settings.json_cast == "jsonb"


class TestEnvironment:
    def test_prefixed_variables(self, monkeypatch):
        monkeypatch.setenv("QUERY_GRID_DEBUG", "true")
        monkeypatch.setenv("QUERY_GRID_JSON_CAST", "json")
        monkeypatch.setenv("QUERY_GRID_METADATA_CACHE_MAX_ENTRIES", "8")
        settings = load_settings()
        assert settings.debug is True
        assert settings.json_cast == "json"
        assert settings.metadata_cache_max_entries == 8

    def test_unprefixed_variables_ignored(self, monkeypatch):
        monkeypatch.setenv("JSON_CAST", "json")
        assert Settings().json_cast == "jsonb"

    def test_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text("QUERY_GRID_STRUCTURED_LOGGING=true\n", encoding="utf-8")
        assert Settings().structured_logging is True

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("QUERY_GRID_DEBUG", "true")
        assert load_settings(debug=False).debug is False


class TestValidation:
    @pytest.mark.parametrize("value", ["jsonb; DROP TABLE x", "json b", "1json", ""])
    def test_json_cast_must_be_bare_type_name(self, value):
        with pytest.raises(ValidationError, match="json_cast"):
            Settings(json_cast=value)

    def test_cache_size_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(metadata_cache_max_entries=0)

    def test_non_boolean_flag(self):
        with pytest.raises(ValidationError):
            Settings(debug="sometimes")
