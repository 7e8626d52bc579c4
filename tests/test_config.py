"""
Tests for settings loading and saving.
"""

import tomllib
from pathlib import Path

import pytest
from pydantic import ValidationError

from reference_tool.config import (
    ApiSettings,
    Settings,
    default_config_file,
    load_settings,
    save_settings,
)
from reference_tool.output import OutputFormat


class TestDefaults:
    """Tests for default values."""

    def test_settings_defaults(self, settings: Settings):
        assert settings.default_format is OutputFormat.JSON
        assert settings.default_output_dir is None
        assert settings.default_categories is None
        assert settings.verbose is False
        assert settings.default_network_depth == 1

    def test_api_defaults(self, settings: Settings):
        assert settings.api.base_url == "https://inspirehep.net/api"
        assert settings.api.timeout_seconds == 30
        assert settings.api.max_retries == 3
        assert settings.api.request_delay_ms == 100
        assert settings.api.max_nodes is None

    @pytest.mark.parametrize(
        "kwargs",
        [{"timeout_seconds": 0}, {"max_retries": -1}, {"request_delay_ms": -1}, {"max_nodes": 0}],
    )
    def test_api_validation(self, kwargs):
        with pytest.raises(ValidationError):
            ApiSettings(**kwargs)

    def test_default_config_file_env_override(
        self,
        monkeypatch: pytest.MonkeyPatch,
        tmp_path: Path,
    ):
        monkeypatch.setenv("REFTOOL_CONFIG_FILE", str(tmp_path / "custom.toml"))
        assert default_config_file() == tmp_path / "custom.toml"


class TestLoading:
    """Tests for TOML and environment sources."""

    def test_missing_file_uses_defaults(self, clean_env, temp_config: Path):
        settings = load_settings(temp_config)
        assert settings.api.max_retries == 3

    def test_toml_file(self, clean_env, temp_config: Path):
        temp_config.parent.mkdir(parents=True)
        temp_config.write_text(
            'default_format = "bibtex"\n'
            'default_categories = ["hep-th", "gr-qc"]\n'
            "\n"
            "[api]\n"
            "max_retries = 5\n"
            "request_delay_ms = 250\n",
            encoding="utf-8",
        )
        settings = load_settings(temp_config)

        assert settings.default_format is OutputFormat.BIBTEX
        assert settings.default_categories == ["hep-th", "gr-qc"]
        assert settings.api.max_retries == 5
        assert settings.api.request_delay_ms == 250
        assert settings.api.timeout_seconds == 30

    def test_env_overrides_file(
        self,
        clean_env,
        temp_config: Path,
        monkeypatch: pytest.MonkeyPatch,
    ):
        temp_config.parent.mkdir(parents=True)
        temp_config.write_text("[api]\nmax_retries = 5\n", encoding="utf-8")
        monkeypatch.setenv("REFTOOL_API__MAX_RETRIES", "7")
        monkeypatch.setenv("REFTOOL_VERBOSE", "true")

        settings = load_settings(temp_config)

        assert settings.api.max_retries == 7
        assert settings.verbose is True

    def test_overrides_win(self, clean_env, temp_config: Path):
        settings = load_settings(temp_config, default_network_depth=3)
        assert settings.default_network_depth == 3


class TestEffectiveValues:
    """Tests for CLI-over-config resolution."""

    def test_format(self, settings: Settings):
        assert settings.effective_format(None) is OutputFormat.JSON
        assert settings.effective_format(OutputFormat.BIBTEX) is OutputFormat.BIBTEX

    def test_output_path(self, clean_env, tmp_path: Path):
        settings = Settings(default_output_dir=tmp_path)
        explicit = tmp_path / "explicit.json"

        assert settings.effective_output_path(explicit, "refs.json") == explicit
        assert settings.effective_output_path(None, "refs.json") == tmp_path / "refs.json"
        assert Settings().effective_output_path(None, "refs.json") is None

    def test_categories(self, clean_env):
        settings = Settings(default_categories=["hep-th"])

        assert settings.effective_categories(" hep-ph, gr-qc ,") == ["hep-ph", "gr-qc"]
        assert settings.effective_categories(None) == ["hep-th"]
        assert settings.effective_categories(" , ") is None

    def test_verbose(self, settings: Settings):
        assert settings.effective_verbose(True)
        assert not settings.effective_verbose(False)


class TestSaving:
    """Tests for writing the config file."""

    def test_to_toml_omits_unset(self, settings: Settings):
        data = tomllib.loads(settings.to_toml())

        assert data["default_format"] == "json"
        assert "default_output_dir" not in data
        assert "max_nodes" not in data["api"]
        assert data["api"]["request_delay_ms"] == 100

    def test_save_and_reload(self, clean_env, temp_config: Path):
        original = Settings(
            default_format=OutputFormat.BIBTEX,
            default_categories=["hep-th"],
            api=ApiSettings(max_retries=1, max_nodes=50),
        )
        path = save_settings(original, temp_config)

        assert path == temp_config
        assert path.exists()

        reloaded = load_settings(temp_config)
        assert reloaded.default_format is OutputFormat.BIBTEX
        assert reloaded.default_categories == ["hep-th"]
        assert reloaded.api.max_retries == 1
        assert reloaded.api.max_nodes == 50
