"""
Configuration for reference-tool.

Uses Pydantic Settings for environment variable and TOML file support.
All settings can be overridden via environment variables with the
REFTOOL_ prefix; nested API settings use a double underscore.
Example: REFTOOL_API__MAX_RETRIES=5
"""

import os
from pathlib import Path
from typing import Optional

import tomli_w
from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

from .core.client import BASE_URL
from .output import OutputFormat

APP_NAME = "reference-tool"
APP_VERSION = "0.1.0"


def default_config_file() -> Path:
    """Config file location, overridable with REFTOOL_CONFIG_FILE."""
    override = os.environ.get("REFTOOL_CONFIG_FILE")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "reference_tool" / "config.toml"


class ApiSettings(BaseModel):
    """Remote API and traversal limits."""

    base_url: str = BASE_URL
    timeout_seconds: int = Field(default=30, gt=0)  # Per attempt
    max_retries: int = Field(default=3, ge=0)
    request_delay_ms: int = Field(default=100, ge=0)  # Floor between requests
    max_nodes: Optional[int] = Field(default=None, ge=1)  # Network size cap


class Settings(BaseSettings):
    """
    Application settings.

    Sources, highest priority first: constructor arguments, REFTOOL_*
    environment variables, the TOML config file, defaults. Plain
    `Settings()` skips the TOML file; use `load_settings()` to read it.
    """

    model_config = SettingsConfigDict(
        env_prefix="REFTOOL_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    default_format: OutputFormat = OutputFormat.JSON
    default_output_dir: Optional[Path] = None
    default_categories: Optional[list[str]] = None
    verbose: bool = False
    default_network_depth: int = Field(default=1, ge=0)

    api: ApiSettings = Field(default_factory=ApiSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls),
        )

    def effective_format(self, cli_format: Optional[OutputFormat]) -> OutputFormat:
        """CLI format if given, else the configured default."""
        return cli_format or self.default_format

    def effective_output_path(
        self,
        cli_output: Optional[Path],
        default_name: str,
    ) -> Optional[Path]:
        """
        Where to write output.

        An explicit CLI path wins; otherwise `default_name` inside the
        configured output directory; otherwise stdout (None).
        """
        if cli_output is not None:
            return cli_output
        if self.default_output_dir is not None:
            return self.default_output_dir.expanduser() / default_name
        return None

    def effective_categories(self, cli_categories: Optional[str]) -> Optional[list[str]]:
        """Comma separated CLI categories, else the configured default."""
        if cli_categories:
            categories = [c.strip() for c in cli_categories.split(",") if c.strip()]
            return categories or None
        return self.default_categories

    def effective_verbose(self, cli_verbose: bool) -> bool:
        return cli_verbose or self.verbose

    def to_toml(self) -> str:
        """Render settings as TOML (unset optional values are omitted)."""
        return tomli_w.dumps(self.model_dump(mode="json", exclude_none=True))


def load_settings(config_file: Optional[Path] = None, **overrides) -> Settings:
    """
    Load settings including the TOML config file.

    A missing file is not an error; defaults and environment apply.
    """
    path = Path(config_file) if config_file else default_config_file()

    class FileSettings(Settings):
        model_config = SettingsConfigDict(toml_file=path)

    return FileSettings(**overrides)


def save_settings(settings: Settings, config_file: Optional[Path] = None) -> Path:
    """Write settings to the TOML config file and return its path."""
    path = Path(config_file) if config_file else default_config_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(settings.to_toml(), encoding="utf-8")
    return path
