"""
Configuration models for cycleshift.

Supports configuration via YAML file, environment variables, or programmatic setup.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FunifierConfig(BaseModel):
    """Funifier API connection configuration."""

    base_url: str = Field(
        default="https://service2.funifier.com/v3",
        description="Funifier REST API base URL"
    )
    basic_token: str | None = Field(
        default=None,
        description="Value of the Authorization header (e.g. 'Basic abc123==')"
    )
    request_timeout: float = Field(
        default=15.0,
        gt=0,
        description="Timeout for regular API requests in seconds"
    )
    execute_timeout: float = Field(
        default=60.0,
        gt=0,
        description="Timeout for scheduler execution requests in seconds"
    )
    status_timeout: float = Field(
        default=25.0,
        gt=0,
        description="Timeout for the bulk player status request in seconds"
    )
    max_players: int = Field(
        default=1000,
        ge=1,
        description="Maximum number of players fetched by the clearance checks"
    )
    locked_item_id: str = Field(
        default="E6F0MJ3",
        description="Catalog item every player must hold exactly once after the cycle change"
    )
    recent_window_seconds: int = Field(
        default=300,
        ge=0,
        description="Achievements newer than this are treated as not yet propagated"
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the base URL so paths can be appended."""
        return v.rstrip("/")

    def is_configured(self) -> bool:
        """Check whether credentials are available."""
        return bool(self.basic_token)


class CycleConfig(BaseModel):
    """Cycle change execution configuration."""

    workflow: str = Field(
        default="cycle_change",
        description="Name of the builtin workflow definition"
    )
    workflow_file: str | None = Field(
        default=None,
        description="Path to a workflow YAML overriding the builtin definition"
    )
    settle_delay: float = Field(
        default=5.0,
        ge=0,
        description="Seconds to wait after a job before the first validation"
    )
    poll_interval: float = Field(
        default=5.0,
        ge=0,
        description="Seconds between validation re-checks"
    )
    validation_timeout: float = Field(
        default=60.0,
        ge=0,
        description="Seconds to keep re-checking a failing validation (0 = single check)"
    )
    log_limit: int = Field(
        default=50,
        ge=1,
        le=1000,
        description="Maximum scheduler log entries fetched per step"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Log level"
    )
    file: str | None = Field(
        default=None,
        description="Log file path (None = console only)"
    )
    json_format: bool = Field(
        default=False,
        description="Use JSON format for logs"
    )


class CycleShiftConfig(BaseSettings):
    """
    Main cycleshift configuration.

    Configuration can be loaded from:
    1. YAML file (cycleshift.yaml or config.yaml)
    2. Environment variables (CYCLESHIFT_* prefix)
    3. Programmatic setup
    """

    model_config = SettingsConfigDict(
        env_prefix="CYCLESHIFT_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    funifier: FunifierConfig = Field(default_factory=FunifierConfig)
    cycle: CycleConfig = Field(default_factory=CycleConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> "CycleShiftConfig":
        """
        Load configuration from file and environment.

        Priority (highest to lowest):
        1. Environment variables
        2. Specified config file
        3. Default config files (cycleshift.yaml, config.yaml)
        4. Default values
        """
        config_data: dict = {}

        if config_path:
            config_file = Path(config_path)
            if config_file.exists():
                config_data = cls._load_yaml(config_file)
        else:
            for filename in ["cycleshift.yaml", "config.yaml", "cycleshift.yml", "config.yml"]:
                config_file = Path(filename)
                if config_file.exists():
                    config_data = cls._load_yaml(config_file)
                    break

        return cls(**config_data)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        """Let environment variables override values read from YAML."""
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @staticmethod
    def _load_yaml(path: Path) -> dict:
        """Load YAML configuration file."""
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if data else {}

    def save(self, path: str | Path) -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(
                self.model_dump(exclude_none=True),
                f,
                default_flow_style=False,
                sort_keys=False,
            )


# Environment variables understood by cycleshift, for `config env`
ENVIRONMENT_VARIABLES = {
    "CYCLESHIFT_FUNIFIER__BASE_URL": "Funifier API base URL",
    "CYCLESHIFT_FUNIFIER__BASIC_TOKEN": "Authorization header value for Funifier",
    "CYCLESHIFT_CYCLE__SETTLE_DELAY": "Seconds to wait after each scheduler",
    "CYCLESHIFT_CYCLE__POLL_INTERVAL": "Seconds between validation re-checks",
    "CYCLESHIFT_CYCLE__VALIDATION_TIMEOUT": "Seconds to keep re-checking validation",
    "CYCLESHIFT_CYCLE__WORKFLOW_FILE": "Custom workflow definition file",
    "CYCLESHIFT_LOGGING__LEVEL": "Log level (DEBUG, INFO, WARNING, ERROR)",
}
