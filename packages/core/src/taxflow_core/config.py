"""Configuration system for taxflow.

This module provides Pydantic Settings-based configuration with environment
variable support and sensible defaults.

Usage:
    from taxflow_core.config import TaxFlowSettings

    # Load from environment variables and .env file
    settings = TaxFlowSettings()

    print(settings.max_pages)
    print(settings.resolved_budget_dir)
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

# Budget tables shipped with the package.
DEFAULT_BUDGET_DIR = Path(__file__).parent / "data" / "budgets"

# Earliest tax year with a shipped budget table.
EARLIEST_TAX_YEAR = 2019


class TaxFlowSettings(BaseSettings):
    """Root configuration for taxflow.

    Environment Variables:
        TAXFLOW_ENV: Environment name (development, staging, production, test)
        TAXFLOW_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        TAXFLOW_LOG_FORMAT: "console" or "json"; defaults by environment
        TAXFLOW_BUDGET_DIR: Directory holding budget-<year>.json tables
        TAXFLOW_MAX_PAGES: Number of leading PDF pages to read
        TAXFLOW_MIN_TAX_YEAR: Earliest tax year accepted from an upload
        TAXFLOW_MAX_TAX_AMOUNT: Largest amount accepted as total tax

    Example:
        settings = TaxFlowSettings(max_pages=2, budget_dir="/srv/budgets")
    """

    model_config = SettingsConfigDict(
        env_prefix="TAXFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    env: str = Field(
        default="development",
        description="Environment name (development, staging, production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: Optional[str] = Field(
        default=None,
        description="Log renderer: console or json (default depends on env)",
    )
    budget_dir: Optional[Path] = Field(
        default=None,
        description="Directory with budget tables (default: bundled tables)",
    )
    max_pages: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Leading pages of the PDF to extract text from",
    )
    min_tax_year: int = Field(
        default=EARLIEST_TAX_YEAR,
        ge=1913,
        description="Earliest supported tax year",
    )
    max_tax_amount: int = Field(
        default=100_000_000,
        gt=0,
        description="Upper sanity bound for an extracted tax amount",
    )

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment name."""
        valid_envs = {"development", "staging", "production", "test"}
        v_lower = v.lower().strip()
        if v_lower not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of: {valid_envs}")
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper().strip()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {valid_levels}")
        return v_upper

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v_lower = v.lower().strip()
        if v_lower not in {"console", "json"}:
            raise ValueError(f"Invalid log format: {v}. Must be console or json")
        return v_lower

    @model_validator(mode="after")
    def budget_dir_exists(self) -> "TaxFlowSettings":
        if self.budget_dir is not None and not self.budget_dir.is_dir():
            raise ValueError(f"Budget directory does not exist: {self.budget_dir}")
        return self

    @property
    def resolved_budget_dir(self) -> Path:
        """Configured budget directory, or the bundled tables."""
        return self.budget_dir or DEFAULT_BUDGET_DIR

    @property
    def use_json_logs(self) -> bool:
        if self.log_format is not None:
            return self.log_format == "json"
        return self.env not in {"development", "test"}

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.env == "production"

    @property
    def is_debug(self) -> bool:
        return self.log_level == "DEBUG"


def load_settings(**overrides) -> TaxFlowSettings:
    """Build settings, turning validation failures into ConfigurationError."""
    try:
        return TaxFlowSettings(**overrides)
    except ValidationError as e:
        first = e.errors()[0]
        key = ".".join(str(part) for part in first["loc"]) or None
        raise ConfigurationError(
            f"Invalid configuration: {first['msg']}",
            config_key=key,
            details={"errors": [err["msg"] for err in e.errors()]},
        ) from e


__all__ = [
    "DEFAULT_BUDGET_DIR",
    "EARLIEST_TAX_YEAR",
    "TaxFlowSettings",
    "load_settings",
]
