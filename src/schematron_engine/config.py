"""Configuration management for schematron-engine using Pydantic models."""

import logging
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from schematron_engine.models.schema import ALL_PHASES

CONFIG_FILE_NAME = ".schematron.json"

logger = logging.getLogger(__name__)


class ValidityPolicyName(str, Enum):
    """Built-in validity policies."""
    DEFAULT = "default"
    ROLES = "roles"
    STRICT = "strict"


class LogLevel(str, Enum):
    """Logging levels."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"


class RunConfig(BaseModel):
    """Per-run defaults."""
    phase: str = ALL_PHASES
    parameters: dict[str, Any] = Field(default_factory=dict)
    deadline_seconds: float | None = Field(alias="deadlineSeconds", default=None)
    allow_undeclared_parameters: bool = Field(alias="allowUndeclaredParameters", default=False)

    @field_validator("deadline_seconds")
    @classmethod
    def validate_deadline(cls, v):
        if v is not None and v < 0:
            raise ValueError("deadline_seconds must be >= 0")
        return v

    @field_validator("phase")
    @classmethod
    def validate_phase(cls, v):
        if not v.strip():
            raise ValueError("phase must not be empty")
        return v

    model_config = ConfigDict(populate_by_name=True)


class ValidityConfig(BaseModel):
    """Validity policy selection."""
    policy: ValidityPolicyName = ValidityPolicyName.DEFAULT
    invalidating_roles: list[str] = Field(
        alias="invalidatingRoles", default_factory=lambda: ["error", "fatal"]
    )
    default_role: str = Field(alias="defaultRole", default="error")
    empty_report_valid: bool = Field(alias="emptyReportValid", default=True)

    model_config = ConfigDict(use_enum_values=True, populate_by_name=True)


class LoggingConfig(BaseModel):
    """Logging configuration section."""
    level: LogLevel = LogLevel.WARN

    model_config = ConfigDict(use_enum_values=True)


class EngineConfig(BaseModel):
    """Complete engine configuration model."""
    run: RunConfig = Field(default_factory=RunConfig)
    validity: ValidityConfig = Field(default_factory=ValidityConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid")


def load_config(config_path: str | Path | None = None) -> EngineConfig:
    """Load engine configuration, or the defaults when no file is found.

    Without `config_path`, `.schematron.json` is looked up from the current
    directory upwards.

    Raises:
        ValueError: file is unreadable, not JSON, or not a valid configuration
    """
    path = find_config_file() if config_path is None else Path(config_path)
    if path is None or not path.is_file():
        logger.debug("No engine configuration file found, using defaults")
        return create_default_config()

    try:
        config = EngineConfig.model_validate_json(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ValueError(f"Cannot read config file {path}: {e}") from e
    except ValidationError as e:
        if any(error["type"] == "json_invalid" for error in e.errors()):
            raise ValueError(f"Invalid JSON in config file {path}: {e}") from e
        raise ValueError(f"Invalid engine configuration in {path}: {e}") from e

    logger.debug(f"Loaded engine configuration from {path}")
    return config


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Nearest `.schematron.json` in `start_dir` (default: cwd) or its parents."""
    start = Path(start_dir or Path.cwd()).resolve()
    for directory in (start, *start.parents):
        candidate = directory / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


def create_default_config() -> EngineConfig:
    """Create default configuration: all phases, default policy."""
    return EngineConfig()


_LEVELS = {
    LogLevel.ERROR.value: logging.ERROR,
    LogLevel.WARN.value: logging.WARNING,
    LogLevel.INFO.value: logging.INFO,
    LogLevel.DEBUG.value: logging.DEBUG,
}


def configure_logging(config: LoggingConfig) -> logging.Logger:
    """Apply the configured level to the package logger."""
    package_logger = logging.getLogger("schematron_engine")
    level = config.level.value if isinstance(config.level, LogLevel) else config.level
    package_logger.setLevel(_LEVELS[level])
    return package_logger
