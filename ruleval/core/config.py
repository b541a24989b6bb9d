"""
Engine configuration.

Settings come from the environment (optionally seeded from a .env file) and
can be overridden by command-line flags.

Environment variables:
    RULEVAL_MAX_WORKERS: Worker threads for evaluation (default 1)
    LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL (default INFO)
    LOG_FORMAT: json or text (default json)
    RULEVAL_LOG_DIR: Directory for validation report logs (default "logs")
"""

import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ruleval.observability.logger import LOG_LEVELS


class EngineConfig(BaseModel):
    """
    Runtime configuration for validation runs.

    Attributes:
        max_workers: Worker threads for column/conditional evaluation
        log_level: Application log level
        log_format: "json" or "text"
        log_dir: Directory the report log file is written to
    """

    model_config = ConfigDict(frozen=True)

    max_workers: int = Field(default=1, ge=1, le=64)
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_dir: Path = Path("logs")

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, v):
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    def with_overrides(self, **overrides) -> "EngineConfig":
        """Return a copy with the non-None overrides applied."""
        values = {key: value for key, value in overrides.items() if value is not None}
        return self.model_validate({**self.model_dump(), **values})


def load_config(env_file: str | Path | None = None) -> EngineConfig:
    """
    Load configuration from the environment.

    Args:
        env_file: .env file to load first (default: a .env in the working
                  directory, if any); existing variables are not overridden

    Returns:
        EngineConfig

    Raises:
        pydantic.ValidationError: If a variable holds an invalid value
    """
    load_dotenv(env_file)

    values = {
        "max_workers": os.getenv("RULEVAL_MAX_WORKERS"),
        "log_level": os.getenv("LOG_LEVEL"),
        "log_format": os.getenv("LOG_FORMAT"),
        "log_dir": os.getenv("RULEVAL_LOG_DIR"),
    }
    return EngineConfig(**{key: value for key, value in values.items() if value})
