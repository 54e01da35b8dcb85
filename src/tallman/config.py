"""
Runtime configuration read from the environment (and an optional .env file).
"""

import logging
import os
from pathlib import Path

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, field_validator

from .models import DEFAULT_LIST_ID

logger = logging.getLogger("tallman")

LISTS_DIR_ENV = "TALLMAN_LISTS_DIR"
DEFAULT_LIST_ENV = "TALLMAN_DEFAULT_LIST"
LOG_LEVEL_ENV = "TALLMAN_LOG_LEVEL"


class TallmanConfig(BaseModel):
    """Settings shared by the library entry points and the CLIs."""

    lists_dir: Path | None = Field(
        default=None,
        description="Directory of list files to load instead of the bundled lists"
    )
    default_list: str = Field(
        default=DEFAULT_LIST_ID,
        min_length=1,
        description="List used when a caller does not name one"
    )
    log_level: str = Field(
        default="WARNING",
        description="Logging level for the command line tools"
    )

    @field_validator("default_list")
    @classmethod
    def _upper_list(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("log_level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level '{value}'")
        return level


def load_config() -> TallmanConfig:
    """Build the configuration from environment variables.

    A ``.env`` file in the working directory (or a parent) is read first;
    variables already set in the environment win over it.
    """
    dotenv_path = find_dotenv(usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path)

    values: dict[str, str] = {}
    lists_dir = os.getenv(LISTS_DIR_ENV)
    if lists_dir:
        values["lists_dir"] = lists_dir
    default_list = os.getenv(DEFAULT_LIST_ENV)
    if default_list:
        values["default_list"] = default_list
    log_level = os.getenv(LOG_LEVEL_ENV)
    if log_level:
        values["log_level"] = log_level

    config = TallmanConfig(**values)
    logger.debug(f"Configuration: {config.model_dump()}")
    return config
