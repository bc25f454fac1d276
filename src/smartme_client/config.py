"""Configuration loading and logging setup.

The client never reads configuration on its own; these helpers are for
applications and the integration tests, which keep credentials in a JSON
file outside the repository.
"""

import json
import logging
import os
import pathlib

import pydantic
import structlog

from .client import DEFAULT_BASE_URL, DEFAULT_TIMEOUT

CONFIG_ENV_VAR = "SMARTME_CLIENT_CONFIG_PATH"
DEFAULT_CONFIG_FILE = "~/.smartme-client-config.json"


class ClientConfig(pydantic.BaseModel):
    """Configuration for a smart-me API client."""

    username: str = pydantic.Field(description="smart-me account name", min_length=1)
    password: str = pydantic.Field("", description="smart-me account password")
    base_url: str = pydantic.Field(
        DEFAULT_BASE_URL,
        description="Base URL of the smart-me REST API",
    )
    timeout: float = pydantic.Field(
        DEFAULT_TIMEOUT,
        description="Request timeout in seconds",
        gt=0,
    )
    log_level: str = pydantic.Field("INFO", description="Logging level")


def configure_logging(log_level_name: str, json_output: bool = False) -> None:
    """Route the client's structlog events to stdout.

    Events below ``log_level_name`` are dropped; the rest are rendered as
    logfmt, or as one JSON object per line with ``json_output``.
    """
    log_level = logging.getLevelName(log_level_name.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.processors.LogfmtRenderer(
            key_order=("timestamp", "level", "event"),
        )
    )
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(),
    )


def resolve_config_path(config_path: str | None = None) -> pathlib.Path:
    """Return the explicit path, else the environment override, else the default."""
    resolved = config_path or os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_FILE)
    return pathlib.Path(resolved).expanduser()


def load_config(config_path: str | None = None) -> ClientConfig:
    """Load configuration from a JSON file.

    Raises:
        FileNotFoundError: If the configuration file does not exist.
        pydantic.ValidationError: If the file content is not a valid config.
    """
    path = resolve_config_path(config_path)
    if not path.exists():
        msg = f"Configuration file not found: {path}"
        raise FileNotFoundError(msg)

    with path.open("r") as f:
        data = json.load(f)

    return ClientConfig(**data)
