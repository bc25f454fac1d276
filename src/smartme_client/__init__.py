"""smart-me REST API client.

A lightweight, synchronous client for the smart-me metering API that
returns validated Pydantic models. Authentication uses HTTP Basic auth.

Exports:
    SmartMeClient: HTTP client with authentication and error handling.
    with_http_client, with_base_url, with_timeout: Construction options.
    types: Module containing Pydantic models for API responses.
    DEFAULT_BASE_URL: Production API root.
    DEFAULT_TIMEOUT: Default HTTP request timeout.
"""

from . import types
from .client import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, SmartMeClient, format_rfc3339
from .config import ClientConfig, configure_logging, load_config
from .errors import (
    APIError,
    DeadlineExceededError,
    DecodeError,
    SmartMeError,
    SmartMeValidationError,
)
from .options import Option, with_base_url, with_http_client, with_timeout
from .types import Device, DeviceValues, ObisValue, Value

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_TIMEOUT",
    "APIError",
    "ClientConfig",
    "DeadlineExceededError",
    "DecodeError",
    "Device",
    "DeviceValues",
    "ObisValue",
    "Option",
    "SmartMeClient",
    "SmartMeError",
    "SmartMeValidationError",
    "Value",
    "configure_logging",
    "format_rfc3339",
    "load_config",
    "types",
    "with_base_url",
    "with_http_client",
    "with_timeout",
]
