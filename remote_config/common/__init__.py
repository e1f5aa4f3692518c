"""
Common Utilities

Shared modules used across the client:
- config.py - Event and options dataclasses, YAML options loader
- exceptions.py - Custom exception classes
- logging_setup.py - Structured logging setup
"""

from .config import (
    ClientOptions,
    ConfigurationEvent,
    ConfigurationStatus,
    load_client_options,
)
from .exceptions import (
    RemoteConfigError,
    OptionsError,
    ConfigurationUndefinedError,
    FetchError,
    ConfigValidationError,
    ConfigurationFailedError,
)
from .logging_setup import (
    setup_logging,
    get_service_logger,
    set_log_level,
)

__all__ = [
    # Config
    "ClientOptions",
    "ConfigurationEvent",
    "ConfigurationStatus",
    "load_client_options",
    # Exceptions
    "RemoteConfigError",
    "OptionsError",
    "ConfigurationUndefinedError",
    "FetchError",
    "ConfigValidationError",
    "ConfigurationFailedError",
    # Logging
    "setup_logging",
    "get_service_logger",
    "set_log_level",
]
