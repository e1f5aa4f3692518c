"""
Remote Config Client

Retrieves application configuration from a prioritized list of remote
endpoints, caches it, detects changes and optionally polls for updates.
"""

from .client import ConfigClient, PollingState
from .common import (
    ClientOptions,
    ConfigurationEvent,
    ConfigurationStatus,
    load_client_options,
    RemoteConfigError,
    OptionsError,
    ConfigurationUndefinedError,
    FetchError,
    ConfigValidationError,
    ConfigurationFailedError,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigClient",
    "PollingState",
    "ClientOptions",
    "ConfigurationEvent",
    "ConfigurationStatus",
    "load_client_options",
    "RemoteConfigError",
    "OptionsError",
    "ConfigurationUndefinedError",
    "FetchError",
    "ConfigValidationError",
    "ConfigurationFailedError",
]
