"""
Configuration Dataclasses

Type-safe structures shared by the client: the event status enum, the
event handed to callbacks, and the options the client is built from.
Options can be written in code or loaded from a YAML file.
"""

import os
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable, Generic, Mapping, Sequence, TypeVar

import yaml

from .exceptions import ConfigurationFailedError, OptionsError
from .logging_setup import get_service_logger

logger = get_service_logger("config")

T = TypeVar("T")


class ConfigurationStatus(str, Enum):
    """Outcome of a configuration cycle or cache hit"""
    ERROR = "error"
    LOADED = "loaded"
    UPDATED = "updated"
    EQUAL = "equal"
    CACHED = "cached"


@dataclass(frozen=True)
class ConfigurationEvent(Generic[T]):
    """Result of one cycle, handed to the callback and returned to the caller"""
    status: ConfigurationStatus
    endpoint: str | None = None
    configuration: T | None = None
    error: ConfigurationFailedError | None = None

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly view of the event"""
        data: dict[str, Any] = {
            "status": self.status.value,
            "endpoint": self.endpoint,
            "configuration": self.configuration,
        }
        if self.error is not None:
            data["error"] = {
                "type": type(self.error).__name__,
                "message": self.error.message,
                "endpoints": self.error.endpoints,
            }
        return data


Callback = Callable[[ConfigurationEvent], Awaitable[Any] | Any]


@dataclass
class ClientOptions:
    """
    Options accepted by ConfigClient.

    endpoints and callback are required; everything else falls back to
    the defaults in remote_config.providers.
    """
    endpoints: Sequence[str] | None = None
    callback: Callback | None = None
    override: Any = None
    interval: float | None = None  # seconds, None/0 disables polling
    initialize: bool = False
    cache: Any = None
    fetch: Callable[[str], Awaitable[Any]] | None = None
    equality: Callable[[Any, Any], bool] | None = None
    transformer: Callable[[Any], Any] | None = None
    validator: Callable[[Any], Any] | None = None
    log: Callable[..., None] | None = None
    on_fetch_error: Callable[[Exception], None] | None = None
    on_validation_error: Callable[[Exception, Any], None] | None = None
    on_configuration_undefined: Callable[[Exception], None] | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ClientOptions":
        """Build options from a mapping, rejecting unknown keys"""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise OptionsError(f"Unknown option(s): {', '.join(unknown)}", dict(data))
        return cls(**data)


def _endpoints_from_env(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def load_client_options(
    config_path: str | Path | None = None,
    **overrides: Any,
) -> ClientOptions:
    """
    Load client options from a YAML file and environment variables.

    Precedence (lowest to highest): YAML file, REMOTE_CONFIG_ENDPOINTS /
    REMOTE_CONFIG_INTERVAL environment variables, keyword overrides.

    Recognized YAML keys: endpoints, interval, initialize, override,
    cache_path (selects a FileCacheProvider at that location).

    Args:
        config_path: Path to YAML file (optional)
        **overrides: Any ClientOptions field, e.g. callback=...

    Returns:
        ClientOptions instance
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            try:
                with open(path, "r", encoding="utf-8") as f:
                    data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise OptionsError(f"Error parsing config file {path}: {e}", str(path)) from e
            if not isinstance(data, dict):
                raise OptionsError(f"Config file {path} must contain a mapping", data)
            logger.info(f"Loaded client options from {path}")
        else:
            logger.warning(f"Config file not found: {path}")

    cache_path = data.pop("cache_path", None)
    if cache_path and "cache" not in overrides:
        from remote_config.providers.cache import FileCacheProvider
        data["cache"] = FileCacheProvider(Path(cache_path))

    env_endpoints = os.environ.get("REMOTE_CONFIG_ENDPOINTS")
    if env_endpoints:
        data["endpoints"] = _endpoints_from_env(env_endpoints)

    env_interval = os.environ.get("REMOTE_CONFIG_INTERVAL")
    if env_interval:
        try:
            data["interval"] = float(env_interval)
        except ValueError as e:
            raise OptionsError(f"Invalid REMOTE_CONFIG_INTERVAL: {env_interval}", env_interval) from e

    data.update(overrides)
    return ClientOptions.from_mapping(data)
