"""
Custom Exception Classes for the Remote Config Client

Hierarchical exception structure shared by the resolver, pipeline and client.
Only OptionsError is ever raised to callers; the others are reported through
callbacks or carried on a ConfigurationEvent.
"""

from typing import Any, Sequence


class RemoteConfigError(Exception):
    """Base exception for all remote config client errors"""

    def __init__(self, message: str, recoverable: bool = True):
        self.message = message
        self.recoverable = recoverable
        super().__init__(message)


class OptionsError(RemoteConfigError):
    """Client options are invalid - the client cannot be constructed"""

    def __init__(self, message: str, options: Any = None):
        self.options = options
        super().__init__(message, recoverable=False)


class ConfigurationUndefinedError(RemoteConfigError):
    """An endpoint answered without error but returned no content"""

    def __init__(self, endpoint: str):
        self.endpoint = endpoint
        super().__init__("Configuration Undefined", recoverable=True)

    def __str__(self) -> str:
        return f"{self.message}: {self.endpoint}"


class FetchError(RemoteConfigError):
    """Fetching an endpoint raised an error"""

    def __init__(self, error: BaseException, endpoint: str):
        self.error = error
        self.endpoint = endpoint
        super().__init__("Failed to fetch", recoverable=True)

    def __str__(self) -> str:
        return f"{self.message}: {self.endpoint} ({self.error!r})"


class ConfigValidationError(RemoteConfigError):
    """A bundled validator rejected the raw configuration"""

    def __init__(self, errors: Sequence[str]):
        self.errors = list(errors)
        super().__init__(
            f"Config validation failed: {len(self.errors)} errors", recoverable=True
        )


class ConfigurationFailedError(RemoteConfigError):
    """Every configured endpoint failed or returned nothing"""

    def __init__(self, endpoints: Sequence[str]):
        self.endpoints = list(endpoints)
        super().__init__("All configuration endpoints failed", recoverable=True)
