"""
Endpoint Resolver

Walks the endpoint list in priority order and stops at the first endpoint
that returns a usable (truthy) configuration. Endpoints are never raced.
"""

from dataclasses import dataclass
from typing import Any, Callable, Sequence

from remote_config.common.exceptions import (
    ConfigurationFailedError,
    ConfigurationUndefinedError,
    FetchError,
)
from remote_config.common.logging_setup import get_service_logger
from remote_config.providers.base import FetchProvider

logger = get_service_logger("client.resolver")


@dataclass(frozen=True)
class ResolveResult:
    """Winning endpoint and raw value, or the aggregate failure"""
    endpoint: str | None = None
    configuration: Any = None
    error: ConfigurationFailedError | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class EndpointResolver:
    """
    Ordered endpoint fallback.

    Each failing endpoint is reported exactly once: fetch errors through
    on_fetch_error, empty results through on_configuration_undefined.
    """

    def __init__(
        self,
        endpoints: Sequence[str],
        fetch: FetchProvider,
        on_fetch_error: Callable[[FetchError], None],
        on_configuration_undefined: Callable[[ConfigurationUndefinedError], None],
    ):
        self.endpoints = tuple(endpoints)
        self.fetch = fetch
        self.on_fetch_error = on_fetch_error
        self.on_configuration_undefined = on_configuration_undefined

    async def resolve(self) -> ResolveResult:
        """
        Try each endpoint until one of them returns some configuration.

        Returns:
            ResolveResult with endpoint and raw configuration, or with
            error set to ConfigurationFailedError if every endpoint failed
        """
        for attempt, endpoint in enumerate(self.endpoints, start=1):
            logger.debug(
                f"Fetching endpoint {attempt}/{len(self.endpoints)}: {endpoint}",
                extra={"endpoint": endpoint, "attempt": attempt},
            )

            try:
                data = await self.fetch(endpoint)
            except Exception as e:
                error = FetchError(e, endpoint)
                error.__cause__ = e
                logger.warning(
                    f"Failed to fetch {endpoint}: {e}",
                    extra={"endpoint": endpoint},
                )
                self.on_fetch_error(error)
                continue

            if not data:
                logger.warning(
                    f"Endpoint returned no configuration: {endpoint}",
                    extra={"endpoint": endpoint},
                )
                self.on_configuration_undefined(ConfigurationUndefinedError(endpoint))
                continue

            logger.debug(f"Configuration found at {endpoint}", extra={"endpoint": endpoint})
            return ResolveResult(endpoint=endpoint, configuration=data)

        logger.error(
            f"All {len(self.endpoints)} configuration endpoints failed",
            extra={"endpoints": list(self.endpoints)},
        )
        return ResolveResult(error=ConfigurationFailedError(self.endpoints))
