"""Provider ports used by the client.

Each port is a single-operation strategy so the client can be reused with
different transports, cache media and comparison rules. Plain functions
satisfy the callable ports; only the cache needs an object.
"""

from __future__ import annotations

from typing import Any, Awaitable, Protocol


class FetchProvider(Protocol):
    """Load the raw configuration published at an endpoint."""

    async def __call__(self, url: str) -> Any:
        ...


class CacheProvider(Protocol):
    """Hold the last known-good configuration."""

    async def read(self) -> Any | None:
        ...

    async def write(self, value: Any | None) -> None:
        ...


class EqualityProvider(Protocol):
    """Tell whether two configurations are the same."""

    def __call__(self, source: Any | None, target: Any | None) -> bool:
        ...


class TransformProvider(Protocol):
    """Map a raw endpoint result into the configuration the application uses."""

    def __call__(self, config: Any) -> Any | None:
        ...


class ValidationProvider(Protocol):
    """Raise if the raw configuration is not acceptable."""

    def __call__(self, config: Any) -> Awaitable[None] | None:
        ...


class LoggingProvider(Protocol):
    """Receive diagnostic messages, same signature as print()."""

    def __call__(self, *args: Any) -> None:
        ...
