"""
Config Client - Composition Root

Responsible for:
- Validating options and wiring providers (defaults or caller supplied)
- Serving cached configuration or refreshing from endpoints
- Polling for changes on an interval, with pause/resume
- Override mode: deliver a local configuration without any network,
  cache or timer activity
"""

import asyncio
from typing import Any, Mapping

from remote_config.common.config import ClientOptions, ConfigurationEvent, ConfigurationStatus
from remote_config.common.exceptions import OptionsError
from remote_config.common.logging_setup import get_service_logger
from remote_config.providers.base import CacheProvider, FetchProvider, LoggingProvider
from remote_config.providers.cache import MemoryCacheProvider
from remote_config.providers.equality import deep_equal
from remote_config.providers.fetch import HttpFetchProvider
from remote_config.providers.log import noop_log
from remote_config.providers.transform import identity_transform
from remote_config.providers.validation import noop_validator

from .pipeline import ConfigurationPipeline
from .polling import PollingController
from .resolver import EndpointResolver

logger = get_service_logger("client")


class ConfigClient:
    """
    Fetches configuration from a list of endpoints and optionally polls for
    changes while notifying the application through its callback.

    Example:
        async def on_config(event):
            if event.status == ConfigurationStatus.ERROR:
                return DEFAULT_CONFIG
            return event.configuration

        async with ConfigClient.create({
            "endpoints": ["https://cdn.example.com/app/1.2.0.json",
                          "https://cdn.example.com/app/default.json"],
            "callback": on_config,
            "interval": 3600,
            "initialize": True,
        }) as client:
            event = await client.get_configuration()
    """

    def __init__(self, options: ClientOptions | Mapping[str, Any]):
        if not isinstance(options, ClientOptions):
            options = ClientOptions.from_mapping(options)

        # Fatal checks come before any default is built
        if not options.endpoints:
            raise OptionsError("Missing endpoints", options)
        if not options.callback:
            raise OptionsError("Missing callback method", options)
        if options.interval is not None and options.interval < 0:
            raise OptionsError("Interval must be non-negative", options)

        self.options = options
        self.override = options.override
        self.endpoints = tuple(options.endpoints)
        self.initialize = options.initialize is True

        self.log: LoggingProvider = options.log or noop_log
        self.cache: CacheProvider = options.cache or MemoryCacheProvider()
        self.fetch: FetchProvider = options.fetch or HttpFetchProvider()

        self.resolver = EndpointResolver(
            endpoints=self.endpoints,
            fetch=self.fetch,
            on_fetch_error=options.on_fetch_error or self.log,
            on_configuration_undefined=options.on_configuration_undefined or self.log,
        )
        self.pipeline = ConfigurationPipeline(
            cache=self.cache,
            callback=options.callback,
            validator=options.validator or noop_validator,
            transformer=options.transformer or identity_transform,
            equality=options.equality or deep_equal,
            on_validation_error=options.on_validation_error or self.log,
        )
        # Override mode never polls
        interval = None if self.override else options.interval
        self.polling = PollingController(interval, self.refresh, name="config-client")

        self._start_task: asyncio.Task | None = None

        logger.debug(
            f"Config client created ({len(self.endpoints)} endpoints)",
            extra={
                "endpoints": list(self.endpoints),
                "interval_s": options.interval,
                "override": bool(self.override),
            },
        )

    @classmethod
    def create(cls, options: ClientOptions | Mapping[str, Any]) -> "ConfigClient":
        """Construct a client and start it (initial refresh if requested)"""
        client = cls(options)
        client.start()
        return client

    @property
    def loaded(self) -> bool:
        return self.pipeline.loaded

    @property
    def paused(self) -> bool:
        return self.polling.paused

    def start(self) -> asyncio.Task | None:
        """
        Fire the initial refresh in the background when `initialize` is set.

        Must be called from a running event loop.

        Returns:
            The background task, or None if initialize is off
        """
        if not self.initialize or self._start_task is not None:
            return self._start_task

        self._start_task = asyncio.create_task(self._initial_refresh(), name="config-client-init")
        return self._start_task

    async def _initial_refresh(self) -> ConfigurationEvent | None:
        try:
            return await self.refresh()
        except Exception as e:
            logger.error(f"Initial configuration refresh failed: {e}", exc_info=True)
            return None

    async def get_configuration(self) -> ConfigurationEvent:
        """
        Return the cached configuration, or load it if nothing is cached.

        A cache hit never touches endpoints or the polling timer.
        """
        if self.override:
            return await self._get_override()

        cached = await self.cache.read()
        if cached:
            logger.debug("Serving configuration from cache")
            return ConfigurationEvent(status=ConfigurationStatus.CACHED, configuration=cached)

        return await self.refresh()

    async def refresh(self) -> ConfigurationEvent:
        """
        Force a refresh from the endpoints.

        Any pending poll is cancelled first; on success the timer is re-armed
        for the full interval unless polling is paused.
        """
        if self.override:
            return await self._get_override()

        self.polling.set_polling(False)

        resolved = await self.resolver.resolve()
        event = await self.pipeline.run(resolved)

        if event.status != ConfigurationStatus.ERROR:
            self.polling.reschedule()

        return event

    async def _get_override(self) -> ConfigurationEvent:
        """Deliver the override; no fetch, no cache, no polling"""
        event = await self.pipeline.notify(
            ConfigurationEvent(status=ConfigurationStatus.CACHED, configuration=self.override)
        )
        self.pipeline.mark_loaded()
        return event

    def pause(self) -> None:
        """Pause polling if an interval was configured"""
        self.polling.pause()

    def resume(self) -> None:
        """Resume or restart polling if an interval was configured"""
        self.polling.resume()

    def get_stats(self) -> dict:
        """Client state for observability"""
        return {
            "endpoints": list(self.endpoints),
            "override": bool(self.override),
            "loaded": self.loaded,
            "polling": self.polling.get_stats(),
        }

    async def close(self) -> None:
        """Stop polling and release provider resources"""
        self.polling.stop()

        if self._start_task is not None and not self._start_task.done():
            self._start_task.cancel()
            try:
                await self._start_task
            except asyncio.CancelledError:
                pass

        aclose = getattr(self.fetch, "aclose", None)
        if aclose is not None:
            await aclose()

    async def __aenter__(self) -> "ConfigClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
