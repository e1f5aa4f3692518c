"""
Configuration Pipeline

Turns the resolver's winning raw value into a ConfigurationEvent:
validate -> read prior -> transform -> compare -> notify -> persist.

The loaded flag lives here. Its only job is to tell the first successful
cycle (status "loaded") apart from later ones ("updated" / "equal"); it is
not derived from cache contents, so a warm file cache still yields
"loaded" on the first cycle of a new process.
"""

import inspect
from dataclasses import replace
from typing import Any, Awaitable, Callable

from remote_config.common.config import ConfigurationEvent, ConfigurationStatus
from remote_config.common.logging_setup import get_service_logger
from remote_config.providers.base import (
    CacheProvider,
    EqualityProvider,
    TransformProvider,
    ValidationProvider,
)

from .resolver import ResolveResult

logger = get_service_logger("client.pipeline")


async def maybe_await(value: Awaitable[Any] | Any) -> Any:
    """Await value if it is awaitable, so providers may be sync or async"""
    if inspect.isawaitable(value):
        return await value
    return value


class ConfigurationPipeline:
    """Runs one configuration cycle over a resolved endpoint result"""

    def __init__(
        self,
        cache: CacheProvider,
        callback: Callable[[ConfigurationEvent], Any],
        validator: ValidationProvider,
        transformer: TransformProvider,
        equality: EqualityProvider,
        on_validation_error: Callable[[Exception, Any], None],
    ):
        self.cache = cache
        self.callback = callback
        self.validator = validator
        self.transformer = transformer
        self.equality = equality
        self.on_validation_error = on_validation_error
        self._loaded = False

    @property
    def loaded(self) -> bool:
        """True once a cycle (or an override delivery) has completed"""
        return self._loaded

    def mark_loaded(self) -> None:
        self._loaded = True

    async def notify(self, event: ConfigurationEvent) -> ConfigurationEvent:
        """
        Invoke the consumer callback.

        A truthy return value replaces the event configuration; a falsy one
        keeps it. Callback exceptions propagate.
        """
        result = await maybe_await(self.callback(event))
        return replace(event, configuration=result or event.configuration)

    async def run(self, resolved: ResolveResult) -> ConfigurationEvent:
        """
        Run the cycle.

        Args:
            resolved: Output of EndpointResolver.resolve()

        Returns:
            The event as returned to the caller
        """
        if resolved.failed:
            return ConfigurationEvent(
                status=ConfigurationStatus.ERROR,
                endpoint=None,
                configuration=None,
                error=resolved.error,
            )

        raw = resolved.configuration

        # Validation is advisory only
        try:
            await maybe_await(self.validator(raw))
        except Exception as e:
            logger.warning(
                f"Configuration from {resolved.endpoint} failed validation: {e}",
                extra={"endpoint": resolved.endpoint},
            )
            self.on_validation_error(e, raw)

        prior = await self.cache.read()
        candidate = self.transformer(raw) or None
        changed = not self.equality(prior, candidate)

        status = self._derive_status(changed)
        event = await self.notify(
            ConfigurationEvent(
                status=status,
                endpoint=resolved.endpoint,
                configuration=candidate,
            )
        )

        await self.cache.write(event.configuration)
        self._loaded = True

        if status == ConfigurationStatus.EQUAL:
            logger.debug(f"Configuration unchanged ({resolved.endpoint})")
        else:
            logger.info(
                f"Configuration {status.value} from {resolved.endpoint}",
                extra={"endpoint": resolved.endpoint, "status": status.value},
            )

        return event

    def _derive_status(self, changed: bool) -> ConfigurationStatus:
        if not self._loaded:
            return ConfigurationStatus.LOADED
        if changed:
            return ConfigurationStatus.UPDATED
        return ConfigurationStatus.EQUAL
