"""
Polling Controller

Owns the single deferred refresh timer of a client.

States:
- IDLE: no interval configured, or no timer started yet
- SCHEDULED: exactly one live timer
- PAUSED: suspended by pause(), no live timer
- STOPPED: shut down by stop(), never schedules again

Every scheduling decision goes through set_polling(), which cancels the
current timer before starting a new one, so a client never has two live
timers.

Usage:
    controller = PollingController(5.0, client.refresh)
    controller.set_polling(True)    # refresh in 5 seconds
    controller.pause()              # cancel, stay quiet
    controller.resume()             # full interval again, no immediate fetch
"""

import asyncio
from enum import Enum
from typing import Any, Awaitable, Callable

from remote_config.common.logging_setup import get_service_logger

logger = get_service_logger("client.polling")


class PollingState(str, Enum):
    IDLE = "idle"
    SCHEDULED = "scheduled"
    PAUSED = "paused"
    STOPPED = "stopped"


class PollingController:
    """
    Level-triggered polling: each successful refresh re-arms the timer.

    Attributes:
        interval: Seconds between refreshes (None or 0 disables polling)
        callback: Async function run when the timer elapses
    """

    def __init__(
        self,
        interval_seconds: float | None,
        callback: Callable[[], Awaitable[Any]],
        name: str = "polling",
    ):
        self.interval = interval_seconds or None
        self.callback = callback
        self.name = name

        self._task: asyncio.Task | None = None
        self._paused = False
        self._stopped = False

        # Observability metrics
        self._scheduled_count = 0
        self._fired_count = 0
        self._cancelled_count = 0

    @property
    def enabled(self) -> bool:
        return self.interval is not None and self.interval > 0

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def stopped(self) -> bool:
        return self._stopped

    @property
    def state(self) -> PollingState:
        if self._stopped:
            return PollingState.STOPPED
        if self._paused:
            return PollingState.PAUSED
        if self.is_scheduled:
            return PollingState.SCHEDULED
        return PollingState.IDLE

    @property
    def is_scheduled(self) -> bool:
        return self._task is not None and not self._task.done()

    def set_polling(self, start: bool) -> None:
        """
        Start or clear the timer.

        Args:
            start: True to (re)start the timer for the full interval,
                False to cancel any live timer
        """
        self._cancel()
        if start and self.enabled and not self._stopped:
            # Requires a running event loop
            self._task = asyncio.create_task(self._run(), name=f"{self.name}-timer")
            self._scheduled_count += 1
            logger.debug(
                f"Polling '{self.name}' scheduled in {self.interval}s",
                extra={"interval_s": self.interval},
            )

    def reschedule(self) -> None:
        """Re-arm after a successful cycle unless paused"""
        if not self._paused:
            self.set_polling(True)

    def pause(self) -> None:
        """Suspend polling; idempotent"""
        self._paused = True
        self.set_polling(False)
        logger.info(f"Polling '{self.name}' paused")

    def resume(self) -> None:
        """Restart the timer for the full interval without fetching now"""
        self._paused = False
        self.set_polling(True)
        logger.info(f"Polling '{self.name}' resumed")

    def stop(self) -> None:
        """
        Cancel the timer for good.

        A refresh already started by the timer may still finish, but its
        attempt to re-arm is ignored.
        """
        self._stopped = True
        self.set_polling(False)
        logger.debug(f"Polling '{self.name}' stopped")

    def _cancel(self) -> None:
        if self._task is not None:
            if not self._task.done():
                self._task.cancel()
                self._cancelled_count += 1
            self._task = None

    async def _run(self) -> None:
        """Wait out the interval, then fire the callback once."""
        try:
            await asyncio.sleep(self.interval)
        except asyncio.CancelledError:
            return

        # Detach first: the refresh we are about to run cancels the
        # current timer, which must not be this task.
        if self._task is asyncio.current_task():
            self._task = None
        self._fired_count += 1

        try:
            await self.callback()
        except Exception as e:
            logger.error(f"Polling '{self.name}' refresh error: {e}", exc_info=True)

    def get_stats(self) -> dict:
        """Get polling statistics for observability."""
        return {
            "name": self.name,
            "interval_s": self.interval,
            "state": self.state.value,
            "scheduled_count": self._scheduled_count,
            "fired_count": self._fired_count,
            "cancelled_count": self._cancelled_count,
        }
