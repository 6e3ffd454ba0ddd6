"""
Backend status monitor - keeps a continuously refreshed view of live vs. degraded mode.
"""

import asyncio
from datetime import datetime
from typing import Callable, List, Optional

from infrastructure.monitoring.logging_service import ErrorTracker, get_logger
from services.workspace_service.backend_facade import BackendFacade
from services.workspace_service.models import BackendStatus, Provenance


StatusListener = Callable[[BackendStatus], None]


class BackendStatusMonitor:
    """
    Polls the facade health probe on a fixed interval.

    Async hosts run the loop with `start()`. Hosts that re-execute on every user
    action, like Streamlit, call `refresh_if_due()` instead. The latest status is
    always readable through `status`; listeners are told about every refresh, and
    a failing listener is tracked without stopping the others.
    """

    def __init__(
        self,
        facade: BackendFacade,
        interval_seconds: Optional[float] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.logger = get_logger(__name__)
        self.facade = facade
        self.error_tracker = ErrorTracker(self.logger)
        if interval_seconds is None:
            interval_seconds = facade.config.health_poll_interval_seconds
        self.interval_seconds = interval_seconds
        self._clock = clock
        self._status = BackendStatus()
        self._listeners: List[StatusListener] = []
        self._task: Optional[asyncio.Task] = None

    @property
    def status(self) -> BackendStatus:
        return self._status

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def add_listener(self, listener: StatusListener):
        self._listeners.append(listener)

    async def refresh(self) -> BackendStatus:
        """Probe once and publish the result"""
        result = await self.facade.check_health()
        status = BackendStatus(
            is_connected=result.provenance is Provenance.LIVE,
            last_checked=self._clock(),
            error=result.diagnostic,
            circuit_state=self.facade.circuit_breaker.state.value
        )

        if status.is_connected != self._status.is_connected:
            self.logger.info(f"Backend status changed: {status.label}")

        self._status = status
        for listener in self._listeners:
            try:
                listener(status)
            except Exception as e:
                self.error_tracker.track_error(e, context="status_listener")
        return status

    def is_due(self) -> bool:
        """True when the last probe is at least one interval old, or never ran"""
        last_checked = self._status.last_checked
        if last_checked is None:
            return True
        return (self._clock() - last_checked).total_seconds() >= self.interval_seconds

    async def refresh_if_due(self) -> BackendStatus:
        """Probe only when the interval has elapsed; otherwise return the cached status"""
        if self.is_due():
            return await self.refresh()
        return self._status

    def start(self):
        """Start polling on the running event loop (no-op when already running)"""
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._poll())

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        await asyncio.wait({self._task})
        self._task = None

    async def _poll(self):
        while True:
            await self.refresh()
            await asyncio.sleep(self.interval_seconds)
