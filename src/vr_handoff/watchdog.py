"""Single-pass watchdog that restores the persistent Oculus background service."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Optional, Sequence

from .bounded_waiter import pause
from .exceptions import ProcessControlError

logger = logging.getLogger(__name__)


class WatchdogOutcome(Enum):
    SERVICE_RUNNING = "service_running"
    SERVICE_RETURNED = "service_returned"
    SERVICE_RELAUNCHED = "service_relaunched"
    CANCELLED = "cancelled"


class ServiceWatchdog:
    """Detects a missing background service, clears its dependents and relaunches it.

    Dependents are matched by name only; they are singleton system processes
    of the same installation.
    """

    def __init__(
        self,
        control: Any,
        service_name: str,
        service_launcher: str,
        dependent_names: Sequence[str],
        settle_seconds: float,
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ):
        self.control = control
        self.service_name = service_name
        self.service_launcher = service_launcher
        self.dependent_names = tuple(dependent_names)
        self.settle_seconds = settle_seconds
        self.cancel_event = cancel_event

    def service_running(self) -> bool:
        return bool(self.control.find_by_name(self.service_name))

    async def run_once(self) -> WatchdogOutcome:
        """Check the service once and restore it if it has disappeared."""
        if self.service_running():
            logger.info("%s is running; nothing to do", self.service_name)
            return WatchdogOutcome.SERVICE_RUNNING

        logger.warning("%s is not running; stopping dependents %s", self.service_name, ", ".join(self.dependent_names))
        killed = self._terminate_dependents()
        logger.info("Stopped %d dependent process(es)", killed)

        if await pause(self.settle_seconds, self.cancel_event):
            return WatchdogOutcome.CANCELLED

        if self.service_running():
            logger.info("%s came back on its own; skipping relaunch", self.service_name)
            return WatchdogOutcome.SERVICE_RETURNED

        self.control.launch(self.service_launcher)
        return WatchdogOutcome.SERVICE_RELAUNCHED

    def _terminate_dependents(self) -> int:
        killed = 0
        for name in self.dependent_names:
            for proc in self.control.find_by_name(name):
                try:
                    if self.control.terminate(proc):
                        killed += 1
                except ProcessControlError as exc:  # Best-effort cleanup  # policy_guard: allow-silent-handler
                    logger.warning("Could not stop %s: %s", name, exc)
        return killed


__all__ = ["ServiceWatchdog", "WatchdogOutcome"]
