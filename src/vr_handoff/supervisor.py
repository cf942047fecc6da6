"""
Hand-off supervisor.

Sequences one hand-off from SteamVR back to the Oculus runtime:

1. Resolve executable paths (no process is touched if this fails)
2. Run the SteamVR startup launcher and wait for it to exit
3. Poll for ``vrserver`` at its expected path (bounded by a startup deadline)
4. Wait, without a deadline, for ``vrserver`` to exit
5. Locate ``OVRServer_x64`` at its expected path
6. After a grace delay, kill it once and wait for its confirmed exit

Every transition is logged. Reportable failures end the run in
``HandoffState.FAILED`` with a reason instead of raising.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Protocol

from .bounded_waiter import WaitStatus, pause, wait_until
from .config import HandoffSettings
from .exceptions import ApplicationError, ConfigurationError, ProcessControlError, ProcessNotFound
from .path_resolver import HandoffPaths

logger = logging.getLogger(__name__)

FAILURE_PATHS_UNRESOLVED = "paths unresolved"
FAILURE_DEPENDENT_NOT_FOUND = "dependent not found"
FAILURE_HEADSET_NOT_FOUND = "headset runtime not found"
FAILURE_PATH_MISMATCH = "headset runtime path mismatch"
FAILURE_CANCELLED = "cancelled"


class HandoffState(Enum):
    NOT_STARTED = "not_started"
    PRIMARY_LAUNCHED = "primary_launched"
    DEPENDENT_RUNNING = "dependent_running"
    DEPENDENT_EXITED = "dependent_exited"
    TEARDOWN_COMPLETE = "teardown_complete"
    FAILED = "failed"


TERMINAL_STATES = frozenset({HandoffState.TEARDOWN_COMPLETE, HandoffState.FAILED})


class PathResolverLike(Protocol):
    def resolve(self) -> HandoffPaths: ...


class HandoffCancelled(ApplicationError):
    """An external shutdown request interrupted the hand-off."""

    def __init__(self, message: str = FAILURE_CANCELLED, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


@dataclass
class HandoffResult:
    """Outcome of a single hand-off run."""

    state: HandoffState
    reason: Optional[str] = None
    error: Optional[BaseException] = None
    history: List[HandoffState] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state is HandoffState.TEARDOWN_COMPLETE


class HandoffSupervisor:
    """State machine owning the timeout policy and ordering of the hand-off."""

    def __init__(
        self,
        resolver: PathResolverLike,
        control: Any,
        settings: Optional[HandoffSettings] = None,
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ):
        self.resolver = resolver
        self.control = control
        self.settings = settings if settings is not None else HandoffSettings()
        self.cancel_event = cancel_event
        self.state = HandoffState.NOT_STARTED
        self.history: List[HandoffState] = [HandoffState.NOT_STARTED]

    def _transition(self, new_state: HandoffState, detail: str = "") -> None:
        if self.state in TERMINAL_STATES:
            raise RuntimeError(f"Hand-off already finished in state {self.state.value}")
        logger.info(
            "Hand-off state %s -> %s%s",
            self.state.value,
            new_state.value,
            f" ({detail})" if detail else "",
        )
        self.state = new_state
        self.history.append(new_state)

    def _fail(self, reason: str, error: Optional[BaseException] = None) -> HandoffResult:
        self._transition(HandoffState.FAILED, reason)
        if error is not None and str(error) != reason:
            logger.error("Hand-off failed: %s: %s", reason, error)
        else:
            logger.error("Hand-off failed: %s", reason)
        return HandoffResult(self.state, reason, error, list(self.history))

    async def run(self) -> HandoffResult:
        """Perform one hand-off sequence and report how it ended."""
        if self.state is not HandoffState.NOT_STARTED:
            raise RuntimeError("HandoffSupervisor instances run a single sequence")

        try:
            paths = self.resolver.resolve()
        except ConfigurationError as exc:
            return self._fail(FAILURE_PATHS_UNRESOLVED, exc)

        try:
            await self._run_sequence(paths)
        except HandoffCancelled:
            return self._fail(FAILURE_CANCELLED)
        except (ProcessNotFound, ProcessControlError) as exc:
            return self._fail(str(exc), exc)

        return HandoffResult(self.state, None, None, list(self.history))

    async def _run_sequence(self, paths: HandoffPaths) -> None:
        settings = self.settings
        self._raise_if_cancelled()

        exit_code = await self.control.launch_and_wait(paths.primary_launcher, self.cancel_event)
        self._raise_if_cancelled()
        if exit_code:
            logger.warning("Primary launcher exited with code %s", exit_code)
        self._transition(HandoffState.PRIMARY_LAUNCHED, paths.primary_launcher)

        found = await wait_until(
            lambda: self.control.find(settings.dependent_process_name, paths.dependent),
            settings.poll_interval_seconds,
            settings.dependent_start_timeout_seconds,
            self.cancel_event,
        )
        self._raise_if_cancelled(found.status)
        if not found.is_found:
            raise ProcessNotFound(FAILURE_DEPENDENT_NOT_FOUND, name=settings.dependent_process_name, path=paths.dependent)
        dependent = found.value
        self._transition(HandoffState.DEPENDENT_RUNNING, f"PID {dependent.pid}")

        exited = await self.control.wait_for_exit(dependent, None, self.cancel_event)
        self._raise_if_cancelled(exited.status)
        self._transition(HandoffState.DEPENDENT_EXITED, f"PID {dependent.pid}")

        headset = self.control.find(settings.headset_runtime_process_name, paths.headset_runtime)
        if headset is None:
            raise ProcessNotFound(FAILURE_HEADSET_NOT_FOUND, name=settings.headset_runtime_process_name, path=paths.headset_runtime)
        if not headset.matches_path(paths.headset_runtime):
            raise ProcessNotFound(FAILURE_PATH_MISMATCH, pid=headset.pid, path=headset.exe)

        await self._teardown(headset)

    async def _teardown(self, headset: Any) -> None:
        logger.info(
            "Waiting %.1fs before terminating headset runtime PID %s",
            self.settings.teardown_grace_seconds,
            headset.pid,
        )
        if await pause(self.settings.teardown_grace_seconds, self.cancel_event):
            raise HandoffCancelled()

        delivered = self.control.terminate(headset)
        if not delivered:
            logger.info("Headset runtime PID %s was already gone", headset.pid)

        confirmed = await self.control.wait_for_exit(headset, None, self.cancel_event)
        self._raise_if_cancelled(confirmed.status)
        self._transition(HandoffState.TEARDOWN_COMPLETE, f"PID {headset.pid} exited")

    def _raise_if_cancelled(self, status: Optional[WaitStatus] = None) -> None:
        if status is WaitStatus.CANCELLED or (self.cancel_event is not None and self.cancel_event.is_set()):
            raise HandoffCancelled()


__all__ = [
    "FAILURE_CANCELLED",
    "FAILURE_DEPENDENT_NOT_FOUND",
    "FAILURE_HEADSET_NOT_FOUND",
    "FAILURE_PATHS_UNRESOLVED",
    "FAILURE_PATH_MISMATCH",
    "HandoffCancelled",
    "HandoffResult",
    "HandoffState",
    "HandoffSupervisor",
]
