"""Supervise the hand-off from SteamVR back to the Oculus runtime."""

from .bounded_waiter import WaitOutcome, WaitStatus, wait_for_exit, wait_until
from .path_resolver import HandoffPaths, PathResolver
from .process_control import ProcessControl
from .process_matcher import ProcessHandle, ProcessMatcher
from .supervisor import HandoffResult, HandoffState, HandoffSupervisor
from .watchdog import ServiceWatchdog, WatchdogOutcome

__all__ = [
    "HandoffPaths",
    "HandoffResult",
    "HandoffState",
    "HandoffSupervisor",
    "PathResolver",
    "ProcessControl",
    "ProcessHandle",
    "ProcessMatcher",
    "ServiceWatchdog",
    "WaitOutcome",
    "WaitStatus",
    "WatchdogOutcome",
    "wait_for_exit",
    "wait_until",
]
