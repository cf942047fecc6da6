"""
Host process-control boundary.

Exposes the five primitives the supervisor needs from the operating system:
start a process, find a process by name and path, wait for a process to
exit, terminate a process, and (for the watchdog) list processes by name.
The supervisor never touches psutil or subprocess directly, so tests can
substitute a fake implementing the same methods.
"""

from __future__ import annotations

import asyncio
import logging
import subprocess
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import psutil

from .bounded_waiter import WaitOutcome, wait_for_exit, wait_until
from .exceptions import ProcessControlError
from .process_matcher import ProcessHandle, ProcessMatcher

logger = logging.getLogger(__name__)


def _popen_options(executable: str) -> Dict[str, Any]:
    """Platform-specific options for launching a detached child."""
    options: Dict[str, Any] = {"cwd": str(Path(executable).parent)}
    if sys.platform == "win32":
        options["creationflags"] = subprocess.DETACHED_PROCESS | subprocess.CREATE_NEW_PROCESS_GROUP
    else:
        options["start_new_session"] = True
    return options


class ProcessControl:
    """psutil/subprocess implementation of the process-control boundary."""

    def __init__(self, poll_interval_seconds: float, matcher: Optional[ProcessMatcher] = None):
        self.poll_interval_seconds = poll_interval_seconds
        self.matcher = matcher if matcher is not None else ProcessMatcher()

    def launch(self, executable: str) -> subprocess.Popen:
        """Start ``executable`` and return immediately."""
        try:
            proc = subprocess.Popen([executable], **_popen_options(executable))
        except (OSError, subprocess.SubprocessError) as exc:
            raise ProcessControlError(f"Failed to launch {executable}: {exc}", executable=executable) from exc
        logger.info("Launched %s (PID %s)", executable, proc.pid)
        return proc

    async def launch_and_wait(self, executable: str, cancel_event: Optional[asyncio.Event] = None) -> Optional[int]:
        """
        Start ``executable`` and wait for that launcher process itself to exit.

        Returns:
            The launcher's exit code, or None if the wait was cancelled
        """
        proc = self.launch(executable)
        outcome = await wait_until(
            lambda: proc.poll() is not None,
            self.poll_interval_seconds,
            cancel_event=cancel_event,
        )
        if not outcome.is_found:
            return None
        logger.info("Launcher %s exited with code %s", executable, proc.returncode)
        return proc.returncode

    def find(self, name: str, expected_path: str) -> Optional[ProcessHandle]:
        try:
            return self.matcher.find_process(name, expected_path)
        except (psutil.Error, OSError) as exc:
            raise ProcessControlError(f"Failed to enumerate {name} processes: {exc}", name=name) from exc

    def find_by_name(self, name: str) -> List[Any]:
        try:
            return self.matcher.find_processes_by_name(name)
        except (psutil.Error, OSError) as exc:
            raise ProcessControlError(f"Failed to enumerate {name} processes: {exc}", name=name) from exc

    async def wait_for_exit(
        self,
        handle: ProcessHandle,
        deadline: Optional[float] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> WaitOutcome:
        """
        Poll until ``handle`` exits; a vanished process counts as exited.

        Raises:
            ProcessControlError: If the OS refuses to report the process state
        """
        try:
            return await wait_for_exit(handle, self.poll_interval_seconds, deadline, cancel_event)
        except (psutil.Error, OSError) as exc:
            pid = getattr(handle, "pid", None)
            raise ProcessControlError(f"Failed to observe process {pid}: {exc}", pid=pid) from exc

    def terminate(self, handle: Any) -> bool:
        """
        Kill the process behind ``handle``.

        Returns:
            True if the kill signal was delivered, False if the process was already gone

        Raises:
            ProcessControlError: If the OS refuses or fails the request
        """
        process = getattr(handle, "process", handle)
        pid = getattr(handle, "pid", None)
        try:
            process.kill()
        except psutil.NoSuchProcess:  # Exited between lookup and kill  # policy_guard: allow-silent-handler
            logger.info("Process %s already exited before termination", pid)
            return False
        except psutil.AccessDenied as exc:
            raise ProcessControlError(f"Access denied terminating process {pid}", pid=pid) from exc
        except (psutil.Error, OSError) as exc:
            raise ProcessControlError(f"Failed to terminate process {pid}: {exc}", pid=pid) from exc
        logger.info("Sent kill signal to process %s", pid)
        return True


__all__ = ["ProcessControl"]
