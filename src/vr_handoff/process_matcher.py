"""Locate live processes by name and confirmed executable path."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional

import psutil

logger = logging.getLogger(__name__)

ProcessIterator = Callable[..., Iterable[Any]]

_EXE_SUFFIX = ".exe"


@dataclass
class ProcessHandle:
    """A live OS process together with its resolved executable path."""

    pid: int
    name: str
    exe: Optional[str]
    process: Any

    def is_running(self) -> bool:
        """Return False once the process has exited, vanished or become a zombie."""
        try:
            if not self.process.is_running():
                return False
            return self.process.status() != psutil.STATUS_ZOMBIE
        except psutil.NoSuchProcess:  # policy_guard: allow-silent-handler
            return False

    def matches_path(self, expected_path: str) -> bool:
        return paths_equal(self.exe, expected_path)


def normalize_process_name(name: Optional[str]) -> str:
    """Lower-case a process name and drop a trailing ``.exe``."""
    if not name:
        return ""
    lowered = name.casefold()
    if lowered.endswith(_EXE_SUFFIX):
        return lowered[: -len(_EXE_SUFFIX)]
    return lowered


def paths_equal(actual: Optional[str], expected: Optional[str]) -> bool:
    """Case-insensitive executable path comparison; an unknown path never matches."""
    if not actual or not expected:
        return False
    return actual.casefold() == expected.casefold()


class ProcessMatcher:
    """Correlates process-table entries with expected executable paths.

    Several unrelated processes may share a name, so a name match alone is
    never enough: the resolved executable must equal the expected path.
    """

    def __init__(self, process_iter: Optional[ProcessIterator] = None):
        self._process_iter = process_iter if process_iter is not None else psutil.process_iter

    def find_processes_by_name(self, name: str) -> List[Any]:
        """Return every live process whose reported name equals ``name``."""
        wanted = normalize_process_name(name)
        matches = []
        for proc in self._process_iter(["pid", "name"]):
            try:
                reported = proc.info.get("name")
            except (AttributeError, KeyError):  # policy_guard: allow-silent-handler
                continue
            if normalize_process_name(reported) == wanted:
                matches.append(proc)
        return matches

    def find_process(self, name: str, expected_path: str) -> Optional[ProcessHandle]:
        """
        Find the live process named ``name`` whose executable is ``expected_path``.

        Candidates whose executable cannot be inspected (owned by another
        user or session) or that exit mid-inspection are skipped.

        Returns:
            ProcessHandle for the first match, or None when nothing matches
        """
        for proc in self.find_processes_by_name(name):
            exe = self._resolve_exe(proc)
            if not paths_equal(exe, expected_path):
                if exe:
                    logger.debug("Ignoring %s process %s running from %s", name, proc.pid, exe)
                continue
            return ProcessHandle(pid=proc.pid, name=name, exe=exe, process=proc)
        return None

    @staticmethod
    def _resolve_exe(proc: Any) -> Optional[str]:
        try:
            return proc.exe()
        except psutil.AccessDenied:  # Expected for processes of other users  # policy_guard: allow-silent-handler
            logger.debug("Access denied resolving executable of process %s", proc.pid)
            return None
        except psutil.NoSuchProcess:  # Process exited between listing and inspection  # policy_guard: allow-silent-handler
            logger.debug("Process %s vanished before inspection", proc.pid)
            return None


__all__ = ["ProcessHandle", "ProcessMatcher", "normalize_process_name", "paths_equal"]
