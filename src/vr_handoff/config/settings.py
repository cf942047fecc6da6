"""Tunable timing values and process names for the hand-off sequence."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .runtime import env_bool, env_float, env_list, env_str

DEFAULT_POLL_INTERVAL_SECONDS = 0.25
DEFAULT_DEPENDENT_START_TIMEOUT_SECONDS = 10.0
DEFAULT_TEARDOWN_GRACE_SECONDS = 5.0
DEFAULT_WATCHDOG_SETTLE_SECONDS = 2.0

DEPENDENT_PROCESS_NAME = "vrserver"
HEADSET_RUNTIME_PROCESS_NAME = "OVRServer_x64"
SERVICE_PROCESS_NAME = "OVRService_x64"
WATCHDOG_DEPENDENT_NAMES = ("OVRServer_x64", "OVRRedir", "OculusClient")

_ENV_PREFIX = "VR_HANDOFF_"


def local_app_data_dir() -> Path:
    """Return the per-user application data directory (``%LOCALAPPDATA%`` on Windows)."""
    configured = os.getenv("LOCALAPPDATA")
    if configured:
        return Path(configured)
    return Path.home() / ".local" / "share"


def _default_log_file() -> Path:
    return local_app_data_dir() / "vr_handoff" / "handoff.log"


@dataclass(frozen=True)
class HandoffSettings:
    """Timing policy and process identities used by the supervisor and watchdog."""

    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    dependent_start_timeout_seconds: float = DEFAULT_DEPENDENT_START_TIMEOUT_SECONDS
    teardown_grace_seconds: float = DEFAULT_TEARDOWN_GRACE_SECONDS
    watchdog_settle_seconds: float = DEFAULT_WATCHDOG_SETTLE_SECONDS
    dependent_process_name: str = DEPENDENT_PROCESS_NAME
    headset_runtime_process_name: str = HEADSET_RUNTIME_PROCESS_NAME
    service_process_name: str = SERVICE_PROCESS_NAME
    watchdog_dependent_names: tuple[str, ...] = WATCHDOG_DEPENDENT_NAMES
    log_file: Path = field(default_factory=_default_log_file)
    openvr_paths_file: Optional[Path] = None
    verbose: bool = False

    @classmethod
    def from_env(cls) -> "HandoffSettings":
        """Build settings from ``VR_HANDOFF_*`` environment overrides.

        Raises:
            ConfigurationError: If an override is present but malformed.
        """
        log_file = env_str(f"{_ENV_PREFIX}LOG_FILE")
        openvr_paths_file = env_str(f"{_ENV_PREFIX}OPENVR_PATHS_FILE")
        return cls(
            poll_interval_seconds=env_float(f"{_ENV_PREFIX}POLL_INTERVAL_SECONDS", DEFAULT_POLL_INTERVAL_SECONDS),
            dependent_start_timeout_seconds=env_float(
                f"{_ENV_PREFIX}DEPENDENT_START_TIMEOUT_SECONDS", DEFAULT_DEPENDENT_START_TIMEOUT_SECONDS
            ),
            teardown_grace_seconds=env_float(f"{_ENV_PREFIX}TEARDOWN_GRACE_SECONDS", DEFAULT_TEARDOWN_GRACE_SECONDS),
            watchdog_settle_seconds=env_float(f"{_ENV_PREFIX}WATCHDOG_SETTLE_SECONDS", DEFAULT_WATCHDOG_SETTLE_SECONDS),
            watchdog_dependent_names=env_list(f"{_ENV_PREFIX}WATCHDOG_DEPENDENTS", or_value=WATCHDOG_DEPENDENT_NAMES),
            log_file=Path(log_file).expanduser() if log_file else _default_log_file(),
            openvr_paths_file=Path(openvr_paths_file).expanduser() if openvr_paths_file else None,
            verbose=bool(env_bool(f"{_ENV_PREFIX}VERBOSE", or_value=False)),
        )


__all__ = ["HandoffSettings", "local_app_data_dir"]
