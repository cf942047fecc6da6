"""
Executable path discovery for the hand-off sequence.

Paths come from two external sources that this program reads but does not own:
1. The ``OculusBase`` environment variable (Oculus installation root)
2. OpenVR's ``openvrpaths.vrpath`` JSON file (SteamVR runtime directory)

Any missing or malformed input is a hard stop: the resolver raises
``ConfigurationMissing`` or ``ConfigurationCorrupt`` before any process is
touched.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config import env_str, local_app_data_dir
from .exceptions import ConfigurationCorrupt, ConfigurationMissing

logger = logging.getLogger(__name__)

OCULUS_BASE_ENV = "OculusBase"
OCULUS_RUNTIME_DIR = ("Support", "oculus-runtime")
HEADSET_RUNTIME_EXECUTABLE = "OVRServer_x64.exe"
SERVICE_LAUNCHER_EXECUTABLE = "OVRServiceLauncher.exe"

STEAMVR_BIN_DIR = ("bin", "win64")
PRIMARY_LAUNCHER_EXECUTABLE = "vrstartup.exe"
DEPENDENT_EXECUTABLE = "vrserver.exe"


def default_openvr_paths_file() -> Path:
    """Location OpenVR writes its runtime registry to."""
    return local_app_data_dir() / "openvr" / "openvrpaths.vrpath"


@dataclass(frozen=True)
class HandoffPaths:
    """Absolute executable paths for each role in the hand-off."""

    primary_launcher: str
    dependent: str
    headset_runtime: str


class PathResolver:
    """Resolves the executable paths the supervisor correlates against the process table."""

    def __init__(self, openvr_paths_file: Optional[Path] = None):
        self.openvr_paths_file = openvr_paths_file if openvr_paths_file is not None else default_openvr_paths_file()

    def resolve(self) -> HandoffPaths:
        """
        Resolve all hand-off paths.

        Returns:
            HandoffPaths with every executable confirmed to exist

        Raises:
            ConfigurationMissing: If the environment variable, the OpenVR file or an executable is absent
            ConfigurationCorrupt: If the OpenVR file cannot be parsed or lacks a runtime entry
        """
        headset_runtime = self.resolve_headset_runtime()
        primary_launcher, dependent = self.resolve_steamvr_paths()
        paths = HandoffPaths(
            primary_launcher=str(primary_launcher),
            dependent=str(dependent),
            headset_runtime=str(headset_runtime),
        )
        logger.info(
            "Resolved paths: launcher=%s dependent=%s headset_runtime=%s",
            paths.primary_launcher,
            paths.dependent,
            paths.headset_runtime,
        )
        return paths

    def resolve_headset_runtime(self) -> Path:
        runtime_dir = self._oculus_runtime_dir()
        server_path = runtime_dir / HEADSET_RUNTIME_EXECUTABLE
        if not server_path.is_file():
            raise ConfigurationMissing(f"Oculus server executable not found at {server_path}", path=str(server_path))
        return server_path

    def resolve_service_launcher(self) -> Path:
        """Path of the launcher that starts the persistent Oculus background service."""
        launcher_path = self._oculus_runtime_dir() / SERVICE_LAUNCHER_EXECUTABLE
        if not launcher_path.is_file():
            raise ConfigurationMissing(f"Oculus service launcher not found at {launcher_path}", path=str(launcher_path))
        return launcher_path

    def resolve_steamvr_paths(self) -> tuple[Path, Path]:
        runtime_dir = self._steamvr_runtime_dir()
        bin_dir = runtime_dir.joinpath(*STEAMVR_BIN_DIR)
        launcher_path = bin_dir / PRIMARY_LAUNCHER_EXECUTABLE
        server_path = bin_dir / DEPENDENT_EXECUTABLE
        if not launcher_path.is_file() or not server_path.is_file():
            raise ConfigurationMissing(
                f"SteamVR executables not found under {bin_dir}. Has SteamVR been run once?",
                path=str(bin_dir),
            )
        return launcher_path, server_path

    def _oculus_runtime_dir(self) -> Path:
        base = env_str(OCULUS_BASE_ENV)
        if not base:
            raise ConfigurationMissing.missing_value(OCULUS_BASE_ENV, "Oculus installation environment not found")
        return Path(base).joinpath(*OCULUS_RUNTIME_DIR)

    def _steamvr_runtime_dir(self) -> Path:
        path = self.openvr_paths_file
        if not path.is_file():
            raise ConfigurationMissing(f"OpenVR paths file {path} not found. Has SteamVR been run once?", path=str(path))

        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ConfigurationCorrupt(f"Corrupt OpenVR paths file {path}: {exc}", path=str(path)) from exc

        if not isinstance(payload, dict):
            raise ConfigurationCorrupt(f"OpenVR paths file {path} must contain an object at the top level", path=str(path))

        runtimes = payload.get("runtime")
        if not isinstance(runtimes, list) or not runtimes:
            raise ConfigurationCorrupt(f"OpenVR paths file {path} does not list a runtime directory", path=str(path))

        runtime_dir = runtimes[0]
        if not isinstance(runtime_dir, str) or not runtime_dir.strip():
            raise ConfigurationCorrupt.invalid_format("runtime[0]", repr(runtime_dir), "a directory path string")
        return Path(runtime_dir)


__all__ = ["HandoffPaths", "PathResolver", "default_openvr_paths_file"]
