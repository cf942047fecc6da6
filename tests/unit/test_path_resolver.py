import json
from pathlib import Path

import pytest

from vr_handoff.exceptions import ConfigurationCorrupt, ConfigurationMissing
from vr_handoff.path_resolver import HandoffPaths, PathResolver, default_openvr_paths_file


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"")
    return path


def _install_oculus(tmp_path: Path, monkeypatch) -> Path:
    base = tmp_path / "Oculus"
    server = _touch(base / "Support" / "oculus-runtime" / "OVRServer_x64.exe")
    monkeypatch.setenv("OculusBase", str(base))
    return server


def _install_steamvr(tmp_path: Path) -> Path:
    runtime = tmp_path / "SteamVR"
    _touch(runtime / "bin" / "win64" / "vrstartup.exe")
    _touch(runtime / "bin" / "win64" / "vrserver.exe")
    return runtime


def _write_vrpath(tmp_path: Path, payload) -> Path:
    vrpath = tmp_path / "openvr" / "openvrpaths.vrpath"
    vrpath.parent.mkdir(parents=True, exist_ok=True)
    text = payload if isinstance(payload, str) else json.dumps(payload)
    vrpath.write_text(text, encoding="utf-8")
    return vrpath


def test_resolve_returns_all_paths(tmp_path, monkeypatch):
    server = _install_oculus(tmp_path, monkeypatch)
    runtime = _install_steamvr(tmp_path)
    vrpath = _write_vrpath(tmp_path, {"runtime": [str(runtime), "ignored"], "config": []})

    paths = PathResolver(vrpath).resolve()

    assert paths == HandoffPaths(
        primary_launcher=str(runtime / "bin" / "win64" / "vrstartup.exe"),
        dependent=str(runtime / "bin" / "win64" / "vrserver.exe"),
        headset_runtime=str(server),
    )


def test_missing_environment_variable_is_configuration_missing(tmp_path, monkeypatch):
    monkeypatch.delenv("OculusBase", raising=False)
    vrpath = _write_vrpath(tmp_path, {"runtime": [str(_install_steamvr(tmp_path))]})

    with pytest.raises(ConfigurationMissing) as excinfo:
        PathResolver(vrpath).resolve()

    assert "OculusBase" in str(excinfo.value)


def test_missing_oculus_executable_is_configuration_missing(tmp_path, monkeypatch):
    monkeypatch.setenv("OculusBase", str(tmp_path / "empty"))

    with pytest.raises(ConfigurationMissing):
        PathResolver(tmp_path / "unused.vrpath").resolve_headset_runtime()


def test_missing_vrpath_file_is_configuration_missing(tmp_path, monkeypatch):
    _install_oculus(tmp_path, monkeypatch)

    with pytest.raises(ConfigurationMissing) as excinfo:
        PathResolver(tmp_path / "openvr" / "openvrpaths.vrpath").resolve()

    assert "Has SteamVR been run once?" in str(excinfo.value)


@pytest.mark.parametrize(
    "payload",
    [
        "{not json",
        ["runtime"],
        {"config": []},
        {"runtime": []},
        {"runtime": "C:/SteamVR"},
        {"runtime": [42]},
        {"runtime": ["  "]},
    ],
)
def test_malformed_vrpath_is_configuration_corrupt(tmp_path, monkeypatch, payload):
    _install_oculus(tmp_path, monkeypatch)
    vrpath = _write_vrpath(tmp_path, payload)

    with pytest.raises(ConfigurationCorrupt):
        PathResolver(vrpath).resolve()


def test_missing_steamvr_executables_is_configuration_missing(tmp_path, monkeypatch):
    _install_oculus(tmp_path, monkeypatch)
    runtime = tmp_path / "SteamVR"
    _touch(runtime / "bin" / "win64" / "vrstartup.exe")
    vrpath = _write_vrpath(tmp_path, {"runtime": [str(runtime)]})

    with pytest.raises(ConfigurationMissing):
        PathResolver(vrpath).resolve()


def test_resolve_service_launcher(tmp_path, monkeypatch):
    _install_oculus(tmp_path, monkeypatch)
    launcher = _touch(tmp_path / "Oculus" / "Support" / "oculus-runtime" / "OVRServiceLauncher.exe")

    assert PathResolver(tmp_path / "unused").resolve_service_launcher() == launcher


def test_default_openvr_paths_file_uses_local_app_data(tmp_path, monkeypatch):
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))

    assert default_openvr_paths_file() == tmp_path / "openvr" / "openvrpaths.vrpath"
    assert PathResolver().openvr_paths_file == tmp_path / "openvr" / "openvrpaths.vrpath"
