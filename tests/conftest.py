"""Root pytest configuration and shared fixtures."""

from __future__ import annotations

import os

import pytest


@pytest.fixture(autouse=True)
def _hermetic_environment(monkeypatch):
    """Keep the developer's own overrides and Oculus install out of the tests."""
    for name in list(os.environ):
        if name.startswith("VR_HANDOFF_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv("OculusBase", raising=False)
