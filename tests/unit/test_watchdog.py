import asyncio

import psutil
import pytest

from tests.helpers.process_table import FakeProcess, FakeProcessTable, RecordingControl
from vr_handoff import watchdog as watchdog_module
from vr_handoff.watchdog import ServiceWatchdog, WatchdogOutcome

LAUNCHER = r"C:\Program Files\Oculus\Support\oculus-runtime\OVRServiceLauncher.exe"
DEPENDENTS = ("OVRServer_x64", "OVRRedir", "OculusClient")


def _watchdog(control, **kwargs) -> ServiceWatchdog:
    return ServiceWatchdog(control, "OVRService_x64", LAUNCHER, DEPENDENTS, 0, **kwargs)


@pytest.mark.asyncio
async def test_running_service_leaves_everything_alone():
    client = FakeProcess(2, "OculusClient.exe")
    control = RecordingControl(FakeProcessTable([FakeProcess(1, "OVRService_x64.exe"), client]))

    outcome = await _watchdog(control).run_once()

    assert outcome is WatchdogOutcome.SERVICE_RUNNING
    assert control.calls_named("terminate") == []
    assert control.calls_named("launch") == []
    assert client.alive


@pytest.mark.asyncio
async def test_missing_service_stops_dependents_and_relaunches():
    server = FakeProcess(2, "OVRServer_x64.exe")
    redir = FakeProcess(3, "OVRRedir.exe")
    unrelated = FakeProcess(4, "explorer.exe")
    control = RecordingControl(FakeProcessTable([server, redir, unrelated]))

    outcome = await _watchdog(control).run_once()

    assert outcome is WatchdogOutcome.SERVICE_RELAUNCHED
    assert server.kill_calls == 1
    assert redir.kill_calls == 1
    assert unrelated.kill_calls == 0
    assert control.calls_named("launch") == [("launch", LAUNCHER)]


@pytest.mark.asyncio
async def test_service_returning_during_settle_skips_relaunch(monkeypatch):
    table = FakeProcessTable([FakeProcess(2, "OVRServer_x64.exe")])
    control = RecordingControl(table)

    async def external_restart(seconds, cancel_event=None):
        table.add(FakeProcess(9, "OVRService_x64.exe"))
        return False

    monkeypatch.setattr(watchdog_module, "pause", external_restart)

    outcome = await _watchdog(control).run_once()

    assert outcome is WatchdogOutcome.SERVICE_RETURNED
    assert control.calls_named("launch") == []


@pytest.mark.asyncio
async def test_dependent_that_cannot_be_stopped_does_not_abort_relaunch():
    class Protected(FakeProcess):
        def kill(self):
            raise psutil.AccessDenied(pid=self.pid)

    protected = Protected(2, "OVRServer_x64.exe")
    client = FakeProcess(3, "OculusClient.exe")
    control = RecordingControl(FakeProcessTable([protected, client]))

    outcome = await _watchdog(control).run_once()

    assert outcome is WatchdogOutcome.SERVICE_RELAUNCHED
    assert client.kill_calls == 1


@pytest.mark.asyncio
async def test_cancelled_settle_skips_relaunch():
    cancel_event = asyncio.Event()
    cancel_event.set()
    control = RecordingControl(FakeProcessTable())

    outcome = await _watchdog(control, cancel_event=cancel_event).run_once()

    assert outcome is WatchdogOutcome.CANCELLED
    assert control.calls_named("launch") == []
