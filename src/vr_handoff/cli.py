"""Command-line entry point: one hand-off (or one watchdog pass) per invocation.

Usage:
    python -m vr_handoff
    python -m vr_handoff --watchdog
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from typing import Optional, Sequence

from .config import HandoffSettings
from .exceptions import ApplicationError, ConfigurationError
from .logging_config import setup_logging
from .path_resolver import PathResolver
from .process_control import ProcessControl
from .supervisor import HandoffSupervisor
from .watchdog import ServiceWatchdog, WatchdogOutcome

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


def _notify(message: str) -> None:
    """Surface a failure to the user."""
    print(message, file=sys.stderr)


def _install_cancel_handlers(cancel_event: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, cancel_event.set)
        except (NotImplementedError, RuntimeError):  # Windows event loops  # policy_guard: allow-silent-handler
            signal.signal(sig, lambda _signum, _frame: loop.call_soon_threadsafe(cancel_event.set))


async def run_handoff(settings: HandoffSettings) -> int:
    cancel_event = asyncio.Event()
    _install_cancel_handlers(cancel_event)
    supervisor = HandoffSupervisor(
        PathResolver(settings.openvr_paths_file),
        ProcessControl(settings.poll_interval_seconds),
        settings,
        cancel_event=cancel_event,
    )
    result = await supervisor.run()
    if result.succeeded:
        return EXIT_OK
    message = f"Hand-off failed: {result.reason}"
    if result.error is not None and str(result.error) != result.reason:
        message += f" ({result.error})"
    _notify(message)
    return EXIT_FAILURE


async def run_watchdog(settings: HandoffSettings) -> int:
    cancel_event = asyncio.Event()
    _install_cancel_handlers(cancel_event)
    launcher = PathResolver(settings.openvr_paths_file).resolve_service_launcher()
    watchdog = ServiceWatchdog(
        ProcessControl(settings.poll_interval_seconds),
        settings.service_process_name,
        str(launcher),
        settings.watchdog_dependent_names,
        settings.watchdog_settle_seconds,
        cancel_event=cancel_event,
    )
    outcome = await watchdog.run_once()
    logger.info("Watchdog finished: %s", outcome.value)
    return EXIT_FAILURE if outcome is WatchdogOutcome.CANCELLED else EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vr-handoff",
        description="Run SteamVR, then shut down the Oculus runtime once SteamVR exits.",
    )
    parser.add_argument(
        "--watchdog",
        action="store_true",
        help="Instead of a hand-off, restore the Oculus background service if it has stopped",
    )
    parser.add_argument("--verbose", action="store_true", help="Log debug output to the console")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = HandoffSettings.from_env()
    except ConfigurationError as exc:
        setup_logging(verbose=args.verbose)
        logger.error("Invalid settings: %s", exc)
        _notify(f"Invalid settings: {exc}")
        return EXIT_FAILURE

    setup_logging(settings.log_file, verbose=args.verbose or settings.verbose)
    runner = run_watchdog if args.watchdog else run_handoff
    try:
        return asyncio.run(runner(settings))
    except ApplicationError as exc:
        logger.error("%s", exc)
        _notify(str(exc))
        return EXIT_FAILURE


__all__ = ["build_parser", "main", "run_handoff", "run_watchdog"]
