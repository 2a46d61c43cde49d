"""Application entrypoint: replay recorded readings or run the simulator."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Iterable

from physio_monitor.collectors.csv_source import iter_csv_readings
from physio_monitor.collectors.simulator import ReadingSimulator
from physio_monitor.config import Settings, get_settings
from physio_monitor.logger import setup_logging
from physio_monitor.models import Reading, SessionResult
from physio_monitor.notifications.handlers import create_dispatcher
from physio_monitor.presentation.history import EventLog
from physio_monitor.research.analysis import results_to_dataframe, state_summary
from physio_monitor.session import MonitoringSession


def _run(
    readings: Iterable[Reading],
    settings: Settings,
    *,
    subject_id: str,
    events_only: bool,
    notify: bool,
    event_log: EventLog | None = None,
) -> list[SessionResult]:
    session = MonitoringSession(settings.monitor_config(), subject_id=subject_id)
    dispatcher = create_dispatcher(settings) if notify else None
    results: list[SessionResult] = []

    for result in session.process_batch(readings):
        results.append(result)
        if event_log is not None:
            event_log.extend(result.events)
        if events_only and not result.events:
            continue
        print(result.model_dump_json())
        if dispatcher is not None:
            asyncio.run(dispatcher.notify_result(
                result,
                recipient=settings.notification_email_to,
                subject_id=subject_id,
                disclaimer=settings.alert_disclaimer,
            ))
    return results


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="physio-monitor",
        description="Personal-baseline physiological state monitor.",
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--subject", default="", help="Subject id bound into logs.")
    common.add_argument("--events-only", action="store_true", help="Only print results that fired events.")
    common.add_argument("--summary", action="store_true", help="Print a per-state summary and the recent event log at the end.")
    common.add_argument("--notify", action="store_true", help="Dispatch alert notifications.")

    sub = parser.add_subparsers(dest="command")

    # ── replay ────────────────────────────────────────────────
    replay_parser = sub.add_parser("replay", parents=[common], help="Classify readings from a CSV file.")
    replay_parser.add_argument("path")

    # ── simulate ──────────────────────────────────────────────
    sim_parser = sub.add_parser("simulate", parents=[common], help="Classify synthetic readings.")
    sim_parser.add_argument("--count", type=int, default=120)
    sim_parser.add_argument("--seed", type=int, default=None)

    args = parser.parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level)

    if args.command == "replay":
        readings: Iterable[Reading] = iter_csv_readings(args.path)
    elif args.command == "simulate":
        readings = ReadingSimulator(seed=args.seed).generate(args.count)
    else:
        parser.print_help()
        sys.exit(1)

    event_log = EventLog.from_settings(settings)
    results = _run(
        readings,
        settings,
        subject_id=args.subject,
        events_only=args.events_only,
        notify=args.notify,
        event_log=event_log,
    )
    if args.summary:
        summary = state_summary(results_to_dataframe(results))
        summary["recent_events"] = [event.message for event in event_log]
        print(json.dumps(summary))


if __name__ == "__main__":
    main()
