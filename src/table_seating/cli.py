"""Command line interface for table seating."""
from __future__ import annotations

import argparse
import csv
import logging
from pathlib import Path
from typing import Sequence

from .csv_loader import load_all, load_events, write_assignments
from .errors import SeatingError, StoreError
from .events import default_event, event_phase, phase_label
from .models import Event
from .reconciler import reconcile_over_capacity
from .report import REPORT_FIELDS, report_totals, table_report
from .service import SeatingService
from .store import InMemoryStore


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--tables", required=True, help="Path to tables.csv")
    parser.add_argument("--assignments", help="Path to assignments.csv")
    parser.add_argument("--participants", help="Path to participants.csv")
    parser.add_argument("--events", help="Path to events.csv")
    parser.add_argument("--event-id", help="Only use tables of this event. Defaults to the first open event.")
    parser.add_argument("--out-assignments", type=Path,
                        help="Write the resulting assignments CSV.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Event table seating")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging verbosity.")
    sub = parser.add_subparsers(dest="command", required=True)

    plan = sub.add_parser("plan", help="Auto-assign unassigned participants to tables.")
    _add_common(plan)
    plan.add_argument("--apply", action="store_true",
                      help="Commit the plan instead of only printing it.")

    reconcile = sub.add_parser("reconcile", help="Remove assignments that exceed table capacity.")
    _add_common(reconcile)
    reconcile.add_argument("--apply", action="store_true",
                           help="Delete the excess assignments.")

    seat = sub.add_parser("seat", help="Move an assignment to a seat number.")
    _add_common(seat)
    seat.add_argument("--assignment-id", required=True)
    seat.add_argument("--seat", type=int, required=True, help="1-indexed seat number.")

    report = sub.add_parser("report", help="Per-table occupancy report.")
    _add_common(report)
    report.add_argument("--out-report", type=Path, help="Write per-table report CSV.")
    return parser


def _select_event(args: argparse.Namespace, events):
    if args.event_id:
        # Without events.csv the event is only known by id: undated and open
        event = next((e for e in events if e.id == args.event_id), None) or Event(id=args.event_id)
        return event, event.id
    event = default_event(events)
    return event, event.id if event else None


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point used by ``python -m table_seating.cli``."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    try:
        events = load_events(args.events) if args.events else []
        event, event_id = _select_event(args, events)
        tables, participants, _ = load_all(
            args.tables, args.assignments, args.participants, event_id=event_id,
        )
    except (ValueError, OSError) as exc:
        parser.exit(2, f"error: {exc}\n")

    if event is not None:
        print(f"[EVENT] {event.id} {event.title} phase={phase_label(event_phase(event))}")

    store = InMemoryStore(tables, participants=participants if args.participants else None, event_id=event_id)
    service = SeatingService(store, event=event)

    try:
        if args.command == "plan":
            if args.apply:
                report = service.auto_assign(participants)
                print(f"[RESULT] {report.message()}")
            else:
                plan = service.plan(participants)
                for batch in plan.batches:
                    for pid in batch.participant_ids:
                        print(f"{batch.table_id},{pid}")
                print(f"[PLAN] {plan.summary()}")
        elif args.command == "reconcile":
            for table in store.tables():
                evicted = service.update_capacity(table.id, table.capacity) if args.apply \
                    else reconcile_over_capacity(table)
                for assignment_id in evicted:
                    print(f"{table.id},{assignment_id}")
        elif args.command == "seat":
            result = service.update_seat(args.assignment_id, args.seat)
            for a in result.changed:
                print(f"{a.id},{a.seat_number}")
        elif args.command == "report":
            _print_report(store.tables(), args.out_report)
    except (SeatingError, StoreError) as exc:
        parser.exit(1, f"error: {exc}\n")

    if args.out_assignments:
        args.out_assignments.parent.mkdir(parents=True, exist_ok=True)
        write_assignments(args.out_assignments, store.tables())


def _print_report(tables, out_report: Path | None) -> None:
    rows = table_report(tables)
    for r in rows:
        print(f"[REPORT] {r['table']} status={r['status']} assigned={r['assigned']}/{r['capacity']} "
              f"available={r['available']} seated={r['seated']}")
    totals = report_totals(rows)
    print(f"[TOTAL] tables={totals['tables']} assigned={totals['assigned']}/{totals['capacity']} "
          f"full={totals['full_tables']}")

    if out_report:
        out_report.parent.mkdir(parents=True, exist_ok=True)
        with out_report.open("w", newline="") as f:
            w = csv.DictWriter(f, fieldnames=REPORT_FIELDS)
            w.writeheader()
            for r in rows:
                w.writerow(r)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()
