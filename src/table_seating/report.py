"""Per-table occupancy report."""
from __future__ import annotations

from typing import Dict, Iterable, List

from .models import Table

REPORT_FIELDS = ["table", "capacity", "assigned", "available", "seated", "status", "members"]


def table_status(table: Table) -> str:
    """``open`` with free seats, ``full`` at capacity, ``over`` above it."""
    if table.assigned_count > table.capacity:
        return "over"
    if table.assigned_count == table.capacity:
        return "full"
    return "open"


def compute_table_stats(table: Table) -> Dict[str, int | str]:
    seated = sorted(
        (a for a in table.assignments if a.seat_number is not None),
        key=lambda a: a.seat_number,
    )
    unseated = [a for a in table.assignments if a.seat_number is None]
    members = [f"{a.seat_number}:{a.participant_id}" for a in seated]
    members += [f"-:{a.participant_id}" for a in unseated]
    return {
        "table": table.table_number,
        "capacity": table.capacity,
        "assigned": table.assigned_count,
        "available": max(0, table.available),
        "seated": len(seated),
        "status": table_status(table),
        "members": "|".join(members),
    }


def table_report(tables: Iterable[Table]) -> List[Dict[str, int | str]]:
    return [compute_table_stats(t) for t in tables]


def report_totals(rows: List[Dict[str, int | str]]) -> Dict[str, int]:
    """Aggregate capacity and occupancy over all report rows."""
    return {
        "tables": len(rows),
        "capacity": sum(int(r["capacity"]) for r in rows),
        "assigned": sum(int(r["assigned"]) for r in rows),
        "available": sum(int(r["available"]) for r in rows),
        "full_tables": sum(1 for r in rows if r["status"] != "open"),
    }
