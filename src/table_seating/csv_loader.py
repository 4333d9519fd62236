"""CSV loading utilities."""
from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import IO, Any, Dict, Iterable, List, Optional, Tuple, Union

import pandas as pd

from .errors import SeatingError
from .models import (
    Assignment,
    Event,
    Participant,
    Table,
    parse_bool,
    parse_id,
    parse_optional_id,
    parse_optional_int,
    parse_pipe_list,
)
from .reconciler import check_seat_range, check_unique_seats

Source = Union[Path, str, IO[Any]]

ASSIGNMENT_COLUMNS = ["id", "table_id", "participant_id", "seat_number", "assigned_at"]


def _read(path: Source, required: Iterable[str], label: str) -> pd.DataFrame:
    df = pd.read_csv(path, dtype=str)
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValueError(f"{label}: missing columns: {', '.join(missing)}")
    return df


def parse_datetime(value: object) -> Optional[datetime]:
    """Parse an ISO timestamp; blanks and ``NaN`` become ``None``."""
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return None
    text = str(value).strip()
    if not text or text.lower() in ("nan", "nat"):
        return None
    return pd.Timestamp(text).to_pydatetime()


def load_tables(path: Source) -> List[Table]:
    """Load table definitions from ``tables.csv``."""
    df = _read(path, ["id", "capacity"], "tables.csv")
    tables: List[Table] = []
    for _, row in df.iterrows():
        number = row.get("table_number", "")
        tables.append(
            Table(
                id=parse_id(row["id"]),
                capacity=int(float(row["capacity"])),
                table_number="" if pd.isna(number) else str(number).strip(),
                event_id=parse_optional_id(row.get("event_id")),
            )
        )
    ids = [t.id for t in tables]
    if len(ids) != len(set(ids)):
        raise ValueError("tables.csv: duplicate table ids")
    return tables


def load_assignments(path: Source) -> List[Assignment]:
    """Load assignments from ``assignments.csv``."""
    df = _read(path, ["id", "table_id", "participant_id"], "assignments.csv")
    return [
        Assignment(
            id=parse_id(row["id"]),
            table_id=parse_id(row["table_id"]),
            participant_id=parse_id(row["participant_id"]),
            seat_number=parse_optional_int(row.get("seat_number")),
            assigned_at=parse_datetime(row.get("assigned_at")),
        )
        for _, row in df.iterrows()
    ]


def load_participants(path: Source) -> List[Participant]:
    """Load participants. ``event_ids`` is a pipe separated list."""
    df = _read(path, ["id"], "participants.csv")
    participants: List[Participant] = []
    for _, row in df.iterrows():
        def text(col: str) -> str:
            value = row.get(col, "")
            return "" if pd.isna(value) else str(value).strip()

        participants.append(
            Participant(
                id=parse_id(row["id"]),
                full_name=text("full_name"),
                country=text("country"),
                user_type=text("user_type"),
                event_ids=parse_pipe_list(row.get("event_ids", "")),
            )
        )
    return participants


def load_events(path: Source) -> List[Event]:
    """Load events from ``events.csv``."""
    df = _read(path, ["id"], "events.csv")
    return [
        Event(
            id=parse_id(row["id"]),
            title="" if pd.isna(row.get("title")) else str(row.get("title")),
            starts_at=parse_datetime(row.get("starts_at")),
            ends_at=parse_datetime(row.get("ends_at")),
            is_active=parse_bool(row.get("is_active"), default=True),
        )
        for _, row in df.iterrows()
    ]


def _assignment_order(a: Assignment) -> Tuple:
    numeric_id = int(a.id) if a.id.isdigit() else 0
    return (a.assigned_at is None, a.assigned_at or datetime.min, numeric_id, a.id)


def attach_assignments(tables: List[Table], assignments: Iterable[Assignment]) -> List[Table]:
    """Group ``assignments`` onto their tables ordered by assignment time, then id.

    Validates that every assignment references a known table, that no
    participant is seated twice and that seat numbers are unique per table.
    Seats must lie within ``[1, capacity]``. A table already over capacity
    may use seats up to its assignment count until it is reconciled.
    """
    by_id: Dict[str, Table] = {t.id: t for t in tables}
    seen: Dict[str, str] = {}
    for a in sorted(assignments, key=_assignment_order):
        table = by_id.get(a.table_id)
        if table is None:
            raise ValueError(f"Assignment {a.id} references unknown table: {a.table_id}")
        if a.participant_id in seen:
            raise ValueError(
                f"Participant {a.participant_id} is assigned twice ({seen[a.participant_id]}, {a.id})"
            )
        seen[a.participant_id] = a.id
        table.assignments.append(a)

    for table in tables:
        try:
            check_unique_seats(table.assignments)
            check_seat_range(table.assignments, max(table.capacity, table.assigned_count))
        except SeatingError as exc:
            raise ValueError(f"Table {table.table_number}: {exc}") from exc
    return tables


def tables_for_event(tables: Iterable[Table], event_id: Optional[str]) -> List[Table]:
    """Tables of ``event_id`` ordered by table number.

    Tables without an event id are kept for every event.
    """
    selected = [t for t in tables if event_id is None or t.event_id in (None, event_id)]
    return sorted(selected, key=lambda t: (len(t.table_number), t.table_number))


def load_all(
    tables_path: Source,
    assignments_path: Optional[Source] = None,
    participants_path: Optional[Source] = None,
    events_path: Optional[Source] = None,
    event_id: Optional[str] = None,
):
    """Convenience wrapper returning tables, participants and events."""
    tables = load_tables(tables_path)
    if assignments_path is not None:
        attach_assignments(tables, load_assignments(assignments_path))
    tables = tables_for_event(tables, event_id)
    participants = load_participants(participants_path) if participants_path is not None else []
    events = load_events(events_path) if events_path is not None else []
    return tables, participants, events


def assignments_frame(tables: Iterable[Table]) -> pd.DataFrame:
    """Flatten table assignments into a DataFrame in ``assignments.csv`` layout."""
    rows = [
        {
            "id": a.id,
            "table_id": t.id,
            "participant_id": a.participant_id,
            "seat_number": a.seat_number,
            "assigned_at": a.assigned_at.isoformat() if a.assigned_at else None,
        }
        for t in tables
        for a in t.assignments
    ]
    df = pd.DataFrame(rows, columns=ASSIGNMENT_COLUMNS)
    df["seat_number"] = df["seat_number"].astype("Int64")
    return df


def write_assignments(path: Source, tables: Iterable[Table]) -> None:
    assignments_frame(tables).to_csv(path, index=False)
