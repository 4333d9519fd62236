"""Assignment persistence API and an in-memory implementation."""
from __future__ import annotations

import copy
from datetime import datetime
import itertools
import logging
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Set

from .errors import NotEnoughSeats, StoreError
from .models import Assignment, Participant, Table
from .reconciler import eligible_participants

logger = logging.getLogger(__name__)

MAX_TABLE_NUMBER_LENGTH = 50


class AssignmentStore(Protocol):
    """Operations the seating service needs from the backend."""

    def tables(self) -> List[Table]:
        ...

    def create_assignments(self, table_id: str, participant_ids: Sequence[str]) -> List[Assignment]:
        ...

    def delete_assignment(self, assignment_id: str) -> None:
        ...

    def update_seat(self, assignment_id: str, seat_number: Optional[int]) -> None:
        ...

    def update_capacity(self, table_id: str, capacity: int) -> None:
        ...

    def create_table(self, event_id: Optional[str], table_number: str, capacity: int) -> Table:
        ...


def _validate_capacity(capacity: object) -> int:
    if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
        raise StoreError(f"Capacity must be a positive integer, got {capacity!r}")
    return capacity


class InMemoryStore:
    """Store holding one event's tables in memory.

    ``tables()`` hands out deep copies so callers always work on snapshots.
    When ``participants`` is given, ``create_assignments`` only seats those
    eligible for ``event_id``.
    """

    def __init__(
        self,
        tables: Iterable[Table],
        participants: Optional[Iterable[Participant]] = None,
        event_id: Optional[str] = None,
        clock=datetime.now,
    ) -> None:
        self._tables: Dict[str, Table] = {t.id: copy.deepcopy(t) for t in tables}
        self._clock = clock
        self._eligible: Optional[Set[str]] = None
        if participants is not None:
            self._eligible = {p.id for p in eligible_participants(participants, event_id)}
        numeric = [int(a.id) for t in self._tables.values() for a in t.assignments if a.id.isdigit()]
        self._ids = itertools.count(max(numeric, default=0) + 1)
        self._table_ids = itertools.count(max((int(i) for i in self._tables if i.isdigit()), default=0) + 1)

    # ----------------------------- reads -----------------------------
    def tables(self) -> List[Table]:
        return [copy.deepcopy(t) for t in self._tables.values()]

    def table(self, table_id: str) -> Table:
        return copy.deepcopy(self._table(table_id))

    def _table(self, table_id: str) -> Table:
        try:
            return self._tables[table_id]
        except KeyError:
            raise StoreError(f"Unknown table: {table_id}") from None

    def _locate(self, assignment_id: str) -> tuple[Table, int]:
        for table in self._tables.values():
            for idx, a in enumerate(table.assignments):
                if a.id == assignment_id:
                    return table, idx
        raise StoreError(f"Unknown assignment: {assignment_id}")

    # ----------------------------- writes -----------------------------
    def create_assignments(self, table_id: str, participant_ids: Sequence[str]) -> List[Assignment]:
        """Seat ``participant_ids`` at ``table_id`` as one batch.

        Ids already assigned anywhere in the event, and ineligible ids, are
        skipped. The batch is refused as a whole when the remainder does not
        fit.
        """
        table = self._table(table_id)
        seated = {a.participant_id for t in self._tables.values() for a in t.assignments}
        new_ids = [
            pid for pid in dict.fromkeys(participant_ids)
            if pid not in seated and (self._eligible is None or pid in self._eligible)
        ]
        if not new_ids:
            return []
        if table.available < len(new_ids):
            raise NotEnoughSeats(table_id, len(new_ids), table.available)

        now = self._clock()
        created = [
            Assignment(
                id=str(next(self._ids)),
                table_id=table_id,
                participant_id=pid,
                seat_number=None,
                assigned_at=now,
            )
            for pid in new_ids
        ]
        table.assignments.extend(created)
        logger.debug("created %d assignments on table %s", len(created), table.table_number)
        return copy.deepcopy(created)

    def delete_assignment(self, assignment_id: str) -> None:
        table, idx = self._locate(assignment_id)
        del table.assignments[idx]

    def update_seat(self, assignment_id: str, seat_number: Optional[int]) -> None:
        table, idx = self._locate(assignment_id)
        table.assignments[idx].seat_number = seat_number

    def update_capacity(self, table_id: str, capacity: int) -> None:
        self._table(table_id).capacity = _validate_capacity(capacity)

    def create_table(self, event_id: Optional[str], table_number: str, capacity: int) -> Table:
        """Add an empty table. Table numbers are unique within an event."""
        number = str(table_number).strip()
        if not number:
            raise StoreError("Table number is required")
        if len(number) > MAX_TABLE_NUMBER_LENGTH:
            raise StoreError(f"Table number must be at most {MAX_TABLE_NUMBER_LENGTH} characters")
        if any(t.event_id == event_id and t.table_number == number for t in self._tables.values()):
            raise StoreError(f"Table number {number} already exists for this event")

        table = Table(
            id=str(next(self._table_ids)),
            capacity=_validate_capacity(capacity),
            table_number=number,
            event_id=event_id,
        )
        self._tables[table.id] = table
        logger.info("created table %s (%d seats)", number, table.capacity)
        return copy.deepcopy(table)
