"""Commit seating plans through an assignment store.

The reconciler only plans. :class:`SeatingService` is the caller side: it
takes a fresh snapshot from the store, computes the plan, commits it batch by
batch and reports the outcome to a notification sink.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from .errors import AssignmentInProgress, EventClosed, StoreError
from .events import is_event_open
from .models import Assignment, AssignmentBatch, AutoAssignPlan, Event, Participant, SeatUpdate, Table
from .reconciler import (
    auto_assign,
    eligible_participants,
    number_seats,
    reconcile_over_capacity,
    reseat_out_of_range,
    unassigned_participants,
    update_seat_number,
)
from .store import AssignmentStore

logger = logging.getLogger(__name__)

Notifier = Callable[[str, int], None]


def log_notifier(message: str, level: int = logging.INFO) -> None:
    """Default notification sink: the service logger."""
    logger.log(level, message)


@dataclass
class CommitReport:
    """Outcome of committing an :class:`AutoAssignPlan`."""

    plan: AutoAssignPlan
    committed: List[Tuple[AssignmentBatch, List[Assignment]]] = field(default_factory=list)
    failed: List[Tuple[AssignmentBatch, str]] = field(default_factory=list)

    @property
    def assigned_count(self) -> int:
        return sum(len(created) for _, created in self.committed)

    @property
    def requested_count(self) -> int:
        return self.plan.requested_count

    @property
    def ok(self) -> bool:
        return not self.failed and not self.plan.unplaced

    def message(self) -> str:
        if not self.failed:
            return self.plan.summary()
        total = self.requested_count
        parts = [f"Assigned {self.assigned_count} of {total}"]
        if self.plan.unplaced:
            parts.append(f"{len(self.plan.unplaced)} remain due to full tables")
        parts.append(f"{len(self.failed)} table batch(es) failed")
        return "; ".join(parts)


class SeatingService:
    """Seating operations for one event's tables."""

    def __init__(
        self,
        store: AssignmentStore,
        event: Optional[Event] = None,
        notify: Optional[Notifier] = None,
        clock: Optional[Callable] = None,
    ) -> None:
        self.store = store
        self.event = event
        self.notify: Notifier = notify or log_notifier
        self._clock = clock
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    # ----------------------------- helpers -----------------------------
    def _ensure_open(self) -> None:
        if self.event is None:
            return
        now = self._clock() if self._clock else None
        if not is_event_open(self.event, now):
            raise EventClosed(self.event.id)

    def _table(self, table_id: str) -> Table:
        for table in self.store.tables():
            if table.id == table_id:
                return table
        raise StoreError(f"Unknown table: {table_id}")

    def _table_for_assignment(self, assignment_id: str) -> Tuple[Table, Assignment]:
        for table in self.store.tables():
            for a in table.assignments:
                if a.id == assignment_id:
                    return table, a
        raise StoreError(f"Unknown assignment: {assignment_id}")

    # ----------------------------- auto assign -----------------------------
    def plan(self, participants: Iterable[Participant]) -> AutoAssignPlan:
        """Compute the auto-assign plan without committing it."""
        tables = self.store.tables()
        event_id = self.event.id if self.event else None
        queue = unassigned_participants(eligible_participants(participants, event_id), tables)
        return auto_assign(tables, queue)

    def auto_assign(self, participants: Iterable[Participant]) -> CommitReport:
        """Plan and commit one batch per table.

        A failed batch is recorded and reported; it is not retried.
        """
        if self._running:
            raise AssignmentInProgress("Auto-assign is already running")
        self._ensure_open()
        self._running = True
        try:
            report = CommitReport(plan=self.plan(participants))
            for batch in report.plan.batches:
                try:
                    created = self.store.create_assignments(batch.table_id, batch.participant_ids)
                except StoreError as exc:
                    logger.warning("batch for table %s failed: %s", batch.table_id, exc)
                    report.failed.append((batch, str(exc)))
                else:
                    report.committed.append((batch, created))
        finally:
            self._running = False

        level = logging.INFO if report.ok else logging.WARNING
        self.notify(report.message(), level)
        return report

    # ----------------------------- single edits -----------------------------
    def assign(self, table_id: str, participant_ids: Sequence[str]) -> List[Assignment]:
        self._ensure_open()
        created = self.store.create_assignments(table_id, participant_ids)
        if created:
            self.notify(f"Assigned {len(created)} participant(s) to table {self._table(table_id).table_number}", logging.INFO)
        return created

    def unassign(self, assignment_id: str) -> None:
        self._ensure_open()
        self.store.delete_assignment(assignment_id)
        self.notify(f"Removed assignment {assignment_id}", logging.INFO)

    def update_capacity(self, table_id: str, capacity: int) -> List[str]:
        """Change a table's capacity and evict assignments that no longer fit.

        Survivors holding a seat above the new capacity move to free seats.
        Returns the ids of the deleted assignments.
        """
        self.store.update_capacity(table_id, capacity)
        table = self._table(table_id)
        evicted = reconcile_over_capacity(table)
        for assignment_id in evicted:
            self.store.delete_assignment(assignment_id)
        if evicted:
            self.notify(
                f"Table {table.table_number} reduced to {capacity}; removed {len(evicted)} assignment(s)",
                logging.WARNING,
            )
        for moved in reseat_out_of_range(self._table(table_id)).changed:
            self.store.update_seat(moved.id, moved.seat_number)
        return evicted

    def create_table(self, table_number: str, capacity: int, event_id: Optional[str] = None) -> Table:
        """Add a table to ``event_id``, or to the service's event when omitted."""
        if event_id is None and self.event is not None:
            event_id = self.event.id
        table = self.store.create_table(event_id, table_number, capacity)
        self.notify(f"Table {table.table_number} created with {table.capacity} seat(s)", logging.INFO)
        return table

    def update_seat(self, assignment_id: str, seat: object) -> SeatUpdate:
        self._ensure_open()
        table, assignment = self._table_for_assignment(assignment_id)
        result = update_seat_number(assignment, seat, table.capacity, table.assignments)
        for changed in result.changed:
            self.store.update_seat(changed.id, changed.seat_number)
        if result.swapped_with is not None:
            self.notify(f"Seat {seat} swapped with assignment {result.swapped_with}", logging.INFO)
        elif not result.is_noop:
            self.notify(f"Assignment {assignment_id} moved to seat {seat}", logging.INFO)
        return result

    def number_seats(self, table_id: str) -> SeatUpdate:
        """Persist sequential seat numbers for the table's unseated assignments."""
        result = number_seats(self._table(table_id))
        for changed in result.changed:
            self.store.update_seat(changed.id, changed.seat_number)
        return result
