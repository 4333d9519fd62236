"""
Seat and table capacity reconciliation.

All functions here are pure: they read table and assignment snapshots and
return plans or updated copies. Committing a plan is the caller's job, see
:mod:`table_seating.service`.

Ordering rule: list order decides the outcome everywhere. Tables are filled in
the order given, and when a table shrinks the first ``capacity`` assignments
stay while the rest are evicted.
"""
from __future__ import annotations

from dataclasses import replace
import logging
from typing import Dict, Iterable, List, Optional, Sequence

from .errors import CapacityViolation, DuplicateSeat, InvalidSeat, SeatTaken
from .models import (
    Assignment,
    AssignmentBatch,
    AutoAssignPlan,
    Participant,
    SeatUpdate,
    Table,
)

logger = logging.getLogger(__name__)


# ----------------------------- eligibility -----------------------------
# User types that staff the event rather than attend it
STAFF_USER_TYPES = frozenset({"CHED"})


def is_staff(participant: Participant) -> bool:
    return participant.user_type.strip().upper() in STAFF_USER_TYPES


def eligible_participants(participants: Iterable[Participant], event_id: Optional[str]) -> List[Participant]:
    """Participants who can be seated for ``event_id``.

    Staff user types are never seated. When an event is given, only
    participants who joined it are kept.
    """
    return [
        p for p in participants
        if not is_staff(p) and (event_id is None or event_id in p.event_ids)
    ]


# ----------------------------- auto assign -----------------------------
def auto_assign(tables: Sequence[Table], unassigned: Iterable[str]) -> AutoAssignPlan:
    """Plan a first-fit distribution of ``unassigned`` over ``tables``.

    Each table with free seats takes the next participants off the front of
    the queue. Duplicate ids in the queue are planned once.
    """
    queue = list(dict.fromkeys(unassigned))
    batches: List[AssignmentBatch] = []
    cursor = 0
    for table in tables:
        if cursor >= len(queue):
            break
        available = table.capacity - table.assigned_count
        if available <= 0:
            continue
        taken = queue[cursor:cursor + available]
        cursor += len(taken)
        batches.append(AssignmentBatch(table_id=table.id, participant_ids=taken))

    plan = AutoAssignPlan(batches=batches, unplaced=queue[cursor:])
    logger.debug("auto assign plan: %d batches, %d unplaced", len(batches), len(plan.unplaced))
    return plan


def unassigned_participants(participants: Iterable[Participant], tables: Iterable[Table]) -> List[str]:
    """Ids of participants not referenced by any assignment on ``tables``."""
    seated = {a.participant_id for t in tables for a in t.assignments}
    return [p.id for p in participants if p.id not in seated]


# ----------------------------- capacity -----------------------------
def reconcile_over_capacity(table: Table) -> List[str]:
    """Return ids of the assignments to delete so the table fits its capacity."""
    excess = table.assignments[table.capacity:]
    if excess:
        logger.info(
            "table %s over capacity (%d/%d), evicting %d",
            table.table_number, table.assigned_count, table.capacity, len(excess),
        )
    return [a.id for a in excess]


def check_capacity(table: Table) -> None:
    """Raise :class:`CapacityViolation` if the table is over capacity."""
    if table.assigned_count > table.capacity:
        raise CapacityViolation(table.id, table.assigned_count, table.capacity)


# ----------------------------- seats -----------------------------
def check_unique_seats(assignments: Iterable[Assignment]) -> None:
    """Raise :class:`DuplicateSeat` if two assignments share a seat number."""
    holders: Dict[int, List[str]] = {}
    for a in assignments:
        if a.seat_number is not None:
            holders.setdefault(a.seat_number, []).append(a.id)
    for seat, ids in sorted(holders.items()):
        if len(ids) > 1:
            raise DuplicateSeat(seat, ids)


def check_seat_range(assignments: Iterable[Assignment], capacity: int) -> None:
    """Raise :class:`InvalidSeat` for any seat outside ``[1, capacity]``."""
    for a in assignments:
        if a.seat_number is not None and not 1 <= a.seat_number <= capacity:
            raise InvalidSeat(a.seat_number, capacity)


def _validate_seat(seat: object, capacity: int) -> int:
    if isinstance(seat, bool) or not isinstance(seat, int):
        raise InvalidSeat(seat, capacity)
    if seat < 1 or seat > capacity:
        raise InvalidSeat(seat, capacity)
    return seat


def update_seat_number(
    assignment: Assignment,
    new_seat: object,
    table_capacity: int,
    assignments_on_table: Sequence[Assignment],
) -> SeatUpdate:
    """Move ``assignment`` to ``new_seat``, swapping with the current holder.

    Raises :class:`InvalidSeat` for seats outside ``[1, table_capacity]`` and
    :class:`SeatTaken` when the seat is held and the mover has no seat to
    hand over. The input list is left untouched. Every seat in the result
    must be unique and within ``[1, table_capacity]``.
    """
    seat = _validate_seat(new_seat, table_capacity)

    current = next((a for a in assignments_on_table if a.id == assignment.id), None)
    if current is None:
        raise ValueError(f"Assignment {assignment.id} is not on this table")

    if current.seat_number == seat:
        return SeatUpdate(assignments=list(assignments_on_table))

    holder = next(
        (a for a in assignments_on_table if a.id != current.id and a.seat_number == seat),
        None,
    )
    if holder is not None and current.seat_number is None:
        raise SeatTaken(seat, holder.id)

    old_seat = current.seat_number
    updated: List[Assignment] = []
    changed: List[Assignment] = []
    for a in assignments_on_table:
        if a.id == current.id:
            a = replace(a, seat_number=seat)
            changed.append(a)
        elif holder is not None and a.id == holder.id:
            a = replace(a, seat_number=old_seat)
            changed.append(a)
        updated.append(a)

    check_unique_seats(updated)
    check_seat_range(updated, table_capacity)

    if holder is not None:
        logger.info("seat %d swapped: %s -> %s, %s -> %s", seat, current.id, seat, holder.id, old_seat)
    return SeatUpdate(
        assignments=updated,
        changed=changed,
        swapped_with=holder.id if holder is not None else None,
    )


def first_free_seat(capacity: int, assignments: Iterable[Assignment]) -> Optional[int]:
    """Lowest seat in ``[1, capacity]`` nobody holds, or ``None``."""
    taken = {a.seat_number for a in assignments if a.seat_number is not None}
    for seat in range(1, capacity + 1):
        if seat not in taken:
            return seat
    return None


def number_seats(table: Table) -> SeatUpdate:
    """Give every unseated assignment the lowest free seat, in list order.

    Assignments beyond the table's free seats stay unseated.
    """
    taken = {a.seat_number for a in table.assignments if a.seat_number is not None}
    free = (s for s in range(1, table.capacity + 1) if s not in taken)
    updated: List[Assignment] = []
    changed: List[Assignment] = []
    for a in table.assignments:
        if a.seat_number is None:
            seat = next(free, None)
            if seat is not None:
                a = replace(a, seat_number=seat)
                changed.append(a)
        updated.append(a)
    check_unique_seats(updated)
    return SeatUpdate(assignments=updated, changed=changed)


def reseat_out_of_range(table: Table) -> SeatUpdate:
    """Move assignments holding seats above ``table.capacity`` to free seats.

    Used after a capacity shrink. Displaced assignments take the lowest free
    seats in list order, or lose their seat when none is left.
    """
    keep = [a for a in table.assignments if a.seat_number is not None and a.seat_number <= table.capacity]
    taken = {a.seat_number for a in keep}
    free = (s for s in range(1, table.capacity + 1) if s not in taken)
    updated: List[Assignment] = []
    changed: List[Assignment] = []
    for a in table.assignments:
        if a.seat_number is not None and a.seat_number > table.capacity:
            a = replace(a, seat_number=next(free, None))
            changed.append(a)
        updated.append(a)
    if changed:
        logger.info("table %s: reseated %d assignment(s) after shrink", table.table_number, len(changed))
    check_unique_seats(updated)
    return SeatUpdate(assignments=updated, changed=changed)
