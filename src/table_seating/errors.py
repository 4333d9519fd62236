"""Errors raised by table seating operations."""
from __future__ import annotations


class SeatingError(ValueError):
    """Base class for seating validation and invariant errors."""


class InvalidSeat(SeatingError):
    """Seat number is not an integer within ``[1, capacity]``."""

    def __init__(self, seat: object, capacity: int) -> None:
        super().__init__(f"Seat {seat!r} is not a valid seat number (1-{capacity})")
        self.seat = seat
        self.capacity = capacity


class SeatTaken(SeatingError):
    """Target seat is occupied and the mover has no seat to give away."""

    def __init__(self, seat: int, holder_id: str) -> None:
        super().__init__(f"Seat {seat} is already taken by assignment {holder_id}")
        self.seat = seat
        self.holder_id = holder_id


class CapacityViolation(SeatingError):
    """A table holds more assignments than its capacity allows."""

    def __init__(self, table_id: str, assigned: int, capacity: int) -> None:
        super().__init__(
            f"Table {table_id} has {assigned} assignments for a capacity of {capacity}"
        )
        self.table_id = table_id
        self.assigned = assigned
        self.capacity = capacity


class DuplicateSeat(SeatingError):
    """Two assignments on one table share a seat number."""

    def __init__(self, seat: int, assignment_ids: list[str]) -> None:
        super().__init__(f"Seat {seat} is held by {', '.join(assignment_ids)}")
        self.seat = seat
        self.assignment_ids = assignment_ids


class EventClosed(SeatingError):
    """Mutation attempted on an event that is not open."""

    def __init__(self, event_id: str) -> None:
        super().__init__(f"Event {event_id} is closed")
        self.event_id = event_id


class AssignmentInProgress(SeatingError):
    """Auto-assign was triggered while a previous run is still committing."""


class StoreError(RuntimeError):
    """Persistence failure reported by an assignment store."""


class NotEnoughSeats(StoreError):
    """A batch does not fit in the table's free seats."""

    def __init__(self, table_id: str, requested: int, available: int) -> None:
        super().__init__(
            f"Not enough available seats for table {table_id}: "
            f"{requested} requested, {available} available"
        )
        self.table_id = table_id
        self.requested = requested
        self.available = available
