"""Event table seating package."""
from .models import Assignment, AssignmentBatch, AutoAssignPlan, Event, Participant, SeatUpdate, Table
from .errors import (
    AssignmentInProgress,
    CapacityViolation,
    DuplicateSeat,
    EventClosed,
    InvalidSeat,
    NotEnoughSeats,
    SeatingError,
    SeatTaken,
    StoreError,
)
from .reconciler import (
    auto_assign,
    reconcile_over_capacity,
    update_seat_number,
    unassigned_participants,
    number_seats,
    eligible_participants,
)
from .csv_loader import load_all, load_assignments, load_events, load_participants, load_tables
from .store import InMemoryStore
from .service import SeatingService

__all__ = [
    "Assignment",
    "AssignmentBatch",
    "AutoAssignPlan",
    "Event",
    "Participant",
    "SeatUpdate",
    "Table",
    "AssignmentInProgress",
    "CapacityViolation",
    "DuplicateSeat",
    "EventClosed",
    "InvalidSeat",
    "NotEnoughSeats",
    "SeatingError",
    "SeatTaken",
    "StoreError",
    "auto_assign",
    "reconcile_over_capacity",
    "update_seat_number",
    "unassigned_participants",
    "number_seats",
    "eligible_participants",
    "load_all",
    "load_assignments",
    "load_events",
    "load_participants",
    "load_tables",
    "InMemoryStore",
    "SeatingService",
]
