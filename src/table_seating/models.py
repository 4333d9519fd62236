"""Data models for table seating."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
import math


def _is_missing(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    text = str(value).strip()
    return not text or text.lower() in ("nan", "nat", "none")


def parse_pipe_list(value: object) -> List[str]:
    """Split a pipe separated string into a list.

    Empty values such as ``""`` or ``None`` return an empty list.
    ``pandas`` often provides ``float('nan')`` for missing values which is
    also treated as empty.
    """
    if _is_missing(value):
        return []
    return [part.strip() for part in str(value).split("|") if part.strip()]


def parse_bool(value: object, default: bool = False) -> bool:
    """Parse common truthy strings into bool."""
    if _is_missing(value):
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes")


def parse_optional_int(value: object) -> Optional[int]:
    """Parse a nullable integer column such as ``seat_number``."""
    if _is_missing(value):
        return None
    return int(float(value))


def parse_id(value: object) -> str:
    """Normalize an id read from CSV. ``3.0`` and ``3`` become ``"3"``."""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def parse_optional_id(value: object) -> Optional[str]:
    if _is_missing(value):
        return None
    return parse_id(value)


@dataclass
class Assignment:
    """Binding of one participant to one table, optionally to a seat."""

    id: str
    table_id: str
    participant_id: str
    seat_number: Optional[int] = None
    assigned_at: Optional[datetime] = None

    @property
    def is_seated(self) -> bool:
        return self.seat_number is not None


@dataclass
class Table:
    """Seating table for an event."""

    id: str
    capacity: int
    table_number: str = ""
    event_id: Optional[str] = None
    assignments: List[Assignment] = field(default_factory=list)

    def __post_init__(self) -> None:
        if isinstance(self.capacity, bool) or not isinstance(self.capacity, int) or self.capacity < 1:
            raise ValueError(f"Table {self.id} capacity must be a positive integer, got {self.capacity!r}")
        if not self.table_number:
            self.table_number = str(self.id)

    @property
    def assigned_count(self) -> int:
        return len(self.assignments)

    @property
    def available(self) -> int:
        return self.capacity - self.assigned_count


@dataclass
class Participant:
    """Event participant. Only ``id`` is used for seating decisions."""

    id: str
    full_name: str = ""
    country: str = ""
    user_type: str = ""
    event_ids: List[str] = field(default_factory=list)


@dataclass
class Event:
    """Event (programme) a table set belongs to."""

    id: str
    title: str = ""
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    is_active: bool = True


@dataclass
class AssignmentBatch:
    """Participants planned for one table, committed as one request."""

    table_id: str
    participant_ids: List[str]


@dataclass
class AutoAssignPlan:
    """Result of :func:`table_seating.reconciler.auto_assign`."""

    batches: List[AssignmentBatch] = field(default_factory=list)
    unplaced: List[str] = field(default_factory=list)

    @property
    def planned_count(self) -> int:
        return sum(len(b.participant_ids) for b in self.batches)

    @property
    def requested_count(self) -> int:
        return self.planned_count + len(self.unplaced)

    @property
    def insufficient_capacity(self) -> bool:
        """Partial result: some participants did not fit."""
        return bool(self.unplaced)

    def summary(self) -> str:
        placed = self.planned_count
        total = self.requested_count
        if total == 0:
            return "No unassigned participants"
        if placed == 0:
            return "All tables are full"
        if self.unplaced:
            return f"Assigned {placed} of {total}; {total - placed} remain due to full tables"
        return f"Assigned all {placed} participants"


@dataclass
class SeatUpdate:
    """Outcome of a seat number change.

    ``assignments`` is the full table list after the change, ``changed`` only
    the assignments whose seat moved. ``swapped_with`` is the id of the
    assignment that received the mover's old seat, if any.
    """

    assignments: List[Assignment]
    changed: List[Assignment] = field(default_factory=list)
    swapped_with: Optional[str] = None

    @property
    def is_noop(self) -> bool:
        return not self.changed
