"""Event phase classification.

``event_phase`` drives the ongoing/upcoming/closed badges; ``is_event_open``
decides whether seating changes are still accepted for an event.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from .models import Event

ONGOING = "ongoing"
UPCOMING = "upcoming"
CLOSED = "closed"

_PHASE_LABELS = {ONGOING: "Ongoing", UPCOMING: "Upcoming", CLOSED: "Closed"}


def _now_like(reference: Optional[datetime]) -> datetime:
    if reference is not None and reference.tzinfo is not None:
        return datetime.now(reference.tzinfo)
    return datetime.now()


def event_phase(event: Event, now: Optional[datetime] = None) -> str:
    """Classify ``event`` as ongoing, upcoming or closed.

    The reference instant is ``starts_at`` (or ``ends_at`` when there is no
    start). Events without dates are ongoing. Once started, an event stays
    ongoing for the rest of its start day.
    """
    if not event.is_active:
        return CLOSED
    start = event.starts_at or event.ends_at
    if start is None:
        return ONGOING
    if now is None:
        now = _now_like(start)
    if now < start:
        return UPCOMING
    return ONGOING if now.date() == start.date() else CLOSED


def phase_label(phase: Optional[str]) -> str:
    return _PHASE_LABELS.get(phase or CLOSED, "Closed")


def is_event_open(event: Event, now: Optional[datetime] = None) -> bool:
    """True while an active event has started and not yet ended."""
    if not event.is_active:
        return False
    if now is None:
        now = _now_like(event.starts_at or event.ends_at)
    if event.starts_at is not None and event.starts_at > now:
        return False
    return event.ends_at is None or event.ends_at >= now


def sort_events(events: Sequence[Event]) -> list[Event]:
    """Order events by start then title; undated events go last."""
    return sorted(
        events,
        key=lambda e: (e.starts_at is None, e.starts_at or datetime.min, e.title),
    )


def default_event(events: Sequence[Event], now: Optional[datetime] = None) -> Optional[Event]:
    """First open event, falling back to the first event overall."""
    ordered = sort_events(events)
    for event in ordered:
        if is_event_open(event, now):
            return event
    return ordered[0] if ordered else None
