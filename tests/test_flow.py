import pathlib
import sys
from datetime import datetime

# Ensure src package is on path
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1] / "src"))

from table_seating import csv_loader, reconciler
from table_seating.service import SeatingService
from table_seating.store import InMemoryStore

DATA_DIR = pathlib.Path(__file__).parent / "data"


def load_event_10():
    return csv_loader.load_all(
        DATA_DIR / "tables.csv",
        DATA_DIR / "assignments.csv",
        DATA_DIR / "participants.csv",
        DATA_DIR / "events.csv",
        event_id="10",
    )


def test_loader_orders_assignments_by_time():
    tables, participants, events = load_event_10()

    assert [t.table_number for t in tables] == ["1", "2", "3"]
    assert [a.participant_id for a in tables[0].assignments] == ["p1", "p2"]
    assert tables[1].assignments[0].seat_number is None
    assert [p.id for p in participants][-1] == "p11"
    assert participants[-1].user_type == "CHED"
    assert participants[6].event_ids == ["10", "20"]
    assert [e.id for e in events] == ["10", "20"]
    assert events[1].is_active is False
    assert events[1].ends_at is None


def test_full_flow():
    tables, participants, events = load_event_10()
    store = InMemoryStore(tables, participants=participants, event_id="10")
    service = SeatingService(store, event=events[0], clock=lambda: datetime(2026, 3, 1, 19, 0))

    report = service.auto_assign(participants)

    # p8 only joined event 20, p11 is CHED staff
    placed = [pid for b in report.plan.batches for pid in b.participant_ids]
    assert placed == ["p4", "p5", "p6", "p7"]
    assert report.plan.unplaced == ["p10"]
    assert report.message() == "Assigned 4 of 5; 1 remain due to full tables"

    # table capacities respected
    for t in store.tables():
        assert t.assigned_count <= t.capacity
        assert reconciler.reconcile_over_capacity(t) == []

    # round trip through CSV keeps everything
    frame = csv_loader.assignments_frame(store.tables())
    assert len(frame) == 7
    assert frame["seat_number"].isna().sum() == 5
