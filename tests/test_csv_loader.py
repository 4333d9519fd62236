import io
import pathlib
import sys

import pytest

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1] / "src"))

from table_seating.csv_loader import (
    attach_assignments,
    load_assignments,
    load_tables,
    tables_for_event,
    write_assignments,
)


def test_missing_columns_are_reported():
    with pytest.raises(ValueError, match="capacity"):
        load_tables(io.StringIO("id,table_number\n1,A\n"))


def test_duplicate_table_ids():
    with pytest.raises(ValueError, match="duplicate"):
        load_tables(io.StringIO("id,capacity\n1,2\n1,3\n"))


def test_assignment_to_unknown_table():
    tables = load_tables(io.StringIO("id,capacity\n1,2\n"))
    assignments = load_assignments(io.StringIO("id,table_id,participant_id\n1,9,p1\n"))
    with pytest.raises(ValueError, match="unknown table"):
        attach_assignments(tables, assignments)


def test_participant_assigned_twice():
    tables = load_tables(io.StringIO("id,capacity\n1,2\n2,2\n"))
    assignments = load_assignments(io.StringIO("id,table_id,participant_id\n1,1,p1\n2,2,p1\n"))
    with pytest.raises(ValueError, match="assigned twice"):
        attach_assignments(tables, assignments)


def test_shared_seat_is_rejected():
    tables = load_tables(io.StringIO("id,table_number,capacity\n1,A,4\n"))
    assignments = load_assignments(io.StringIO(
        "id,table_id,participant_id,seat_number\n1,1,p1,1\n2,1,p2,1\n3,1,p3,\n"
    ))
    with pytest.raises(ValueError, match="Table A: Seat 1"):
        attach_assignments(tables, assignments)


@pytest.mark.parametrize("seat", ["0", "3"])
def test_seat_outside_capacity_is_rejected(seat):
    tables = load_tables(io.StringIO("id,capacity\n1,2\n"))
    assignments = load_assignments(io.StringIO(
        f"id,table_id,participant_id,seat_number\n1,1,p1,{seat}\n"
    ))
    with pytest.raises(ValueError, match="not a valid seat number"):
        attach_assignments(tables, assignments)


def test_over_capacity_table_loads_for_reconciliation():
    tables = load_tables(io.StringIO("id,capacity\n1,1\n"))
    attach_assignments(tables, load_assignments(io.StringIO(
        "id,table_id,participant_id,seat_number\n1,1,p1,1\n2,1,p2,2\n"
    )))
    assert [a.seat_number for a in tables[0].assignments] == [1, 2]


def test_undated_assignments_keep_id_order():
    tables = load_tables(io.StringIO("id,capacity\n1,5\n"))
    assignments = load_assignments(io.StringIO(
        "id,table_id,participant_id,assigned_at\n"
        "10,1,p3,\n"
        "2,1,p2,\n"
        "5,1,p1,2026-01-01T10:00:00\n"
    ))
    attach_assignments(tables, assignments)
    assert [a.id for a in tables[0].assignments] == ["5", "2", "10"]


def test_tables_without_event_belong_to_every_event():
    tables = load_tables(io.StringIO("id,table_number,capacity,event_id\n1,10,2,A\n2,2,2,\n3,1,2,B\n"))
    assert [t.id for t in tables_for_event(tables, "A")] == ["2", "1"]
    assert [t.id for t in tables_for_event(tables, None)] == ["3", "2", "1"]


def test_write_assignments(tmp_path):
    tables = load_tables(io.StringIO("id,capacity\n1,2\n"))
    attach_assignments(tables, load_assignments(io.StringIO(
        "id,table_id,participant_id,seat_number\n1,1,p1,2\n2,1,p2,\n"
    )))
    out = tmp_path / "assignments.csv"
    write_assignments(out, tables)
    lines = out.read_text().splitlines()
    assert lines[0] == "id,table_id,participant_id,seat_number,assigned_at"
    assert lines[1] == "1,1,p1,2,"
    assert lines[2] == "2,1,p2,,"
