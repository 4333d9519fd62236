import pathlib
import sys

import pytest

# Ensure src package is on path
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1] / "src"))

from table_seating.models import (
    Assignment,
    AssignmentBatch,
    AutoAssignPlan,
    Table,
    parse_bool,
    parse_id,
    parse_optional_int,
    parse_pipe_list,
)


def test_table_instantiation():
    table = Table(id="7", capacity=4)
    assert table.table_number == "7"
    assert table.assigned_count == 0
    assert table.available == 4


@pytest.mark.parametrize("capacity", [0, -1, 2.5, True, "3"])
def test_table_rejects_bad_capacity(capacity):
    with pytest.raises(ValueError):
        Table(id="1", capacity=capacity)


def test_assigned_count_follows_assignment_list():
    table = Table(id="1", capacity=2)
    table.assignments.append(Assignment(id="a", table_id="1", participant_id="p1"))
    assert table.assigned_count == 1
    assert not table.assignments[0].is_seated


def test_parsers_handle_pandas_missing_values():
    assert parse_pipe_list(float("nan")) == []
    assert parse_pipe_list("10| 20 |") == ["10", "20"]
    assert parse_optional_int(float("nan")) is None
    assert parse_optional_int("3.0") == 3
    assert parse_id(4.0) == "4"
    assert parse_bool("TRUE") is True
    assert parse_bool(None, default=True) is True
    assert parse_bool("0", default=True) is False


def test_plan_summary_messages():
    empty = AutoAssignPlan()
    assert empty.summary() == "No unassigned participants"

    full = AutoAssignPlan(batches=[], unplaced=["p1"])
    assert full.insufficient_capacity
    assert full.summary() == "All tables are full"

    partial = AutoAssignPlan(batches=[AssignmentBatch("1", ["p1", "p2"])], unplaced=["p3"])
    assert partial.summary() == "Assigned 2 of 3; 1 remain due to full tables"

    complete = AutoAssignPlan(batches=[AssignmentBatch("1", ["p1"])])
    assert not complete.insufficient_capacity
    assert complete.summary() == "Assigned all 1 participants"
