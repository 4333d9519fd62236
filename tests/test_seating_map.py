import pathlib
import sys

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1] / "src"))

from table_seating.models import Assignment, Participant, Table
from table_seating.report import report_totals, table_report
from table_seating.seating_map import build_seating_graph, seating_map


def sample_tables():
    return [
        Table(id="1", capacity=3, table_number="1", assignments=[
            Assignment(id="a1", table_id="1", participant_id="p1", seat_number=2),
            Assignment(id="a2", table_id="1", participant_id="p2", seat_number=None),
        ]),
        Table(id="2", capacity=1, table_number="2", assignments=[
            Assignment(id="a3", table_id="2", participant_id="p3", seat_number=1),
        ]),
    ]


def test_graph_links_participants_to_their_table():
    participants = [Participant(id="p1", full_name="Ana Reyes")]
    G = build_seating_graph(sample_tables(), participants, layout="square")

    assert G.number_of_nodes() == 5
    assert set(G.neighbors("table:1")) == {"a1", "a2"}
    assert G.nodes["a1"]["label"] == "2. Ana Reyes"
    assert G.nodes["a2"]["shape"] == "diamond"
    assert G.nodes["table:2"]["label"] == "Table 2 (1/1)"


def test_seating_map_html_has_legend():
    html = seating_map(sample_tables())
    assert "legend-box" in html
    assert "Table 1 (2/3)" in html


def test_report_rows():
    rows = table_report(sample_tables())
    assert rows[0]["members"] == "2:p1|-:p2"
    assert rows[0]["status"] == "open"
    assert rows[1]["status"] == "full"
    assert report_totals(rows)["full_tables"] == 1
