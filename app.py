"""Streamlit admin page for table seating with CSV previews and validations."""
from __future__ import annotations

# Add src to sys.path so table_seating can be found
import sys
import os
import io
import logging
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "src"))

import pandas as pd
import streamlit as st
import streamlit.components.v1 as components

from table_seating.csv_loader import (
    assignments_frame,
    attach_assignments,
    load_assignments,
    load_events,
    load_participants,
    load_tables,
    tables_for_event,
)
from table_seating.errors import SeatingError, StoreError
from table_seating.events import default_event, event_phase, phase_label, sort_events
from table_seating.report import report_totals, table_report
from table_seating.seating_map import seating_map
from table_seating.service import SeatingService
from table_seating.store import InMemoryStore

# -----------------------------
# Helpers
# -----------------------------

def uploadedfile_to_buffer(uploaded_file) -> io.StringIO | None:
    """Read a Streamlit UploadedFile into a StringIO positioned at start."""
    if uploaded_file is None:
        return None
    uploaded_file.seek(0)
    return io.StringIO(uploaded_file.read().decode("utf-8"))


def validate_columns(df: pd.DataFrame, required: list[str], file_label: str) -> bool:
    """Check required columns and show an error if any are missing."""
    missing = [col for col in required if col not in df.columns]
    if missing:
        st.error(f"Error in {file_label}: missing columns: {', '.join(missing)}")
        return False
    return True


def toast(message: str, level: int = logging.INFO) -> None:
    """Notification sink for the seating service."""
    if level >= logging.WARNING:
        st.session_state["messages"].append(("warning", message))
    else:
        st.session_state["messages"].append(("success", message))


def build_store(tables_file, assignments_file, participants, event_id: str | None) -> InMemoryStore:
    tables = load_tables(uploadedfile_to_buffer(tables_file))
    if assignments_file is not None:
        attach_assignments(tables, load_assignments(uploadedfile_to_buffer(assignments_file)))
    return InMemoryStore(tables_for_event(tables, event_id), participants=participants, event_id=event_id)


st.session_state.setdefault("messages", [])

# -----------------------------
# Uploads and previews
# -----------------------------

st.title("Table Assignment")

_tables_file = st.file_uploader("Tables CSV", type="csv")
_assignments_file = st.file_uploader("Assignments CSV", type="csv")
_participants_file = st.file_uploader("Participants CSV", type="csv")
_events_file = st.file_uploader("Events CSV (optional)", type="csv")

tables_valid = assignments_valid = participants_valid = False

if _tables_file is not None:
    tables_df = pd.read_csv(_tables_file, dtype=str)
    st.subheader("Tables preview")
    st.dataframe(tables_df, use_container_width=True)
    tables_valid = validate_columns(tables_df, ["id", "capacity"], "tables.csv")
    _tables_file.seek(0)

if _assignments_file is not None:
    assignments_df = pd.read_csv(_assignments_file, dtype=str)
    assignments_valid = validate_columns(
        assignments_df, ["id", "table_id", "participant_id"], "assignments.csv"
    )
    _assignments_file.seek(0)
else:
    assignments_valid = True

if _participants_file is not None:
    participants_df = pd.read_csv(_participants_file, dtype=str)
    st.subheader("Participants preview")
    st.dataframe(participants_df, use_container_width=True)
    participants_valid = validate_columns(participants_df, ["id"], "participants.csv")
    _participants_file.seek(0)

if not (tables_valid and assignments_valid and participants_valid):
    st.info("Upload tables, participants and optionally assignments to continue.")
    st.stop()

# -----------------------------
# Sidebar: event selection
# -----------------------------

events = load_events(uploadedfile_to_buffer(_events_file)) if _events_file is not None else []
event = None
if events:
    ordered = sort_events(events)
    fallback = default_event(ordered)
    labels = {e.id: f"{e.title or e.id} ({phase_label(event_phase(e))})" for e in ordered}
    selected_id = st.sidebar.selectbox(
        "Event",
        options=[e.id for e in ordered],
        index=[e.id for e in ordered].index(fallback.id) if fallback else 0,
        format_func=lambda eid: labels[eid],
    )
    event = next(e for e in ordered if e.id == selected_id)

layout = st.sidebar.selectbox("Seating map layout", ["round", "square", "rectangle"])

source_key = (
    getattr(_tables_file, "file_id", _tables_file.name),
    getattr(_assignments_file, "file_id", None),
    getattr(_participants_file, "file_id", _participants_file.name),
    event.id if event else None,
)
try:
    participants = load_participants(uploadedfile_to_buffer(_participants_file))
    if st.session_state.get("source_key") != source_key:
        st.session_state["store"] = build_store(
            _tables_file, _assignments_file, participants, event.id if event else None
        )
        st.session_state["source_key"] = source_key
except ValueError as e:
    st.error(f"Input validation error: {e}")
    st.stop()

store: InMemoryStore = st.session_state["store"]
service = SeatingService(store, event=event, notify=toast)
st.session_state.setdefault("auto_assign_running", False)

# -----------------------------
# Actions
# -----------------------------

col_plan, col_run = st.columns(2)
plan = service.plan(participants)
col_plan.metric("Unassigned participants", plan.requested_count)
run_clicked = col_run.button(
    "Auto-assign",
    disabled=st.session_state["auto_assign_running"] or plan.requested_count == 0,
    key="auto_assign_button",
)

if run_clicked:
    st.session_state["auto_assign_running"] = True
    try:
        service.auto_assign(participants)
    except SeatingError as e:
        st.session_state["messages"].append(("error", str(e)))
    finally:
        st.session_state["auto_assign_running"] = False
    # Redraw so the metric and button reflect the committed plan
    st.rerun()

with st.expander("Create table"):
    with st.form("create_table", clear_on_submit=True):
        new_number = st.text_input("Table number", max_chars=50)
        new_table_capacity = st.number_input("Seats", min_value=1, value=8, step=1)
        if st.form_submit_button("Create table"):
            try:
                service.create_table(new_number, int(new_table_capacity))
            except StoreError as e:
                st.error(str(e))

with st.expander("Edit table capacity"):
    tables = store.tables()
    table_id = st.selectbox(
        "Table", [t.id for t in tables],
        format_func=lambda tid: f"Table {next(t.table_number for t in tables if t.id == tid)}",
        key="capacity_table",
    )
    current = next((t.capacity for t in tables if t.id == table_id), 1)
    new_capacity = st.number_input("Capacity", min_value=1, value=current, step=1)
    if st.button("Save capacity"):
        try:
            service.update_capacity(table_id, int(new_capacity))
        except (SeatingError, StoreError) as e:
            st.error(str(e))

with st.expander("Change seat"):
    assignment_ids = [a.id for t in store.tables() for a in t.assignments]
    assignment_id = st.selectbox("Assignment", assignment_ids, key="seat_assignment")
    seat = st.number_input("Seat number", min_value=1, value=1, step=1)
    if st.button("Save seat", disabled=not assignment_ids):
        try:
            service.update_seat(assignment_id, int(seat))
        except (SeatingError, StoreError) as e:
            st.error(str(e))

for kind, message in st.session_state["messages"]:
    getattr(st, kind)(message)
st.session_state["messages"] = []

# -----------------------------
# Results
# -----------------------------

rows = table_report(store.tables())
totals = report_totals(rows)
st.subheader("Tables")
st.caption(
    f"{totals['assigned']} of {totals['capacity']} seats assigned across "
    f"{totals['tables']} tables; {totals['full_tables']} full"
)
st.dataframe(pd.DataFrame(rows), use_container_width=True)

csv_bytes = assignments_frame(store.tables()).to_csv(index=False).encode("utf-8")
st.download_button(
    "Download assignments as CSV",
    csv_bytes,
    file_name="assignments.csv",
)

st.subheader("Seating Map")
components.html(seating_map(store.tables(), participants, layout=layout), height=600, scrolling=True)
