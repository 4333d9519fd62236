"""Interactive seating map rendered with networkx and pyvis."""
from __future__ import annotations

import math
from typing import Dict, Iterable, List, Optional, Tuple

import networkx as nx
from pyvis.network import Network

from .models import Assignment, Participant, Table
from .report import table_status

# ---------------------------
# Public API
# ---------------------------

PALETTE = [
    "#FFB347", "#77DD77", "#AEC6CF", "#C23B22", "#F49AC2", "#B39EB5",
    "#03C03C", "#779ECB", "#966FD6", "#FFD700", "#FF6961", "#CB99C9",
    "#CFCFC4", "#FDFD96", "#84B6F4", "#FDCAE1",
]


def build_seating_graph(
    tables: Iterable[Table],
    participants: Iterable[Participant] = (),
    layout: str = "round",
    canvas_size: Tuple[int, int] = (1600, 1000),
) -> nx.Graph:
    """
    Build the seating graph: one hub node per table, one node per assignment.

    Parameters:
      tables: tables with their assignments.
      participants: used for labels and tooltips; unknown ids show the raw id.
      layout: "round", "square", or "rectangle".
      canvas_size: width, height in pixels for layout scaling.
    """
    tables = list(tables)
    by_id = {p.id: p for p in participants}
    width, height = canvas_size
    centers = _compute_table_centers([t.id for t in tables], width, height)

    G = nx.Graph()
    for idx, table in enumerate(tables):
        color = PALETTE[idx % len(PALETTE)]
        cx, cy = centers[table.id]
        hub = f"table:{table.id}"
        G.add_node(
            hub,
            label=f"Table {table.table_number} ({table.assigned_count}/{table.capacity})",
            title=f"<b>Table {table.table_number}</b><br>Status: {table_status(table)}",
            color=color,
            x=cx,
            y=cy,
            physics=False,
            shape="box",
        )

        ordered = _seat_order(table.assignments)
        coords = _seat_coords(cx, cy, len(ordered), layout)
        for a, (x, y) in zip(ordered, coords):
            p = by_id.get(a.participant_id)
            label = p.full_name if p and p.full_name else a.participant_id
            if a.seat_number is not None:
                label = f"{a.seat_number}. {label}"
            G.add_node(
                a.id,
                label=label,
                title=_node_tooltip(label, table, a, p),
                color=color,
                x=x,
                y=y,
                physics=False,
                # Unseated participants are drawn as diamonds
                shape="dot" if a.is_seated else "diamond",
                size=16,
            )
            G.add_edge(hub, a.id, color=color, width=1)
    return G


def seating_map(
    tables: Iterable[Table],
    participants: Iterable[Participant] = (),
    layout: str = "round",
) -> str:
    """Return the seating map as an HTML string with an embedded network."""
    G = build_seating_graph(tables, participants, layout=layout)
    net = Network(height="700px", width="100%", bgcolor="#111111", font_color="#EEEEEE")
    net.toggle_physics(False)  # positions are fixed
    net.from_nx(G)
    # generate_html re-renders the template, so the legend goes on afterwards
    return net.generate_html() + _legend_html()

# ---------------------------
# Internals
# ---------------------------


def _seat_order(assignments: List[Assignment]) -> List[Assignment]:
    seated = sorted((a for a in assignments if a.seat_number is not None), key=lambda a: a.seat_number)
    return seated + [a for a in assignments if a.seat_number is None]


def _compute_table_centers(table_ids: List[str], width: int, height: int) -> Dict[str, Tuple[int, int]]:
    """
    Place table centers on a grid inside the canvas area.
    """
    if not table_ids:
        return {}
    n = len(table_ids)
    cols = max(1, int(math.ceil(math.sqrt(n))))
    rows = int(math.ceil(n / cols))
    margin = 120
    step_x = max(1, width - 2 * margin) // cols
    step_y = max(1, height - 2 * margin) // rows
    return {
        tid: (margin + (i % cols) * step_x + step_x // 2, margin + (i // cols) * step_y + step_y // 2)
        for i, tid in enumerate(table_ids)
    }


def _seat_coords(cx: int, cy: int, n: int, layout: str) -> List[Tuple[int, int]]:
    if n == 0:
        return []
    if layout in ("square", "rectangle"):
        cols = max(2, int(math.ceil(n / 4))) if layout == "square" else max(3, int(math.ceil(math.sqrt(n * 2))))
        rows = cols if layout == "square" else max(2, int(math.ceil(n / cols)))
        return _perimeter_layout(cx, cy, n, rows, cols)
    return _circle_layout(cx, cy, 60 + 6 * n, n)


def _circle_layout(cx: int, cy: int, r: int, n: int) -> List[Tuple[int, int]]:
    pts = []
    for i in range(n):
        theta = 2 * math.pi * i / n
        pts.append((int(cx + r * math.cos(theta)), int(cy + r * math.sin(theta))))
    return pts


def _perimeter_layout(cx: int, cy: int, n: int, rows: int, cols: int) -> List[Tuple[int, int]]:
    """
    Place seats clockwise around a rows x cols rectangle starting top left.
    Seats past the perimeter stack at the center.
    """
    cell = 40
    left = cx - cols * cell // 2
    top = cy - rows * cell // 2
    right = left + (cols - 1) * cell
    bottom = top + (rows - 1) * cell
    pts = [(left + c * cell, top) for c in range(cols)]
    pts += [(right, top + r * cell) for r in range(1, rows)]
    pts += [(left + c * cell, bottom) for c in range(cols - 2, -1, -1)]
    pts += [(left, top + r * cell) for r in range(rows - 2, 0, -1)]
    pts = pts[:n]
    while len(pts) < n:
        pts.append((cx, cy))
    return pts


def _node_tooltip(label: str, table: Table, a: Assignment, p: Optional[Participant]) -> str:
    seat_txt = str(a.seat_number) if a.seat_number is not None else "unseated"
    country = p.country if p and p.country else "n/a"
    user_type = p.user_type if p and p.user_type else "n/a"
    return (
        f"<b>{label}</b><br>"
        f"Table: {table.table_number}<br>"
        f"Seat: {seat_txt}<br>"
        f"Country: {country}<br>"
        f"Type: {user_type}"
    )


def _legend_html() -> str:
    css = """
    <style>
    .legend-box{
      position:absolute;right:12px;bottom:12px;
      background:#222;color:#eee;border:1px solid #444;border-radius:8px;
      padding:8px 12px;font-family:system-ui, -apple-system, Segoe UI, Roboto, Arial;font-size:12px;
      z-index:10;
    }
    </style>
    """
    html = f"""
    {css}
    <div class="legend-box">
      <div>box: table (assigned/capacity)</div>
      <div>dot: seated participant</div>
      <div>diamond: no seat number yet</div>
      <div style="margin-top:6px;">color: table</div>
    </div>
    """
    return html
