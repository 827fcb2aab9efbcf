from typing import Dict, List, Tuple

import networkx as nx

from ..graph_build import build_clash_graph
from ..grid import Grid, assigned_course_ids, iter_cells
from ..models import DAYS, EXAM_SPAN_SLOTS, ConflictReport, Course, EngineSettings, TimeSlot
from .slot_summary import compute_summary


def _greedy_clique_lb(G: nx.Graph) -> int:
    """Fast lower bound on the number of distinct exam blocks via a greedy clique.

    Picks the highest-degree node, then greedily grows a clique by repeatedly
    adding a node that is adjacent to all current clique members.
    """
    if G.number_of_nodes() == 0:
        return 0
    seed = max(G.nodes(), key=lambda u: G.degree(u))
    clique = {seed}
    candidates = set(G.neighbors(seed))
    while candidates:
        u = max(candidates, key=lambda v: G.degree(v))
        new_cands = {v for v in candidates if all(G.has_edge(v, w) for w in clique)}
        if u in new_cands:
            clique.add(u)
            candidates = new_cands.intersection(G.neighbors(u))
        else:
            candidates.remove(u)
    return len(clique)


def _exam_units(grid: Grid, slots: List[TimeSlot]) -> Dict[str, Tuple[int, str, int]]:
    """course id -> (week, day, start slot index)."""
    index_of = {s.id: i for i, s in enumerate(slots)}
    units = {}
    for week, day, slot, course_ids in iter_cells(grid, slots):
        for cid in course_ids:
            units[cid] = (week, day, index_of[slot.id])
    return units


def clashing_pairs(G: nx.Graph, grid: Grid, slots: List[TimeSlot]) -> List[Tuple[str, str]]:
    """Clash-graph edges whose exams overlap in time (same or adjacent start slot)."""
    units = _exam_units(grid, slots)
    pairs = []
    for u, v in G.edges():
        if u not in units or v not in units:
            continue
        wu, du, iu = units[u]
        wv, dv, iv = units[v]
        if wu == wv and du == dv and abs(iu - iv) <= 1:
            pairs.append(tuple(sorted((u, v))))
    return sorted(pairs)


def summary(grid: Grid, courses: Dict[str, Course], slots: List[TimeSlot],
            settings: EngineSettings, report: ConflictReport) -> str:
    G = build_clash_graph(courses.values())
    totals = compute_summary(grid, courses, slots, settings.students_per_room)
    scheduled = assigned_course_ids(grid, slots) & set(courses)
    clashes = clashing_pairs(G, grid, slots)
    lb = _greedy_clique_lb(G)
    # adjacent starts overlap, so a day fits len(slots) // EXAM_SPAN_SLOTS disjoint exams
    exam_blocks = (len(slots) // EXAM_SPAN_SLOTS) * len(DAYS) * len(grid)
    warning = ""
    if exam_blocks < lb:
        warning = (
            f"Warning: exam blocks={exam_blocks} < clique LB={lb}; a clash-free timetable is impossible.\n"
        )
    return (
        f"Courses: {len(courses)}  Scheduled: {len(scheduled)}  Unscheduled: {len(courses) - len(scheduled)}\n"
        f"Students: {totals.total_students}  Rooms: {totals.total_rooms}  "
        f"Invigilators: {totals.total_invigilators}\n"
        f"Clash edges: {G.number_of_edges()}  Clashing in timetable: {len(clashes)}\n"
        f"Clique lower bound: {lb}\n"
        f"Conflicts: {len(report.overall)}\n"
        f"{warning}"
    )
