"""Tests for the clash graph and the text report."""
from examgrid.graph_build import build_clash_graph
from examgrid.grid import build_empty_assignments, place
from examgrid.models import EngineSettings, course_lookup
from examgrid.scheduling.conflicts import compute_conflicts
from examgrid.scheduling.evaluation import _greedy_clique_lb, clashing_pairs, summary


def test_clash_graph_weights(make_course) -> None:
    G = build_clash_graph([
        make_course("A", ["S1", "S2"]), make_course("B", ["S1", "S2", "S3"]), make_course("C", ["S9"]),
    ])
    assert set(G.nodes()) == {"A", "B", "C"}
    assert G["A"]["B"]["weight"] == 2
    assert G.degree("C") == 0


def test_clique_bound(make_course) -> None:
    G = build_clash_graph([make_course(c, ["S1"]) for c in "ABCD"] + [make_course("E", ["S2"])])
    assert _greedy_clique_lb(G) == 4


def test_clashing_pairs_respect_exam_span(slots, make_course) -> None:
    courses = [make_course("A", ["S1"]), make_course("B", ["S1"]), make_course("C", ["S1"])]
    grid = build_empty_assignments([1], slots)
    grid = place(grid, slots, "A", 1, "Monday", "09:00")
    grid = place(grid, slots, "B", 1, "Monday", "09:30")
    grid = place(grid, slots, "C", 1, "Monday", "10:30")
    assert clashing_pairs(build_clash_graph(courses), grid, slots) == [("A", "B")]


def test_summary_text(slots, make_course) -> None:
    courses = course_lookup([make_course("A", ["S1", "S2"]), make_course("B", ["S2"]), make_course("C", [])])
    grid = build_empty_assignments([1], slots)
    grid = place(grid, slots, "A", 1, "Monday", "09:00")
    grid = place(grid, slots, "B", 1, "Monday", "09:00")
    settings = EngineSettings(start_hour=9, end_hour=12)
    report = compute_conflicts(grid, courses, {}, slots, settings.students_per_room, 15)
    text = summary(grid, courses, slots, settings, report)
    assert "Courses: 3  Scheduled: 2  Unscheduled: 1" in text
    assert "Rooms: 1  Invigilators: 2" in text
    assert "Clashing in timetable: 1" in text
    assert "Conflicts: 2" in text
    assert "Warning" not in text


def test_summary_warns_when_exam_blocks_cannot_separate_a_clique(slots, make_course) -> None:
    # six slots hold three non-overlapping exams a day, fifteen over one week
    settings = EngineSettings(start_hour=9, end_hour=12)
    grid = build_empty_assignments([1], slots)
    for size, warned in ((15, False), (16, True)):
        courses = course_lookup([make_course(f"C{i:02d}", ["S1"]) for i in range(size)])
        report = compute_conflicts(grid, courses, {}, slots, settings.students_per_room, 15)
        text = summary(grid, courses, slots, settings, report)
        assert ("Warning: exam blocks=15 < clique LB=16" in text) is warned
