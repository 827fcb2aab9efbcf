"""Tests for per-cell resource summaries and overall totals."""
from examgrid.grid import build_empty_assignments, place
from examgrid.models import DAYS, course_lookup
from examgrid.scheduling.slot_summary import compute_slot_summaries, compute_summary, rooms_for


def test_rooms_for() -> None:
    assert rooms_for(0, 25) == 0
    assert rooms_for(1, 25) == 1
    assert rooms_for(26, 25) == 2
    assert rooms_for(5, 0) == 5


def test_summary_counts_unique_students(slots, make_course) -> None:
    courses = course_lookup([
        make_course("A", [f"S{i}" for i in range(20)]),
        make_course("B", [f"S{i}" for i in range(10, 40)]),
    ])
    grid = build_empty_assignments([1], slots)
    grid = place(grid, slots, "A", 1, "Monday", "09:00")
    grid = place(grid, slots, "B", 1, "Monday", "09:00")

    summary = compute_slot_summaries(grid, courses, 1, slots, 25)
    cell = summary["Monday"]["09:00"]
    assert cell.student_count == 40
    assert cell.room_count == 2
    assert cell.invigilator_count == 4
    assert cell.is_start_slot


def test_continuation_cell_reports_zero(slots, make_course) -> None:
    courses = course_lookup([make_course("A", ["S1", "S2"])])
    grid = place(build_empty_assignments([1], slots), slots, "A", 1, "Monday", "09:00")
    cont = compute_slot_summaries(grid, courses, 1, slots, 25)["Monday"]["09:30"]
    assert not cont.is_start_slot
    assert (cont.student_count, cont.room_count, cont.invigilator_count) == (0, 0, 0)


def test_invigilators_always_double_rooms(slots, make_course) -> None:
    courses = course_lookup([
        make_course(f"C{i}", [f"S{j}" for j in range(i * 7)]) for i in range(1, 6)
    ])
    grid = build_empty_assignments([1], slots)
    for i, day in enumerate(DAYS):
        grid = place(grid, slots, f"C{i + 1}", 1, day, slots[i].id)
    summary = compute_slot_summaries(grid, courses, 1, slots, 10)
    for day in DAYS:
        for slot in slots:
            cell = summary[day][slot.id]
            assert cell.invigilator_count == cell.room_count * 2


def test_dangling_course_is_skipped(slots, make_course) -> None:
    courses = course_lookup([make_course("A", ["S1"])])
    grid = place(build_empty_assignments([1], slots), slots, "GONE", 1, "Monday", "09:00")
    cell = compute_slot_summaries(grid, courses, 1, slots, 25)["Monday"]["09:00"]
    assert cell.is_start_slot
    assert cell.student_count == 0
    assert cell.room_count == 0


def test_overall_totals(slots, make_course) -> None:
    courses = course_lookup([
        make_course("A", [f"S{i}" for i in range(30)]),
        make_course("B", ["S1", "X1"]),
    ])
    grid = build_empty_assignments([1, 2], slots)
    grid = place(grid, slots, "A", 1, "Monday", "09:00")
    grid = place(grid, slots, "B", 2, "Friday", "10:00")
    totals = compute_summary(grid, courses, slots, 25)
    assert totals.total_courses == 2
    assert totals.total_students == 31
    assert totals.total_rooms == 3
    assert totals.total_invigilators == 6
