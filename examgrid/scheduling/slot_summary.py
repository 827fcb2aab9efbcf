import math
from dataclasses import dataclass
from typing import Dict, List, Set

from ..grid import Grid, courses_at
from ..models import DAYS, Course, SlotSummary, TimeSlot

INVIGILATORS_PER_ROOM = 2


@dataclass
class ScheduleTotals:
    total_courses: int = 0
    total_students: int = 0
    total_rooms: int = 0
    total_invigilators: int = 0


def rooms_for(student_count: int, students_per_room: int) -> int:
    if student_count <= 0:
        return 0
    return math.ceil(student_count / max(1, students_per_room))


def cell_student_ids(course_ids: List[str], courses: Dict[str, Course]) -> Set[str]:
    ids: Set[str] = set()
    for cid in course_ids:
        course = courses.get(cid)
        if course is None:
            continue
        ids.update(course.student_ids())
    return ids


def compute_slot_summaries(grid: Grid, courses: Dict[str, Course], week: int,
                           slots: List[TimeSlot], students_per_room: int) -> Dict[str, Dict[str, SlotSummary]]:
    """Per (day, slot) resource needs implied by the exams starting there.

    Continuation cells have no courses of their own and report zeros.
    """
    summary: Dict[str, Dict[str, SlotSummary]] = {}
    for day in DAYS:
        summary[day] = {}
        for slot in slots:
            course_ids = courses_at(grid, week, day, slot.id)
            n = len(cell_student_ids(course_ids, courses))
            rooms = rooms_for(n, students_per_room)
            summary[day][slot.id] = SlotSummary(
                student_count=n,
                room_count=rooms,
                invigilator_count=rooms * INVIGILATORS_PER_ROOM,
                is_start_slot=len(course_ids) > 0,
            )
    return summary


def compute_summary(grid: Grid, courses: Dict[str, Course], slots: List[TimeSlot],
                    students_per_room: int) -> ScheduleTotals:
    scheduled: Set[str] = set()
    students: Set[str] = set()
    rooms = 0
    for week in grid:
        for day in DAYS:
            for slot in slots:
                course_ids = courses_at(grid, week, day, slot.id)
                if not course_ids:
                    continue
                scheduled.update(cid for cid in course_ids if cid in courses)
                slot_students = cell_student_ids(course_ids, courses)
                students.update(slot_students)
                rooms += rooms_for(len(slot_students), students_per_room)
    return ScheduleTotals(
        total_courses=len(scheduled),
        total_students=len(students),
        total_rooms=rooms,
        total_invigilators=rooms * INVIGILATORS_PER_ROOM,
    )
