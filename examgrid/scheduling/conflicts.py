import logging
from typing import Dict, List, Set

from ..grid import Grid, courses_at
from ..models import DAYS, ConflictReport, Course, TimeSlot
from .slot_summary import INVIGILATORS_PER_ROOM, rooms_for

logger = logging.getLogger(__name__)

MAX_EXAMS_PER_DAY = 2


def format_student_reference(student_id: str, directory: Dict[str, str]) -> str:
    """'<id> <first> <last>' from the directory name, bare id when unknown."""
    parts = (directory.get(student_id) or "").split()
    if not parts:
        return student_id
    first, last = parts[0], parts[-1]
    if first == last:
        return f"{student_id} {first}"
    return f"{student_id} {first} {last}"


def _append_unique(cell: List[str], message: str) -> None:
    if message not in cell:
        cell.append(message)


def compute_conflicts(grid: Grid, courses: Dict[str, Course], directory: Dict[str, str],
                      slots: List[TimeSlot], students_per_room: int,
                      available_invigilators: int) -> ConflictReport:
    report = ConflictReport()
    overall: Dict[str, None] = {}  # ordered set
    capacity = max(0, available_invigilators)

    def lookup(cid):
        course = courses.get(cid)
        if course is None:
            logger.debug("Skipping unknown course id %s", cid)
        return course

    for week in sorted(grid):
        week_conflicts = {day: {slot.id: [] for slot in slots} for day in DAYS}
        report.by_week[week] = week_conflicts
        # student -> day -> exam starts
        day_counts: Dict[str, Dict[str, int]] = {}

        for day in DAYS:
            for index, slot in enumerate(slots):
                starting = courses_at(grid, week, day, slot.id)
                if not starting and index == 0:
                    continue
                previous = courses_at(grid, week, day, slots[index - 1].id) if index > 0 else []

                # student -> ordered course labels active in this slot unit
                active: Dict[str, Dict[str, None]] = {}
                capacity_ids: Set[str] = set()

                for cid in starting:
                    course = lookup(cid)
                    if course is None:
                        continue
                    for student in course.students:
                        active.setdefault(student.id, {})[course.label] = None
                        capacity_ids.add(student.id)
                        counts = day_counts.setdefault(student.id, {})
                        counts[day] = counts.get(day, 0) + 1

                for cid in previous:
                    course = lookup(cid)
                    if course is None:
                        continue
                    for student in course.students:
                        active.setdefault(student.id, {})[course.label] = None

                if not active:
                    continue

                if not capacity_ids:
                    for cid in previous:
                        course = courses.get(cid)
                        if course is not None:
                            capacity_ids.update(course.student_ids())

                if capacity_ids:
                    required = rooms_for(len(capacity_ids), students_per_room) * INVIGILATORS_PER_ROOM
                    if required > capacity:
                        message = (f"Week {week}: {day} {slot.label} requires {required} "
                                   f"invigilators but only {capacity} available.")
                        overall[message] = None
                        _append_unique(week_conflicts[day][slot.id], message)

                for student_id, labels in active.items():
                    if len(labels) < 2:
                        continue
                    message = (f"Week {week}: Student {format_student_reference(student_id, directory)} "
                               f"has overlapping exams ({', '.join(labels)}) on {day} at {slot.label}")
                    overall[message] = None
                    _append_unique(week_conflicts[day][slot.id], message)

        for student_id, counts in day_counts.items():
            for day, total in counts.items():
                if total <= MAX_EXAMS_PER_DAY:
                    continue
                message = (f"Week {week}: Student {format_student_reference(student_id, directory)} "
                           f"is scheduled for {total} exams on {day}")
                overall[message] = None
                for slot in slots:
                    involved = any(
                        student_id in courses[cid].student_ids()
                        for cid in courses_at(grid, week, day, slot.id)
                        if cid in courses
                    )
                    if involved:
                        _append_unique(week_conflicts[day][slot.id], message)

    report.overall = list(overall)
    return report
