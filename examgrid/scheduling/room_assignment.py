from typing import Dict, List, Set

from ..models import Course, CrnDetail, RoomOccupancy, StudentEntry, Student, resolve_student_name


def _crn_groups(course: Course) -> List[CrnDetail]:
    if course.crn_details:
        return course.crn_details
    return [CrnDetail(crn=course.crn_string() or course.id,
                      instructor=course.primary_instructor,
                      students=course.students)]


def _export_order(students: List[Student]) -> List[Student]:
    return sorted(students, key=lambda s: ((s.name or "").lower(), str(s.id or "")))


def course_entries(course: Course, directory: Dict[str, str]) -> List[StudentEntry]:
    """Flatten a course's crn groups into student entries, first seen wins."""
    seen: Set[str] = set()
    entries: List[StudentEntry] = []
    title = (course.title or "").strip()
    for group in _crn_groups(course):
        instructor = group.instructor or course.primary_instructor
        for student in _export_order(group.students):
            sid = str(student.id or "").strip()
            if not sid or sid in seen:
                continue
            seen.add(sid)
            entries.append(StudentEntry(
                id=sid,
                name=resolve_student_name(student, directory) or sid,
                crn=student.crn or group.crn or course.id,
                instructor=student.instructor or instructor,
                course_id=course.id,
                course_code=course.code or "",
                course_title=title,
            ))
    return entries


def _add_label(values: List[str], value: str) -> None:
    if value and value not in values:
        values.append(value)


def pack_rooms(course_ids: List[str], courses: Dict[str, Course], directory: Dict[str, str],
               students_per_room: int) -> List[RoomOccupancy]:
    """Sequential first-fit packing of one cell's students into fixed-size rooms.

    Largest course first; a room is filled to capacity before the next one is
    opened and closed rooms are never revisited, so one room may mix courses.
    """
    capacity = max(1, students_per_room)
    known = [courses[cid] for cid in course_ids if cid in courses]
    ordered = sorted(known, key=lambda c: len(c.students), reverse=True)

    rooms: List[RoomOccupancy] = []
    current = None
    for course in ordered:
        for entry in course_entries(course, directory):
            if current is None or len(current.students) >= capacity:
                current = RoomOccupancy(room_name=f"Room {len(rooms) + 1}")
                rooms.append(current)
            current.students.append(entry)
            _add_label(current.course_codes, entry.course_code)
            _add_label(current.course_titles, entry.course_title)
            _add_label(current.crns, entry.crn)
            _add_label(current.instructors, entry.instructor or course.primary_instructor)
    return rooms


def room_label(room: RoomOccupancy) -> Dict[str, str]:
    codes = ", ".join(sorted(room.course_codes))
    return {
        "crn": ", ".join(sorted(room.crns)) or codes,
        "course_code": codes,
        "course_title": "; ".join(sorted(room.course_titles)),
        "instructor": ", ".join(sorted(room.instructors)),
    }
