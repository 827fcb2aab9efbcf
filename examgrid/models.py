from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import Dict, List, Optional, Iterable

DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]
MAX_WEEKS = 10
EXAM_SPAN_SLOTS = 2  # start slot + continuation

DEFAULT_SLOT_INTERVAL_MINUTES = 30
DEFAULT_START_HOUR = 8
DEFAULT_END_HOUR = 17
DEFAULT_STUDENTS_PER_ROOM = 25
DEFAULT_INVIGILATOR_POOL_SIZE = 15


class SettingsError(ValueError):
    """Raised when engine settings are out of range."""


@dataclass(frozen=True)
class TimeSlot:
    id: str  # HH:MM, 24h
    label: str = ""


@dataclass
class Student:
    id: str
    name: str = ""
    crn: str = ""
    instructor: str = ""


@dataclass
class CrnDetail:
    crn: str
    instructor: str = ""
    students: List[Student] = field(default_factory=list)


@dataclass
class Section:
    """One enrollment section as delivered by the ingestion layer."""
    code: str
    title: str = ""
    crn: str = ""
    section: str = ""
    instructor: str = ""
    students: List[Student] = field(default_factory=list)

    @property
    def id(self) -> str:
        if self.crn:
            return self.crn
        if self.section:
            return f"{self.code}-{self.section}"
        return self.code


@dataclass
class Course:
    id: str
    code: str = ""
    title: str = ""
    students: List[Student] = field(default_factory=list)
    instructors: List[str] = field(default_factory=list)
    crn_details: List[CrnDetail] = field(default_factory=list)
    sections: List[str] = field(default_factory=list)

    @property
    def label(self) -> str:
        return self.code or self.title or self.id

    @property
    def primary_instructor(self) -> str:
        return next((name for name in self.instructors if name), "")

    def crn_string(self) -> str:
        crns = [d.crn for d in self.crn_details if d.crn]
        return ", ".join(crns)

    def student_ids(self) -> List[str]:
        return [s.id for s in self.students]


@dataclass
class SlotSummary:
    student_count: int = 0
    room_count: int = 0
    invigilator_count: int = 0
    is_start_slot: bool = False


@dataclass
class ConflictReport:
    overall: List[str] = field(default_factory=list)
    # week -> day -> slot_id -> messages
    by_week: Dict[int, Dict[str, Dict[str, List[str]]]] = field(default_factory=dict)

    def at(self, week: int, day: str, slot_id: str) -> List[str]:
        return self.by_week.get(week, {}).get(day, {}).get(slot_id, [])


@dataclass
class StudentEntry:
    id: str
    name: str
    crn: str = ""
    instructor: str = ""
    course_id: str = ""
    course_code: str = ""
    course_title: str = ""


@dataclass
class RoomOccupancy:
    room_name: str = ""
    students: List[StudentEntry] = field(default_factory=list)
    course_codes: List[str] = field(default_factory=list)
    course_titles: List[str] = field(default_factory=list)
    crns: List[str] = field(default_factory=list)
    instructors: List[str] = field(default_factory=list)


@dataclass
class InvigilatorCandidate:
    name: str
    order: int
    primary_count: int = 0
    backup_count: int = 0
    room_usage: Dict[str, int] = field(default_factory=dict)


@dataclass
class InvigilatorAssignment:
    primary_one: str = ""
    primary_two: str = ""
    backup: str = ""
    room_name: str = ""


def current_monday(today: Optional[date] = None) -> date:
    today = today or date.today()
    return today - timedelta(days=today.weekday())


@dataclass
class EngineSettings:
    slot_interval_minutes: int = DEFAULT_SLOT_INTERVAL_MINUTES
    start_hour: int = DEFAULT_START_HOUR
    end_hour: int = DEFAULT_END_HOUR
    students_per_room: int = DEFAULT_STUDENTS_PER_ROOM
    invigilator_pool_size: int = DEFAULT_INVIGILATOR_POOL_SIZE
    week_count: int = 1
    start_date: date = field(default_factory=current_monday)

    def validate(self) -> None:
        if self.slot_interval_minutes not in (30, 60):
            raise SettingsError("slot_interval_minutes must be 30 or 60")
        if not 0 <= self.start_hour <= 23 or not 1 <= self.end_hour <= 24:
            raise SettingsError("start_hour/end_hour out of range")
        if self.end_hour <= self.start_hour:
            raise SettingsError("end_hour must be greater than start_hour")
        if self.students_per_room < 1:
            raise SettingsError("students_per_room must be >= 1")
        if self.invigilator_pool_size < 1:
            raise SettingsError("invigilator_pool_size must be >= 1")
        if not 1 <= self.week_count <= MAX_WEEKS:
            raise SettingsError(f"week_count must be between 1 and {MAX_WEEKS}")

    def normalised(self) -> "EngineSettings":
        """Clamp values the way the settings editor does instead of rejecting them."""
        fixed = replace(self)
        if fixed.slot_interval_minutes <= 0:
            fixed.slot_interval_minutes = DEFAULT_SLOT_INTERVAL_MINUTES
        if fixed.end_hour <= fixed.start_hour:
            fixed.end_hour = min(23, fixed.start_hour + 1)
            if fixed.end_hour <= fixed.start_hour:
                fixed.start_hour = max(0, fixed.end_hour - 1)
        fixed.students_per_room = max(1, fixed.students_per_room)
        fixed.invigilator_pool_size = max(1, fixed.invigilator_pool_size)
        fixed.week_count = min(MAX_WEEKS, max(1, fixed.week_count))
        fixed.start_date = current_monday(fixed.start_date)
        return fixed

    def weeks(self) -> List[int]:
        return list(range(1, self.week_count + 1))

    def time_slots(self) -> List[TimeSlot]:
        return build_time_slots(self.start_hour, self.end_hour, self.slot_interval_minutes)


def format_time_label(total_minutes: int) -> str:
    hour24, minute = divmod(total_minutes, 60)
    suffix = "PM" if hour24 % 24 >= 12 else "AM"
    hour12 = (hour24 + 11) % 12 + 1
    return f"{hour12}:{minute:02d} {suffix}"


def slot_id_to_minutes(slot_id: str) -> int:
    hour, _, minute = str(slot_id).partition(":")
    return int(hour or 0) * 60 + int(minute or 0)


def build_time_slots(start_hour: int, end_hour: int, interval_minutes: int) -> List[TimeSlot]:
    if interval_minutes <= 0 or end_hour <= start_hour:
        return []
    slots = []
    minutes = start_hour * 60
    while minutes <= end_hour * 60 - interval_minutes:
        hour, minute = divmod(minutes, 60)
        slots.append(TimeSlot(id=f"{hour:02d}:{minute:02d}", label=format_time_label(minutes)))
        minutes += interval_minutes
    return slots


def is_valid_start_index(index: int, slots: List[TimeSlot]) -> bool:
    # the continuation must fit inside the day
    return 0 <= index <= len(slots) - EXAM_SPAN_SLOTS


def course_lookup(courses: Iterable[Course]) -> Dict[str, Course]:
    return {c.id: c for c in courses}


def resolve_student_name(student: Student, directory: Dict[str, str]) -> str:
    explicit = (student.name or "").strip()
    if explicit:
        return explicit
    return (directory.get(student.id) or "").strip()


def _student_sort_key(student: Student):
    return (student.name.lower(), student.id)


def group_sections(sections: Iterable[Section], directory: Optional[Dict[str, str]] = None) -> List[Course]:
    """Merge enrollment sections sharing a course code into one Course.

    Each distinct CRN (or derived section id) becomes a CrnDetail so the
    instructor attribution of every roster survives. A student seen twice keeps
    the first non-empty name/crn/instructor.
    """
    directory = directory or {}
    grouped: Dict[str, Course] = {}
    seen: Dict[str, Dict[str, Student]] = {}
    details: Dict[str, Dict[str, CrnDetail]] = {}

    for sec in sections:
        key = sec.code or sec.id
        if not key:
            continue
        course = grouped.get(key)
        if course is None:
            course = Course(id=key, code=sec.code or key, title=(sec.title or "").strip() or sec.code or key)
            grouped[key] = course
            seen[key] = {}
            details[key] = {}
        if sec.section and sec.section not in course.sections:
            course.sections.append(sec.section)
        if sec.instructor and sec.instructor not in course.instructors:
            course.instructors.append(sec.instructor)

        crn_key = sec.crn or sec.id
        detail = details[key].get(crn_key)
        if detail is None:
            detail = CrnDetail(crn=crn_key, instructor=sec.instructor)
            details[key][crn_key] = detail
            course.crn_details.append(detail)
        elif not detail.instructor and sec.instructor:
            detail.instructor = sec.instructor

        for student in sec.students:
            if not student.id:
                continue
            name = student.name or directory.get(student.id, "") or student.id
            crn = student.crn or crn_key
            instructor = student.instructor or sec.instructor
            detail.students.append(Student(id=student.id, name=name, crn=crn, instructor=instructor))
            existing = seen[key].get(student.id)
            if existing is None:
                existing = Student(id=student.id, name=name, crn=crn, instructor=instructor)
                seen[key][student.id] = existing
                course.students.append(existing)
            else:
                if not existing.name and name:
                    existing.name = name
                if not existing.crn and crn:
                    existing.crn = crn
                if not existing.instructor and instructor:
                    existing.instructor = instructor

    courses = []
    for course in grouped.values():
        course.sections.sort()
        course.instructors.sort()
        course.crn_details.sort(key=lambda d: d.crn)
        course.students.sort(key=_student_sort_key)
        courses.append(course)
    return courses
