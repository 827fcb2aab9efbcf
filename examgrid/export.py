"""Row-level export data for one week: room rows, invigilator roster, day rosters.

Turning these tables into a workbook is left to the caller; ``to_frames``
hands them over as pandas DataFrames keyed by sheet name.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List, Optional

import pandas as pd

from .grid import Grid, courses_at
from .models import (DAYS, Course, EngineSettings, InvigilatorAssignment, RoomOccupancy, TimeSlot,
                     format_time_label, slot_id_to_minutes)
from .scheduling.invigilators import assign_invigilators, generate_invigilator_placeholders
from .scheduling.room_assignment import pack_rooms, room_label

logger = logging.getLogger(__name__)

INVIGILATOR_HEADER = [
    "CRN", "Course Code", "Course Title", "No of Students", "Date", "Time",
    "Instructor Name", "Invigilator room", "Invigilator1", "Invigilator2", "Backup Invigilator",
]
STUDENT_HEADER = ["CRN", "Code", "Title", "Student ID", "Student Name", "Class room", "Present/ Absent"]
POOL_HEADER = ["Invigilator", "Primary assignments", "Backup assignments"]
ROOM_POOL_HEADER = ["Room", "Assignments"]

SHEET_NAME_LIMIT = 31
EXPORT_BLOCK_MINUTES = 60


@dataclass
class RoomRow:
    day: str
    slot_id: str
    date: str
    time_range: str
    room: RoomOccupancy

    @property
    def room_name(self) -> str:
        return self.room.room_name


@dataclass
class RosterRow:
    crn: str
    code: str
    title: str
    student_id: str
    student_name: str
    room_name: str
    sort_key: int = 0


@dataclass
class WeekExport:
    week: int
    room_rows: List[RoomRow] = field(default_factory=list)
    assignments: List[InvigilatorAssignment] = field(default_factory=list)
    pool_tally: List[Dict[str, object]] = field(default_factory=list)
    room_pool: List[Dict[str, object]] = field(default_factory=list)
    day_rosters: Dict[str, List[RosterRow]] = field(default_factory=dict)

    def invigilator_rows(self) -> List[List[str]]:
        rows = []
        for row, assignment in zip(self.room_rows, self.assignments):
            label = room_label(row.room)
            rows.append([
                label["crn"], label["course_code"], label["course_title"], str(len(row.room.students)),
                row.date, row.time_range, label["instructor"], row.room_name,
                assignment.primary_one, assignment.primary_two, assignment.backup,
            ])
        return rows

    def to_frames(self) -> Dict[str, pd.DataFrame]:
        frames = {
            sheet_name(f"Week {self.week} Invigilators"):
                pd.DataFrame(self.invigilator_rows(), columns=INVIGILATOR_HEADER),
            sheet_name(f"Week {self.week} Invigilator Pool"):
                pd.DataFrame([[p["name"], p["primary"], p["backup"]] for p in self.pool_tally],
                             columns=POOL_HEADER),
            sheet_name(f"Week {self.week} Room Pool"):
                pd.DataFrame([[r["room"], r["assignments"]] for r in self.room_pool], columns=ROOM_POOL_HEADER),
        }
        for day, roster in self.day_rosters.items():
            frames[sheet_name(f"Week {self.week} {day}")] = pd.DataFrame(
                [[r.crn, r.code, r.title, r.student_id, r.student_name, r.room_name, ""] for r in roster],
                columns=STUDENT_HEADER,
            )
        return frames


def sheet_name(base: str) -> str:
    if not base:
        return "Sheet"
    return base[:SHEET_NAME_LIMIT]


def format_invigilator_date(d: date) -> str:
    return f"{d:%A}, {d:%b} {d.day}, {d.year}"


def format_slot_range(slot_id: str) -> str:
    start = slot_id_to_minutes(slot_id)
    return f"{format_time_label(start)} - {format_time_label(start + EXPORT_BLOCK_MINUTES)}"


def week_start(start_date: date, week: int) -> date:
    monday = start_date - timedelta(days=start_date.weekday())
    return monday + timedelta(days=(week - 1) * 7)


def build_week_export(week: int, grid: Grid, courses: Dict[str, Course], directory: Dict[str, str],
                      slots: List[TimeSlot], settings: EngineSettings) -> Optional[WeekExport]:
    """Pack every exam of ``week`` into rooms and staff them; None when the week is empty."""
    if week not in grid:
        return None
    first_day = week_start(settings.start_date, week)
    export = WeekExport(week=week)

    for day_index, day in enumerate(DAYS):
        formatted_date = format_invigilator_date(first_day + timedelta(days=day_index))
        for slot in slots:
            course_ids = courses_at(grid, week, day, slot.id)
            if not course_ids:
                continue
            time_range = format_slot_range(slot.id)
            rooms = pack_rooms(course_ids, courses, directory, settings.students_per_room)
            for room in rooms:
                export.room_rows.append(RoomRow(day=day, slot_id=slot.id, date=formatted_date,
                                                time_range=time_range, room=room))
                roster = export.day_rosters.setdefault(day, [])
                for entry in room.students:
                    title = f"{entry.course_title} ({time_range})" if entry.course_title else time_range
                    roster.append(RosterRow(
                        crn=entry.crn, code=entry.course_code, title=title, student_id=entry.id,
                        student_name=entry.name, room_name=room.room_name,
                        sort_key=slot_id_to_minutes(slot.id),
                    ))

    if not export.room_rows:
        return None

    for day, roster in export.day_rosters.items():
        roster.sort(key=lambda r: (r.sort_key, r.room_name, r.code, r.student_id))

    placeholders = generate_invigilator_placeholders(settings.invigilator_pool_size)
    room_names = [row.room_name for row in export.room_rows]
    export.assignments, pool = assign_invigilators(room_names, placeholders)
    export.pool_tally = [
        {"name": c.name, "primary": c.primary_count, "backup": c.backup_count} for c in pool
    ]
    unique_rooms = sorted({name for name in room_names if name.strip()}, key=str.lower)
    export.room_pool = [{"room": name, "assignments": room_names.count(name)} for name in unique_rooms]

    logger.info("Week %d: %d room row(s) across %d day(s)", week, len(export.room_rows), len(export.day_rosters))
    return export
