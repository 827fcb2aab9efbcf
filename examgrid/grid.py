import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .models import DAYS, MAX_WEEKS, TimeSlot, is_valid_start_index

logger = logging.getLogger(__name__)

# week -> day -> slot_id -> ordered course ids
Grid = Dict[int, Dict[str, Dict[str, List[str]]]]


@dataclass
class ReshapeResult:
    grid: Grid
    dropped: List[str] = field(default_factory=list)


def empty_week(slots: List[TimeSlot]) -> Dict[str, Dict[str, List[str]]]:
    return {day: {slot.id: [] for slot in slots} for day in DAYS}


def build_empty_assignments(weeks: Iterable[int], slots: List[TimeSlot]) -> Grid:
    return {int(w): empty_week(slots) for w in weeks}


def courses_at(grid: Grid, week: int, day: str, slot_id: str) -> List[str]:
    return grid.get(week, {}).get(day, {}).get(slot_id) or []


def clone_assignments(grid: Grid, slots: List[TimeSlot]) -> Grid:
    """Deep copy over the full weeks x days x slots product; absent cells become []."""
    return {
        int(week): {
            day: {slot.id: list(courses_at(grid, week, day, slot.id)) for slot in slots}
            for day in DAYS
        }
        for week in grid
    }


def place(grid: Grid, slots: List[TimeSlot], course_id: str, week: int, day: str, slot_id: str) -> Grid:
    """Move course_id to (week, day, slot_id), removing it from every other cell.

    A target that cannot start an exam (unknown day, unknown slot, or the last
    slot of the day) leaves the grid unchanged.
    """
    nxt = clone_assignments(grid, slots)
    index = next((i for i, s in enumerate(slots) if s.id == slot_id), -1)
    if day not in DAYS or not 1 <= int(week) <= MAX_WEEKS or not is_valid_start_index(index, slots):
        logger.debug("Ignoring placement of %s at %s %s", course_id, day, slot_id)
        return nxt

    for week_cells in nxt.values():
        for day_cells in week_cells.values():
            for cell in day_cells.values():
                while course_id in cell:
                    cell.remove(course_id)

    target = nxt.setdefault(int(week), empty_week(slots))[day][slot_id]
    if course_id not in target:
        target.append(course_id)
    return nxt


def remove(grid: Grid, slots: List[TimeSlot], week: int, day: str, slot_id: str, course_id: str) -> Grid:
    nxt = clone_assignments(grid, slots)
    cells = nxt.get(week, {}).get(day)
    if cells is not None and slot_id in cells:
        cells[slot_id] = [cid for cid in cells[slot_id] if cid != course_id]
    return nxt


def reshape(grid: Grid, slots: List[TimeSlot]) -> ReshapeResult:
    """Rebuild the grid over a new slot sequence, matching cells by slot id.

    Courses sitting in slot ids that no longer exist are dropped from the grid
    and reported back in ``dropped``.
    """
    keep = {s.id for s in slots}
    dropped: List[str] = []
    for week in sorted(grid):
        for day in DAYS:
            for slot_id, course_ids in (grid[week].get(day) or {}).items():
                if slot_id not in keep:
                    dropped.extend(cid for cid in course_ids if cid not in dropped)
    if dropped:
        logger.warning("Slot change dropped %d scheduled course(s): %s", len(dropped), ", ".join(dropped))
    return ReshapeResult(grid=clone_assignments(grid, slots), dropped=dropped)


def add_week(grid: Grid, slots: List[TimeSlot]) -> Tuple[Grid, Optional[int]]:
    if len(grid) >= MAX_WEEKS:
        return grid, None
    week = max(grid) + 1 if grid else 1
    nxt = clone_assignments(grid, slots)
    nxt[week] = empty_week(slots)
    return nxt, week


def clear(grid: Grid, slots: List[TimeSlot]) -> Grid:
    return build_empty_assignments(grid.keys(), slots)


def iter_cells(grid: Grid, slots: List[TimeSlot]):
    for week in sorted(grid):
        for day in DAYS:
            for slot in slots:
                yield week, day, slot, courses_at(grid, week, day, slot.id)


def find_course(grid: Grid, slots: List[TimeSlot], course_id: str) -> Optional[Tuple[int, str, str]]:
    for week, day, slot, course_ids in iter_cells(grid, slots):
        if course_id in course_ids:
            return week, day, slot.id
    return None


def assigned_course_ids(grid: Grid, slots: List[TimeSlot]) -> Set[str]:
    ids: Set[str] = set()
    for _, _, _, course_ids in iter_cells(grid, slots):
        ids.update(course_ids)
    return ids


def occupied_slot_ids(grid: Grid, week: int, slots: List[TimeSlot]) -> Set[str]:
    """Slot columns holding an exam start or its continuation on any day."""
    occupied: Set[str] = set()
    for index, slot in enumerate(slots):
        for day in DAYS:
            if courses_at(grid, week, day, slot.id):
                occupied.add(slot.id)
                break
            if index > 0 and courses_at(grid, week, day, slots[index - 1].id):
                occupied.add(slot.id)
                break
    return occupied
