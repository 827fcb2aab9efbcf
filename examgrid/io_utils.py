import io
import json
import os
from datetime import date
from typing import Any, Dict, IO, List, Tuple, Union

import pandas as pd

from .grid import Grid
from .models import Course, CrnDetail, EngineSettings, Section, Student, group_sections

TextOrPath = Union[str, os.PathLike, IO]


class DatasetError(ValueError):
    """Raised when a dataset, grid or settings file is structurally invalid."""


def _open_text(src: TextOrPath):
    """Return a text-mode file handle and a flag indicating whether to close it.

    Accepts a filesystem path, a text IO object, or a BytesIO buffer.
    """
    if isinstance(src, (str, os.PathLike)):
        f = open(src, 'r', encoding='utf-8')
        return f, True
    if isinstance(src, io.BytesIO):
        src.seek(0)
        f = io.TextIOWrapper(src, encoding='utf-8')
        return f, True
    if hasattr(src, 'read'):
        if hasattr(src, 'seek'):
            src.seek(0)
        return src, False
    raise TypeError("Unsupported input type; expected path or file-like object")


def _read_json(src: TextOrPath) -> Any:
    f, should_close = _open_text(src)
    try:
        return json.load(f)
    except json.JSONDecodeError as e:
        raise DatasetError(f"Invalid JSON: {e}") from e
    finally:
        if should_close:
            f.close()


def _as_dict(obj: Any, ctx: str) -> Dict[str, Any]:
    if not isinstance(obj, dict):
        raise DatasetError(f"Expected a JSON object in {ctx}, got {type(obj).__name__}")
    return obj


def _as_list(obj: Any, ctx: str) -> List[Any]:
    if not isinstance(obj, list):
        raise DatasetError(f"Expected a JSON array in {ctx}, got {type(obj).__name__}")
    return obj


def _student(raw: Any, ctx: str) -> Student:
    if isinstance(raw, str):
        return Student(id=raw.strip())
    raw = _as_dict(raw, ctx)
    return Student(
        id=str(raw.get('id', '')).strip(),
        name=str(raw.get('name') or '').strip(),
        crn=str(raw.get('crn') or '').strip(),
        instructor=str(raw.get('instructor') or '').strip(),
    )


def _course(raw: Dict[str, Any], ctx: str) -> Course:
    if 'id' not in raw:
        raise DatasetError(f"Missing required key 'id' in {ctx}")
    seen = set()
    students = []
    for i, s in enumerate(_as_list(raw.get('students', []), f"{ctx}.students")):
        student = _student(s, f"{ctx}.students[{i}]")
        if student.id and student.id not in seen:
            seen.add(student.id)
            students.append(student)
    details = []
    raw_details = _as_list(raw.get('crn_details', raw.get('crnDetails', [])), f"{ctx}.crn_details")
    for j, d in enumerate(raw_details):
        dctx = f"{ctx}.crn_details[{j}]"
        d = _as_dict(d, dctx)
        details.append(CrnDetail(
            crn=str(d.get('crn') or ''),
            instructor=str(d.get('instructor') or ''),
            students=[_student(s, dctx) for s in _as_list(d.get('students', []), dctx)],
        ))
    return Course(
        id=str(raw['id']),
        code=str(raw.get('code') or ''),
        title=str(raw.get('title') or ''),
        students=students,
        instructors=[str(x) for x in raw.get('instructors', []) if x],
        crn_details=details,
        sections=[str(x) for x in raw.get('sections', [])],
    )


def _section(raw: Dict[str, Any], ctx: str) -> Section:
    raw = _as_dict(raw, ctx)
    return Section(
        code=str(raw.get('code') or '').strip(),
        title=str(raw.get('title') or '').strip(),
        crn=str(raw.get('crn') or '').strip(),
        section=str(raw.get('section') or '').strip(),
        instructor=str(raw.get('instructor') or '').strip(),
        students=[_student(s, f"{ctx}.students") for s in _as_list(raw.get('students', []), ctx)],
    )


def load_dataset(src: TextOrPath) -> Tuple[List[Course], Dict[str, str]]:
    """Load normalised reference data: ``courses`` (or ``sections``) plus a ``directory``."""
    raw = _as_dict(_read_json(src), "root")
    directory = {str(k): str(v or '') for k, v in _as_dict(raw.get('directory') or {}, "directory").items()}
    if 'courses' in raw:
        courses = [_course(_as_dict(c, f"courses[{i}]"), f"courses[{i}]")
                   for i, c in enumerate(_as_list(raw['courses'], "courses"))]
    elif 'sections' in raw:
        sections = [_section(s, f"sections[{i}]") for i, s in enumerate(_as_list(raw['sections'], "sections"))]
        courses = group_sections(sections, directory)
    else:
        raise DatasetError("Dataset needs a 'courses' or 'sections' array")
    ids = [c.id for c in courses]
    dupes = sorted({cid for cid in ids if ids.count(cid) > 1})
    if dupes:
        raise DatasetError(f"Duplicate course ids: {dupes}")
    return courses, directory


def load_grid(src: TextOrPath) -> Grid:
    raw = _as_dict(_read_json(src), "grid")
    grid: Grid = {}
    for week_key, days in raw.items():
        try:
            week = int(week_key)
        except ValueError as e:
            raise DatasetError(f"Week key must be an integer, got {week_key!r}") from e
        grid[week] = {
            str(day): {str(slot_id): [str(cid) for cid in _as_list(ids, f"grid[{week}][{day}][{slot_id}]")]
                       for slot_id, ids in _as_dict(cells, f"grid[{week}][{day}]").items()}
            for day, cells in _as_dict(days, f"grid[{week}]").items()
        }
    return grid


def save_grid(path: str, grid: Grid) -> None:
    with open(path, 'w', encoding='utf-8') as f:
        json.dump({str(w): grid[w] for w in sorted(grid)}, f, indent=2)


def load_settings(src: TextOrPath) -> EngineSettings:
    raw = _as_dict(_read_json(src), "settings")
    settings = EngineSettings()
    for key in ('slot_interval_minutes', 'start_hour', 'end_hour', 'students_per_room',
                'invigilator_pool_size', 'week_count'):
        if key in raw:
            try:
                setattr(settings, key, int(raw[key]))
            except (TypeError, ValueError) as e:
                raise DatasetError(f"{key} must be an integer, got {raw[key]!r}") from e
    if raw.get('start_date'):
        try:
            settings.start_date = date.fromisoformat(str(raw['start_date']))
        except ValueError as e:
            raise DatasetError(f"start_date must be YYYY-MM-DD: {e}") from e
    return settings


def save_frames_csv(out_dir: str, frames: Dict[str, pd.DataFrame]) -> List[str]:
    """Write each frame to ``<out_dir>/<sheet name>.csv``; returns the written paths."""
    os.makedirs(out_dir, exist_ok=True)
    paths = []
    for name, df in frames.items():
        path = os.path.join(out_dir, f"{name.replace(' ', '_')}.csv")
        df.to_csv(path, index=False)
        paths.append(path)
    return paths
