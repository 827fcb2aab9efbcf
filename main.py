import argparse
import logging
import sys
from typing import List, Optional

from examgrid.export import build_week_export
from examgrid.grid import build_empty_assignments, place, reshape
from examgrid.io_utils import DatasetError, load_dataset, load_grid, load_settings, save_frames_csv, save_grid
from examgrid.models import DAYS, EngineSettings, SettingsError, course_lookup
from examgrid.scheduling.conflicts import compute_conflicts
from examgrid.scheduling.evaluation import summary
from examgrid.scheduling.slot_summary import compute_slot_summaries


def build_settings(args) -> EngineSettings:
    settings = load_settings(args.settings) if args.settings else EngineSettings()
    for key in ('slot_interval_minutes', 'start_hour', 'end_hour', 'students_per_room',
                'invigilator_pool_size', 'week_count'):
        value = getattr(args, key)
        if value is not None:
            setattr(settings, key, value)
    settings.validate()
    return settings


def print_week(grid, courses, slots, week, settings, report):
    summaries = compute_slot_summaries(grid, courses, week, slots, settings.students_per_room)
    print(f"== Week {week}")
    for day in DAYS:
        for index, slot in enumerate(slots):
            s = summaries[day][slot.id]
            if s.is_start_slot:
                ids = ", ".join(grid[week][day][slot.id])
                print(f"  {day:<9} {slot.label:>8}  {ids}  students={s.student_count} "
                      f"rooms={s.room_count} invigilators={s.invigilator_count}")
            elif index > 0 and summaries[day][slots[index - 1].id].is_start_slot:
                print(f"  {day:<9} {slot.label:>8}  (exam in progress)")
            for message in report.at(week, day, slot.id):
                print(f"      ! {message}")


def main(argv: Optional[List[str]] = None):
    p = argparse.ArgumentParser(description="ExamGrid – exam timetable conflict check and room/invigilator roster")
    # Inputs
    p.add_argument('--data', type=str, required=True, help='Dataset JSON with courses (or sections) and directory')
    p.add_argument('--grid', type=str, help='Assignment grid JSON (week -> day -> slot -> course ids)')
    p.add_argument('--settings', type=str, help='Optional settings JSON')
    p.add_argument('--place', nargs=4, action='append', metavar=('COURSE', 'WEEK', 'DAY', 'SLOT'), default=[],
                   help='Move a course to a cell before evaluating (repeatable)')

    # Settings overrides
    p.add_argument('--slot_interval_minutes', type=int, choices=[30, 60])
    p.add_argument('--start_hour', type=int)
    p.add_argument('--end_hour', type=int)
    p.add_argument('--students_per_room', type=int)
    p.add_argument('--invigilator_pool_size', type=int)
    p.add_argument('--week_count', type=int)

    # Output
    p.add_argument('--out_grid', type=str, help='Write the resulting grid JSON here')
    p.add_argument('--export_dir', type=str, help='Write per-week roster CSVs into this directory')
    p.add_argument('--verbose', action='store_true')
    args = p.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    try:
        settings = build_settings(args)
        course_list, directory = load_dataset(args.data)
        grid = load_grid(args.grid) if args.grid else build_empty_assignments(settings.weeks(), settings.time_slots())
    except FileNotFoundError as e:
        raise SystemExit(f"File not found: {e.filename}")
    except (DatasetError, SettingsError) as e:
        raise SystemExit(f"Could not load inputs: {e}")

    courses = course_lookup(course_list)
    slots = settings.time_slots()
    result = reshape(grid, slots)
    grid = result.grid
    for cid in result.dropped:
        print(f"[WARNING] {cid} was scheduled in a slot that no longer exists and has been unscheduled")

    for course_id, week, day, slot_id in args.place:
        if course_id not in courses:
            print(f"[WARNING] Unknown course {course_id}; placement skipped")
            continue
        if not week.isdigit():
            print(f"[WARNING] Week must be a number, got {week!r}; placement of {course_id} skipped")
            continue
        grid = place(grid, slots, course_id, int(week), day, slot_id)

    report = compute_conflicts(grid, courses, directory, slots, settings.students_per_room,
                               settings.invigilator_pool_size)
    for week in sorted(grid):
        print_week(grid, courses, slots, week, settings, report)
    print()
    print(summary(grid, courses, slots, settings, report))
    for message in report.overall:
        print(f"[CONFLICT] {message}")

    if args.out_grid:
        save_grid(args.out_grid, grid)
        print(f"Saved: {args.out_grid}")

    if args.export_dir:
        written = []
        for week in sorted(grid):
            export = build_week_export(week, grid, courses, directory, slots, settings)
            if export is None:
                continue
            written.extend(save_frames_csv(args.export_dir, export.to_frames()))
        if not written:
            print("No scheduled exams available to export.")
        else:
            print(f"Saved: {len(written)} file(s) in {args.export_dir}")
    return report


if __name__ == '__main__':
    main(sys.argv[1:])
