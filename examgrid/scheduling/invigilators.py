from typing import Dict, List, Optional, Set, Tuple

from ..models import DEFAULT_INVIGILATOR_POOL_SIZE, InvigilatorAssignment, InvigilatorCandidate


def generate_invigilator_placeholders(count: int = DEFAULT_INVIGILATOR_POOL_SIZE) -> List[str]:
    return [f"Invigilator {i + 1:02d}" for i in range(max(0, count))]


def _select_primary(pool: List[InvigilatorCandidate], room_name: str,
                    excluded: Set[str]) -> Optional[InvigilatorCandidate]:
    eligible = [c for c in pool if c.name not in excluded]
    if not eligible:
        return None
    return min(eligible, key=lambda c: (c.primary_count, c.room_usage.get(room_name, 0), c.order))


def _select_backup(pool: List[InvigilatorCandidate], excluded: Set[str]) -> Optional[InvigilatorCandidate]:
    eligible = [c for c in pool if c.name not in excluded]
    if not eligible:
        return None
    return min(eligible, key=lambda c: (c.backup_count, c.primary_count, c.order))


def assign_invigilators(room_names: List[str], placeholders: List[str]
                        ) -> Tuple[List[InvigilatorAssignment], List[InvigilatorCandidate]]:
    """Give every room row two primaries and one backup, balancing load.

    Primaries go to the least used candidates, preferring people who have not
    yet covered the same room; backups come from a separate counter. The two
    pools share names but not counters. Returns the assignments aligned with
    ``room_names`` and the backup pool, whose counters hold the final tallies.
    """
    primary_pool = [InvigilatorCandidate(name=n, order=i) for i, n in enumerate(placeholders)]
    backup_pool = [InvigilatorCandidate(name=n, order=i) for i, n in enumerate(placeholders)]
    backup_by_name: Dict[str, InvigilatorCandidate] = {c.name: c for c in backup_pool}

    assignments: List[InvigilatorAssignment] = []
    for room_name in room_names:
        room_name = room_name or ""
        chosen: List[str] = []
        for _ in range(2):
            pick = _select_primary(primary_pool, room_name, set(chosen))
            if pick is None:
                chosen.append("")
                continue
            pick.primary_count += 1
            pick.room_usage[room_name] = pick.room_usage.get(room_name, 0) + 1
            mirror = backup_by_name[pick.name]
            mirror.primary_count += 1
            mirror.room_usage[room_name] = pick.room_usage[room_name]
            chosen.append(pick.name)

        backup = _select_backup(backup_pool, {n for n in chosen if n})
        if backup is not None:
            backup.backup_count += 1

        assignments.append(InvigilatorAssignment(
            primary_one=chosen[0],
            primary_two=chosen[1],
            backup=backup.name if backup else "",
            room_name=room_name,
        ))
    return assignments, backup_pool
