import pytest

from examgrid.models import Course, Student, build_time_slots


@pytest.fixture
def slots():
    # 09:00 .. 11:30 in 30 minute steps
    return build_time_slots(9, 12, 30)


@pytest.fixture
def make_course():
    def _make(cid, student_ids, code=None, title="", names=None):
        names = names or {}
        students = [Student(id=sid, name=names.get(sid, "")) for sid in student_ids]
        return Course(id=cid, code=cid if code is None else code, title=title, students=students)
    return _make
