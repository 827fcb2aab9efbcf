"""Tests for sequential room packing."""
from examgrid.models import Course, CrnDetail, Student, course_lookup
from examgrid.scheduling.room_assignment import course_entries, pack_rooms, room_label


def test_rooms_are_filled_before_opening_new_ones(make_course) -> None:
    courses = course_lookup([
        make_course("SMALL", [f"B{i:02d}" for i in range(10)]),
        make_course("LARGE", [f"A{i:02d}" for i in range(30)]),
    ])
    rooms = pack_rooms(["SMALL", "LARGE"], courses, {}, 25)

    assert [r.room_name for r in rooms] == ["Room 1", "Room 2"]
    assert [len(r.students) for r in rooms] == [25, 15]
    # largest enrollment goes first
    assert {e.course_id for e in rooms[0].students} == {"LARGE"}
    # the second room mixes the tail of LARGE with all of SMALL
    assert rooms[1].course_codes == ["LARGE", "SMALL"]


def test_no_room_overfilled(make_course) -> None:
    courses = course_lookup([make_course(f"C{i}", [f"C{i}-S{j}" for j in range(i * 9)]) for i in range(1, 6)])
    rooms = pack_rooms(list(courses), courses, {}, 20)
    sizes = [len(r.students) for r in rooms]
    assert all(size <= 20 for size in sizes)
    assert all(size == 20 for size in sizes[:-1])
    assert sum(sizes) == sum(len(c.students) for c in courses.values())


def test_students_sorted_by_name_then_id() -> None:
    course = Course(id="C", code="C", students=[
        Student(id="3", name="bob"), Student(id="2", name="Alice"), Student(id="1", name="bob"),
    ])
    assert [e.id for e in course_entries(course, {})] == ["2", "1", "3"]


def test_crn_groups_keep_first_seen_student() -> None:
    course = Course(
        id="MATH", code="MATH", title=" Calculus ", instructors=["Dr Fallback"],
        students=[Student(id="S1"), Student(id="S2")],
        crn_details=[
            CrnDetail(crn="111", instructor="Dr One", students=[Student(id="S1", name="Ann")]),
            CrnDetail(crn="222", instructor="", students=[Student(id="S1", name="Ann"), Student(id="S2")]),
        ],
    )
    entries = course_entries(course, {"S2": "Ben Directory"})
    assert [(e.id, e.crn, e.instructor, e.name) for e in entries] == [
        ("S1", "111", "Dr One", "Ann"),
        ("S2", "222", "Dr Fallback", "Ben Directory"),
    ]
    assert entries[0].course_title == "Calculus"


def test_course_without_crn_details_is_one_group(make_course) -> None:
    course = make_course("X", ["S1", " ", "S2"])
    entries = course_entries(course, {})
    assert [e.id for e in entries] == ["S1", "S2"]
    assert all(e.crn == "X" for e in entries)
    assert entries[0].name == "S1"


def test_unknown_and_empty_courses(make_course) -> None:
    courses = course_lookup([make_course("EMPTY", [])])
    assert pack_rooms(["EMPTY", "MISSING"], courses, {}, 25) == []


def test_room_label() -> None:
    courses = course_lookup([
        Course(id="B", code="B-1", title="Beta", instructors=["Zoe"],
               crn_details=[CrnDetail(crn="9", students=[Student(id="S1")])],
               students=[Student(id="S1")]),
        Course(id="A", code="A-1", title="Alpha", instructors=["Yan"],
               crn_details=[CrnDetail(crn="8", instructor="Yan", students=[Student(id="S2")])],
               students=[Student(id="S2")]),
    ])
    (room,) = pack_rooms(["B", "A"], courses, {}, 25)
    assert room_label(room) == {
        "crn": "8, 9",
        "course_code": "A-1, B-1",
        "course_title": "Alpha; Beta",
        "instructor": "Yan, Zoe",
    }
