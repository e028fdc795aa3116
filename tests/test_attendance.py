import pytest

from conftest import principal
from models import Attendance
from services.attendance import (
    get_attendance_for_date, get_attendance_history, get_child_attendance,
    get_student_attendance, save_attendance, summarize_attendance
)


@pytest.fixture
def classroom(factory):
    teacher = factory.teacher()
    course = factory.course(teacher)
    parent = factory.parent()
    students = [factory.student(full_name=f"Pupil {n}", parent=parent if n == 0 else None) for n in range(3)]
    for student in students:
        factory.enroll(student, course)
    return teacher, course, students, parent


def records(students, *statuses):
    return [{"student_id": s.student_id, "status": st} for s, st in zip(students, statuses)]


def test_saving_a_day_replaces_the_whole_sheet(classroom):
    teacher, course, students, _ = classroom
    actor = principal(teacher)

    first = save_attendance(actor, course.course_id, "2024-01-10", records(students, "present", "absent", "late"))
    second = save_attendance(actor, course.course_id, "2024-01-10", records(students[:2], "absent", "present"))

    assert first["saved"] == 3
    assert second["saved"] == 2
    rows = Attendance.query.filter_by(course_id=course.course_id).all()
    assert len(rows) == 2
    assert {r.student_id: r.status for r in rows} == {
        students[0].student_id: "absent",
        students[1].student_id: "present",
    }


def test_other_days_are_untouched(classroom):
    teacher, course, students, _ = classroom
    actor = principal(teacher)
    save_attendance(actor, course.course_id, "2024-01-09", records(students, "present", "present", "present"))
    save_attendance(actor, course.course_id, "2024-01-10", records(students[:1], "absent"))

    history = get_attendance_history(actor, course.course_id)["history"]

    assert history == [{"date": "2024-01-10", "count": 1}, {"date": "2024-01-09", "count": 3}]


@pytest.mark.parametrize("bad_records", [
    [],
    [{"student_id": 1, "status": "sleeping"}],
    [{"student_id": None, "status": "present"}],
    ["oops"],
    [7, {"student_id": 1, "status": "present"}],
    "present",
])
def test_invalid_records_are_rejected(classroom, bad_records):
    teacher, course, _, _ = classroom
    result = save_attendance(principal(teacher), course.course_id, "2024-01-10", bad_records)
    assert result.kind == "validation"


def test_duplicate_student_in_one_sheet(classroom):
    teacher, course, students, _ = classroom
    sheet = records(students[:1], "present") + records(students[:1], "absent")
    assert save_attendance(principal(teacher), course.course_id, "2024-01-10", sheet).kind == "validation"


def test_failed_save_keeps_previous_sheet(classroom, factory):
    teacher, course, students, _ = classroom
    actor = principal(teacher)
    save_attendance(actor, course.course_id, "2024-01-10", records(students, "present", "present", "present"))

    stranger = factory.student()
    result = save_attendance(actor, course.course_id, "2024-01-10", records([stranger], "present"))

    assert result.kind == "validation"
    assert Attendance.query.filter_by(course_id=course.course_id).count() == 3


@pytest.mark.parametrize("bad_date", ["10/01/2024", "2024-01-10-not-a-date", "2024-13-01", "2024-01-10 oops"])
def test_bad_date(classroom, bad_date):
    teacher, course, students, _ = classroom
    result = save_attendance(principal(teacher), course.course_id, bad_date, records(students, "present"))
    assert result.kind == "validation"
    assert Attendance.query.filter_by(course_id=course.course_id).count() == 0


def test_only_the_course_teacher_marks_attendance(classroom, factory):
    _, course, students, _ = classroom
    intruder = factory.teacher()
    result = save_attendance(principal(intruder), course.course_id, "2024-01-10", records(students, "present"))
    assert result.kind == "forbidden"
    assert save_attendance(principal(students[0]), course.course_id, "2024-01-10", []).kind == "forbidden"


def test_attendance_for_date_sorted_by_name(classroom):
    teacher, course, students, _ = classroom
    actor = principal(teacher)
    save_attendance(actor, course.course_id, "2024-01-10", records(reversed(students), "late", "late", "late"))

    sheet = get_attendance_for_date(actor, course.course_id, "2024-01-10")["attendance"]

    assert [row["student_name"] for row in sheet] == ["Pupil 0", "Pupil 1", "Pupil 2"]


def test_student_and_parent_summaries(classroom):
    teacher, course, students, parent = classroom
    actor = principal(teacher)
    child = students[0]
    for day, status in [("2024-01-08", "present"), ("2024-01-09", "late"), ("2024-01-10", "absent"),
                        ("2024-01-11", "present")]:
        save_attendance(actor, course.course_id, day, records([child], status))

    own = get_student_attendance(principal(child))
    summary = own["summary"]
    assert summary["present"] == 2
    assert summary["late"] == 1
    assert summary["absent"] == 1
    assert summary["total"] == 4
    assert summary["attendance_percentage"] == 75.0
    assert own["by_course"][course.course_id]["total"] == 4
    assert own["attendance"][0]["date"] == "2024-01-11"

    assert get_child_attendance(principal(parent), child.student_id)["summary"] == summary
    assert get_child_attendance(principal(parent), students[1].student_id).kind == "forbidden"


def test_empty_summary():
    summary = summarize_attendance([])
    assert summary["total"] == 0
    assert summary["attendance_percentage"] == 0
