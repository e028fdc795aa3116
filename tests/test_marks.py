from conftest import principal
from extensions import db
from models import Mark
import services.marks
from services.marks import (
    get_child_marks, get_course_statistics, get_marks_for_module,
    get_student_marks, pool_course_percentages, save_mark
)


def setup_module_with_students(factory, count=3, total_marks=100):
    teacher = factory.teacher()
    course = factory.course(teacher)
    module = factory.module(course, total_marks=total_marks)
    students = [factory.student(full_name=f"Student {n}") for n in range(count)]
    for student in students:
        factory.enroll(student, course)
    return teacher, course, module, students


def test_save_mark_rewrites_statistics_on_every_row(factory):
    teacher, course, module, students = setup_module_with_students(factory)
    actor = principal(teacher)

    for student, score in zip(students, [70, 80, 90]):
        result = save_mark(actor, module.module_id, student.student_id, score)
        assert result.success, result.error

    rows = Mark.query.filter_by(module_id=module.module_id).all()
    assert len(rows) == 3
    for row in rows:
        assert row.average == 80
        assert row.std_deviation == 8.16
        assert row.median_marks == 80
        assert row.min_marks == 70
        assert row.max_marks == 90


def test_save_mark_is_an_upsert(factory):
    teacher, course, module, students = setup_module_with_students(factory, count=1)
    actor = principal(teacher)
    student_id = students[0].student_id

    save_mark(actor, module.module_id, student_id, 40)
    save_mark(actor, module.module_id, student_id, 40)
    result = save_mark(actor, module.module_id, student_id, 55)

    assert result.success
    rows = Mark.query.filter_by(module_id=module.module_id, student_id=student_id).all()
    assert len(rows) == 1
    assert rows[0].obtained_marks == 55
    assert rows[0].average == 55


def test_save_mark_updates_a_row_inserted_by_a_concurrent_writer(factory, monkeypatch):
    teacher, course, module, students = setup_module_with_students(factory, count=1)
    actor = principal(teacher)
    student_id = students[0].student_id
    assert save_mark(actor, module.module_id, student_id, 40).success

    real_find_mark = services.marks.find_mark
    calls = []

    def stale_find_mark(student_id, module_id):
        calls.append(module_id)
        if len(calls) == 1:
            return None
        return real_find_mark(student_id, module_id)

    monkeypatch.setattr(services.marks, "find_mark", stale_find_mark)
    result = save_mark(actor, module.module_id, student_id, 55, feedback="Better")

    assert result.success, result.error
    assert len(calls) == 2
    rows = Mark.query.filter_by(module_id=module.module_id, student_id=student_id).all()
    assert len(rows) == 1
    assert rows[0].obtained_marks == 55
    assert rows[0].feedback == "Better"
    assert rows[0].average == 55


def test_save_mark_validation(factory):
    teacher, course, module, students = setup_module_with_students(factory, count=1, total_marks=50)
    actor = principal(teacher)
    student_id = students[0].student_id

    for bad in (-1, 51, "abc", None):
        result = save_mark(actor, module.module_id, student_id, bad)
        assert not result.success
        assert result.kind == "validation"
    assert Mark.query.count() == 0


def test_save_mark_requires_enrollment(factory):
    teacher, course, module, _ = setup_module_with_students(factory, count=0)
    stranger = factory.student()

    result = save_mark(principal(teacher), module.module_id, stranger.student_id, 10)

    assert result.kind == "validation"
    assert result.error == "Student is not enrolled in this course."


def test_save_mark_by_another_teacher_is_forbidden(factory):
    _, course, module, students = setup_module_with_students(factory, count=1)
    intruder = factory.teacher()

    result = save_mark(principal(intruder), module.module_id, students[0].student_id, 10)

    assert result.kind == "forbidden"
    assert Mark.query.count() == 0


def test_save_mark_unknown_module(factory):
    teacher = factory.teacher()
    result = save_mark(principal(teacher), 999, 1, 10)
    assert result.kind == "not_found"


def test_marks_for_module_include_live_statistics_and_remarks(factory):
    teacher, course, module, students = setup_module_with_students(factory)
    actor = principal(teacher)
    for student, score in zip(students, [70, 80, 90]):
        save_mark(actor, module.module_id, student.student_id, score)

    result = get_marks_for_module(actor, course.course_id, module.module_id)

    assert result.success
    stats = result["statistics"]
    assert stats["average"] == 80
    assert stats["student_count"] == 3
    assert stats["module_name"] == module.module_name
    remarks = {m["obtained_marks"]: m["remark"] for m in result["marks"]}
    assert remarks == {70: "below_average", 80: "average", 90: "excellent"}


def test_course_statistics_pool_raw_scores(factory):
    teacher, course, quiz, students = setup_module_with_students(factory, count=2, total_marks=10)
    exam = factory.module(course, name="Exam", total_marks=100)
    actor = principal(teacher)
    save_mark(actor, quiz.module_id, students[0].student_id, 10)
    save_mark(actor, exam.module_id, students[0].student_id, 50)

    result = get_course_statistics(actor, course.course_id)

    assert result["course"]["average"] == 30
    assert result["course"]["total_entries"] == 2
    quiz_stats = result["modules"][0]
    assert quiz_stats["statistics"]["average"] == 10

    as_percentages = get_course_statistics(actor, course.course_id, pool=pool_course_percentages)
    assert as_percentages["course"]["average"] == 75


def test_student_sees_own_marks_and_parent_sees_child(factory):
    teacher, course, module, _ = setup_module_with_students(factory, count=0)
    parent = factory.parent()
    child = factory.student(parent=parent)
    factory.enroll(child, course)
    save_mark(principal(teacher), module.module_id, child.student_id, 65)

    own = get_student_marks(principal(child))
    assert [m["obtained_marks"] for m in own["marks"]] == [65]
    assert own["marks"][0]["course_code"] == course.course_code

    via_parent = get_child_marks(principal(parent), child.student_id)
    assert via_parent["marks"] == own["marks"]

    other_parent = factory.parent()
    denied = get_child_marks(principal(other_parent), child.student_id)
    assert denied.kind == "forbidden"


def test_store_failure_is_reported_and_rolled_back(factory, monkeypatch):
    from sqlalchemy.exc import OperationalError

    teacher, course, module, students = setup_module_with_students(factory, count=1)

    def broken_commit():
        raise OperationalError("COMMIT", {}, Exception("database is gone"))

    monkeypatch.setattr(db.session, "commit", broken_commit)
    result = save_mark(principal(teacher), module.module_id, students[0].student_id, 10)

    assert result.kind == "store_failure"
    assert result.error == "Failed to save mark."


def test_feedback_reaches_teacher_student_and_parent_views(factory):
    teacher, course, module, _ = setup_module_with_students(factory, count=0)
    parent = factory.parent()
    child = factory.student(parent=parent)
    factory.enroll(child, course)
    actor = principal(teacher)

    save_mark(actor, module.module_id, child.student_id, 72, feedback="  Good effort on part B.  ")

    teacher_view = get_marks_for_module(actor, course.course_id, module.module_id)
    assert teacher_view["marks"][0]["feedback"] == "Good effort on part B."
    assert get_student_marks(principal(child))["marks"][0]["feedback"] == "Good effort on part B."
    assert get_child_marks(principal(parent), child.student_id)["marks"][0]["feedback"] == "Good effort on part B."

    save_mark(actor, module.module_id, child.student_id, 74, feedback="   ")
    assert Mark.query.filter_by(student_id=child.student_id).one().feedback is None
