from conftest import principal
from models import Enrollment
from services import enrollments
from services.enrollments import (
    enroll_in_course, get_available_courses, get_course_details_for_student,
    get_course_enrollment_count, get_enrolled_students_for_course, get_student_enrollments
)


def test_enroll_then_enroll_again_conflicts(factory):
    course = factory.course(factory.teacher())
    student = factory.student()

    first = enroll_in_course(principal(student), course.course_id)
    second = enroll_in_course(principal(student), course.course_id)

    assert first.success
    assert second.kind == "conflict"
    assert second.error == "You are already enrolled in this course."
    assert Enrollment.query.filter_by(student_id=student.student_id).count() == 1


def test_racing_enrollment_maps_integrity_error(factory, monkeypatch):
    course = factory.course(factory.teacher())
    student = factory.student()
    factory.enroll(student, course)

    # Pretend the pre-check lost the race
    monkeypatch.setattr(enrollments, "find_enrollment", lambda student_id, course_id: None)
    result = enroll_in_course(principal(student), course.course_id)

    assert result.kind == "conflict"
    assert Enrollment.query.count() == 1


def test_only_students_enroll(factory):
    teacher = factory.teacher()
    course = factory.course(teacher)
    assert enroll_in_course(principal(teacher), course.course_id).kind == "forbidden"
    assert enroll_in_course(None, course.course_id).kind == "unauthenticated"


def test_enroll_in_missing_course(factory):
    student = factory.student()
    assert enroll_in_course(principal(student), 404).kind == "not_found"


def test_available_courses_flag_enrollment(factory):
    teacher = factory.teacher(full_name="Ms Frizzle")
    joined = factory.course(teacher, name="Biology")
    factory.course(teacher, name="Chemistry")
    student = factory.student()
    factory.enroll(student, joined)

    courses = get_available_courses(principal(student))["courses"]

    flags = {c["course_name"]: c["is_enrolled"] for c in courses}
    assert flags == {"Biology": True, "Chemistry": False}
    assert all(c["teacher_name"] == "Ms Frizzle" for c in courses)


def test_student_enrollments_and_details(factory):
    teacher = factory.teacher()
    course = factory.course(teacher)
    factory.module(course, name="Unit 1")
    student = factory.student()

    assert get_course_details_for_student(principal(student), course.course_id)["is_enrolled"] is False

    factory.enroll(student, course)
    listing = get_student_enrollments(principal(student))["enrollments"]
    assert [e["course_id"] for e in listing] == [course.course_id]

    details = get_course_details_for_student(principal(student), course.course_id)
    assert details.success
    assert [m["module_name"] for m in details["modules"]] == ["Unit 1"]


def test_enrolled_students_listing_is_teacher_only(factory):
    teacher = factory.teacher()
    course = factory.course(teacher)
    factory.enroll(factory.student(full_name="Zed"), course)
    factory.enroll(factory.student(full_name="amy"), course)

    result = get_enrolled_students_for_course(principal(teacher), course.course_id)
    assert [s["full_name"] for s in result["students"]] == ["amy", "Zed"]

    other = factory.teacher()
    assert get_enrolled_students_for_course(principal(other), course.course_id).kind == "forbidden"


def test_enrollment_count_is_public(factory):
    course = factory.course(factory.teacher())
    factory.enroll(factory.student(), course)
    factory.enroll(factory.student(), course)

    assert get_course_enrollment_count(course.course_id)["count"] == 2
    assert get_course_enrollment_count(999).kind == "not_found"

