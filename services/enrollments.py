from flask import current_app
from sqlalchemy.exc import IntegrityError

from extensions import db
from models import Course, Enrollment, Module, Student
from services.authorization import (
    Resource, STUDENT, ensure_access, ensure_authenticated, ensure_role
)
from services.courses import load_course, load_owned_course, serialize_course, serialize_module
from services.result import ServiceResult, service_action
from utils.dates import isoformat
from utils.errors import Conflict, ValidationError

ALREADY_ENROLLED = "You are already enrolled in this course."


def find_enrollment(student_id, course_id):
    return Enrollment.query.filter_by(student_id=student_id, course_id=course_id).first()


def enrolled_course_ids(student_ids):
    """Course ids any of ``student_ids`` is enrolled in."""
    if not student_ids:
        return set()
    rows = (
        db.session.query(Enrollment.course_id)
        .filter(Enrollment.student_id.in_(list(student_ids)))
        .distinct()
        .all()
    )
    return {course_id for (course_id,) in rows}


def course_with_teacher(course):
    data = serialize_course(course)
    # A missing teacher join is not worth failing the listing for
    data["teacher_name"] = data.get("teacher_name") or "TBA"
    return data


@service_action("Failed to check enrollment.")
def is_student_enrolled(principal, course_id):
    ensure_role(principal, STUDENT, message="Only students can check enrollment.")
    return ServiceResult.ok(enrolled=find_enrollment(principal.user_id, course_id) is not None)


@service_action("Failed to enroll in course.")
def enroll_in_course(principal, course_id):
    ensure_authenticated(principal)
    ensure_role(principal, STUDENT, message="Only students can enroll in courses.")
    if not course_id:
        raise ValidationError("Course ID is required.")

    # Pre-check only; the unique constraint below is the real guard
    if find_enrollment(principal.user_id, course_id) is not None:
        raise Conflict(ALREADY_ENROLLED)

    course = load_course(course_id)

    enrollment = Enrollment(student_id=principal.user_id, course_id=course.course_id)
    db.session.add(enrollment)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict(ALREADY_ENROLLED)

    current_app.logger.info("Student %s enrolled in course %s", principal.user_id, course.course_id)
    return ServiceResult.ok(enrollment_id=enrollment.enrollment_id)


@service_action("Failed to fetch courses.")
def get_available_courses(principal):
    ensure_authenticated(principal)

    courses = Course.query.order_by(Course.created_at.desc(), Course.course_id.desc()).all()

    enrolled = set()
    if principal.role == STUDENT:
        enrolled = enrolled_course_ids([principal.user_id])

    listing = []
    for course in courses:
        data = course_with_teacher(course)
        if principal.role == STUDENT:
            data["is_enrolled"] = course.course_id in enrolled
        listing.append(data)
    return ServiceResult.ok(courses=listing)


@service_action("Failed to fetch enrollments.")
def get_student_enrollments(principal):
    ensure_role(principal, STUDENT, message="Only students can view their enrollments.")

    rows = (
        db.session.query(Enrollment, Course)
        .join(Course, Enrollment.course_id == Course.course_id)
        .filter(Enrollment.student_id == principal.user_id)
        .order_by(Enrollment.enrolled_at.desc(), Enrollment.enrollment_id.desc())
        .all()
    )

    enrollments = []
    for enrollment, course in rows:
        data = course_with_teacher(course)
        data["enrollment_id"] = enrollment.enrollment_id
        data["enrolled_at"] = isoformat(enrollment.enrolled_at)
        enrollments.append(data)
    return ServiceResult.ok(enrollments=enrollments)


@service_action("Failed to fetch course details.")
def get_course_details_for_student(principal, course_id):
    ensure_authenticated(principal)
    course = load_course(course_id)

    modules = (
        Module.query
        .filter_by(course_id=course.course_id)
        .order_by(Module.created_at.asc(), Module.module_id.asc())
        .all()
    )

    is_enrolled = False
    if principal.role == STUDENT:
        is_enrolled = find_enrollment(principal.user_id, course.course_id) is not None

    return ServiceResult.ok(
        course=course_with_teacher(course),
        modules=[serialize_module(m) for m in modules],
        is_enrolled=is_enrolled
    )


@service_action("Failed to fetch enrolled students.")
def get_enrolled_students_for_course(principal, course_id):
    course = load_owned_course(
        principal, course_id,
        "You do not have permission to view students for this course."
    )

    students = (
        Student.query
        .join(Enrollment, Enrollment.student_id == Student.student_id)
        .filter(Enrollment.course_id == course.course_id)
        .all()
    )

    listing = [
        {
            "student_id": s.student_id,
            "full_name": s.full_name or "Unknown",
            "registration_number": s.registration_number,
            "class_name": s.class_name,
            "section": s.section,
        }
        for s in students
    ]
    listing.sort(key=lambda s: s["full_name"].casefold())
    return ServiceResult.ok(students=listing)


@service_action("Failed to count enrollments.")
def get_course_enrollment_count(course_id):
    """Public: anyone may see how many students a course has, never who."""
    course = load_course(course_id)
    count = Enrollment.query.filter_by(course_id=course.course_id).count()
    return ServiceResult.ok(count=count)


def ensure_enrolled(principal, course_id, message="You are not enrolled in this course."):
    """Student-side membership check used by assignment and submission flows."""
    enrollment = find_enrollment(principal.user_id, course_id)
    student_id = enrollment.student_id if enrollment else None
    ensure_access(principal, Resource.enrollment(student_id), message)
    return enrollment
