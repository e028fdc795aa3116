from flask import current_app

from extensions import db
from models import Course, Module, Enrollment
from services.authorization import (
    Resource, TEACHER, ensure_access, ensure_authenticated, ensure_role
)
from services.result import ServiceResult, service_action
from utils.dates import isoformat
from utils.errors import NotFound, ValidationError


def load_course(course_id):
    course = db.session.get(Course, course_id) if course_id else None
    if course is None:
        raise NotFound("Course not found.")
    return course


def load_owned_course(principal, course_id, message):
    """Fetch a course and check the caller teaches it, before anything else is read."""
    ensure_role(principal, TEACHER, message=message)
    course = load_course(course_id)
    ensure_access(principal, Resource.course(course), message)
    return course


def load_module(course, module_id):
    module = Module.query.filter_by(module_id=module_id, course_id=course.course_id).first()
    if module is None:
        raise NotFound("Module not found or does not belong to this course.")
    return module


def serialize_course(course):
    return {
        "course_id": course.course_id,
        "course_name": course.course_name,
        "course_code": course.course_code,
        "teacher_id": course.teacher_id,
        "teacher_name": course.teacher_name,
        "created_at": isoformat(course.created_at),
    }


def serialize_module(module):
    return {
        "module_id": module.module_id,
        "course_id": module.course_id,
        "module_name": module.module_name,
        "total_marks": module.total_marks,
        "created_at": isoformat(module.created_at),
    }


@service_action("Failed to create course.")
def create_course(principal, course_name, course_code):
    ensure_authenticated(principal)
    ensure_role(principal, TEACHER, message="Only teachers can create courses.")

    course_name = (course_name or "").strip()
    course_code = (course_code or "").strip()
    if not course_name:
        raise ValidationError("Course name is required.")
    if not course_code:
        raise ValidationError("Course code is required.")

    course = Course(
        course_name=course_name,
        course_code=course_code,
        teacher_id=principal.user_id
    )
    db.session.add(course)
    db.session.commit()

    current_app.logger.info("Course %s created by teacher %s", course.course_id, principal.user_id)
    return ServiceResult.ok(course_id=course.course_id)


@service_action("Failed to fetch courses.")
def get_teacher_courses(principal):
    ensure_role(principal, TEACHER, message="Only teachers can view their courses.")

    courses = (
        Course.query
        .filter_by(teacher_id=principal.user_id)
        .order_by(Course.created_at.desc(), Course.course_id.desc())
        .all()
    )
    return ServiceResult.ok(courses=[serialize_course(c) for c in courses])


@service_action("Failed to fetch course.")
def get_course_by_id(principal, course_id):
    ensure_authenticated(principal)
    course = load_course(course_id)

    if principal.role == TEACHER:
        ensure_access(
            principal,
            Resource.course(course),
            "You do not have permission to view this course."
        )
    return ServiceResult.ok(course=serialize_course(course))


@service_action("Failed to create module.")
def create_module(principal, course_id, module_name, total_marks):
    course = load_owned_course(
        principal, course_id,
        "You do not have permission to add modules to this course."
    )

    module_name = (module_name or "").strip()
    if not module_name:
        raise ValidationError("Module name is required.")
    try:
        total_marks = float(total_marks)
    except (TypeError, ValueError):
        raise ValidationError("Total marks must be a number.")
    if total_marks <= 0:
        raise ValidationError("Total marks must be greater than 0.")

    module = Module(course_id=course.course_id, module_name=module_name, total_marks=total_marks)
    db.session.add(module)
    db.session.commit()
    return ServiceResult.ok(module=serialize_module(module))


@service_action("Failed to fetch modules.")
def get_modules_for_course(principal, course_id):
    ensure_authenticated(principal)
    course = load_course(course_id)

    if principal.role == TEACHER:
        ensure_access(
            principal,
            Resource.module(course),
            "You do not have permission to view modules for this course."
        )

    modules = (
        Module.query
        .filter_by(course_id=course.course_id)
        .order_by(Module.created_at.asc(), Module.module_id.asc())
        .all()
    )
    return ServiceResult.ok(modules=[serialize_module(m) for m in modules])


@service_action("Failed to fetch teacher statistics.")
def get_teacher_stats(principal, recent_limit=5):
    ensure_role(principal, TEACHER, message="Only teachers can view teacher statistics.")

    courses = (
        Course.query
        .filter_by(teacher_id=principal.user_id)
        .order_by(Course.created_at.desc(), Course.course_id.desc())
        .all()
    )
    course_ids = [c.course_id for c in courses]

    counts = {}
    students = set()
    if course_ids:
        rows = (
            db.session.query(Enrollment.course_id, Enrollment.student_id)
            .filter(Enrollment.course_id.in_(course_ids))
            .all()
        )
        for course_id, student_id in rows:
            counts[course_id] = counts.get(course_id, 0) + 1
            students.add(student_id)

    recent = [
        {
            "course_id": c.course_id,
            "course_name": c.course_name,
            "course_code": c.course_code,
            "student_count": counts.get(c.course_id, 0),
        }
        for c in courses[:recent_limit]
    ]

    return ServiceResult.ok(stats={
        "total_courses": len(courses),
        "total_students": len(students),
        "recent_courses": recent,
    })
