from flask import current_app

from extensions import db
from models import Assignment, Course
from services.authorization import (
    Resource, STUDENT, TEACHER, ensure_access, ensure_authenticated, ensure_role
)
from services.courses import load_course, load_owned_course
from services.enrollments import enrolled_course_ids, ensure_enrolled
from services.grading import deadline_status
from services.result import ServiceResult, service_action
from services.storage import (
    ASSIGNMENTS_BUCKET, assignment_object_path, get_object_store
)
from utils.dates import isoformat, parse_datetime, utcnow
from utils.errors import Forbidden, NotFound, ValidationError


def load_assignment(assignment_id):
    assignment = db.session.get(Assignment, assignment_id) if assignment_id else None
    if assignment is None:
        raise NotFound("Assignment not found.")
    return assignment


def load_owned_assignment(principal, assignment_id, message):
    ensure_role(principal, TEACHER, message=message)
    assignment = load_assignment(assignment_id)
    ensure_access(principal, Resource.assignment(assignment.course), message)
    return assignment


def serialize_assignment(assignment, now=None):
    now = now or utcnow()
    course = assignment.course
    return {
        "assignment_id": assignment.assignment_id,
        "course_id": assignment.course_id,
        "teacher_id": assignment.teacher_id,
        "title": assignment.title,
        "description": assignment.description,
        "deadline": isoformat(assignment.deadline),
        "file_path": assignment.file_path,
        "created_at": isoformat(assignment.created_at),
        "course_name": course.course_name if course else None,
        "course_code": course.course_code if course else None,
        "deadline_status": deadline_status(
            assignment.deadline, now, current_app.config.get("DUE_SOON_DAYS", 3)
        ),
    }


@service_action("Failed to create assignment.")
def create_assignment(principal, course_id, title, deadline, description=None, file_path=None):
    ensure_role(principal, TEACHER, message="Only teachers can create assignments.")

    title = (title or "").strip()
    if not title:
        raise ValidationError("Assignment title is required.")
    if not deadline:
        raise ValidationError("Deadline is required.")
    parsed_deadline = parse_datetime(deadline)
    if parsed_deadline is None:
        raise ValidationError("Deadline must be an ISO-8601 timestamp.")

    course = load_owned_course(
        principal, course_id,
        "You do not have permission to create assignments for this course."
    )

    assignment = Assignment(
        course_id=course.course_id,
        teacher_id=principal.user_id,
        title=title,
        description=(description or "").strip() or None,
        deadline=parsed_deadline,
        file_path=file_path or None
    )
    db.session.add(assignment)
    db.session.commit()

    current_app.logger.info("Assignment %s created in course %s", assignment.assignment_id, course.course_id)
    return ServiceResult.ok(assignment=serialize_assignment(assignment))


@service_action("Failed to update assignment file.")
def update_assignment_file(principal, assignment_id, file_path):
    assignment = load_owned_assignment(
        principal, assignment_id,
        "You do not have permission to update this assignment."
    )
    file_path = (file_path or "").strip() or None
    if file_path and not get_object_store().exists(ASSIGNMENTS_BUCKET, file_path):
        raise NotFound("File not found.")

    assignment.file_path = file_path
    db.session.commit()
    return ServiceResult.ok(assignment=serialize_assignment(assignment))


@service_action("Failed to upload assignment file.")
def upload_assignment_file(principal, assignment_id, upload):
    assignment = load_owned_assignment(
        principal, assignment_id,
        "You do not have permission to update this assignment."
    )
    if upload is None or not upload.filename:
        raise ValidationError("A file is required.")

    path = assignment_object_path(assignment.course_id, upload.filename)
    get_object_store().put(ASSIGNMENTS_BUCKET, path, upload.stream)

    assignment.file_path = path
    db.session.commit()
    return ServiceResult.ok(file_path=path, assignment=serialize_assignment(assignment))


@service_action("Failed to fetch assignments.")
def get_course_assignments(principal, course_id):
    course = load_owned_course(
        principal, course_id,
        "You do not have permission to view assignments for this course."
    )

    assignments = (
        Assignment.query
        .filter_by(course_id=course.course_id)
        .order_by(Assignment.deadline.asc(), Assignment.assignment_id.asc())
        .all()
    )
    now = utcnow()
    return ServiceResult.ok(assignments=[serialize_assignment(a, now) for a in assignments])


@service_action("Failed to fetch assignments.")
def get_student_course_assignments(principal, course_id):
    ensure_role(principal, STUDENT, message="Only students can view course assignments.")
    course = load_course(course_id)
    ensure_enrolled(principal, course.course_id)

    assignments = (
        Assignment.query
        .filter_by(course_id=course.course_id)
        .order_by(Assignment.deadline.asc(), Assignment.assignment_id.asc())
        .all()
    )
    now = utcnow()
    return ServiceResult.ok(assignments=[serialize_assignment(a, now) for a in assignments])


@service_action("Failed to fetch assignment.")
def get_assignment_by_id(principal, assignment_id):
    ensure_authenticated(principal)
    assignment = load_assignment(assignment_id)

    if principal.role == TEACHER:
        ensure_access(
            principal,
            Resource.assignment(assignment.course),
            "You do not have permission to view this assignment."
        )
    elif principal.role == STUDENT:
        ensure_enrolled(principal, assignment.course_id)
    else:
        raise Forbidden("You do not have permission to view assignments.")

    return ServiceResult.ok(assignment=serialize_assignment(assignment))


@service_action("Failed to fetch assignments.")
def get_upcoming_assignments_for_student(principal, limit=None):
    ensure_role(principal, STUDENT, message="Only students can view upcoming assignments.")

    course_ids = enrolled_course_ids([principal.user_id])
    if not course_ids:
        return ServiceResult.ok(assignments=[])

    now = utcnow()
    query = (
        Assignment.query
        .join(Course, Assignment.course_id == Course.course_id)
        .filter(Assignment.course_id.in_(course_ids), Assignment.deadline >= now)
        .order_by(Assignment.deadline.asc(), Assignment.assignment_id.asc())
    )
    if limit:
        query = query.limit(limit)

    return ServiceResult.ok(assignments=[serialize_assignment(a, now) for a in query.all()])
