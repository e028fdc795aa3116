from flask import Blueprint, request

from services.announcements import get_student_announcements
from services.assignments import (
    get_student_course_assignments, get_assignment_by_id, get_upcoming_assignments_for_student
)
from services.attendance import get_student_attendance
from services.enrollments import (
    enroll_in_course, get_available_courses, get_student_enrollments,
    get_course_details_for_student, get_course_enrollment_count, is_student_enrolled
)
from services.gpa import calculate_student_gpa, calculate_course_gpa
from services.marks import get_student_marks
from services.submissions import submit_assignment, upload_submission_file, get_student_submission
from utils.decorators import current_principal, role_required
from utils.responses import respond

student_bp = Blueprint("student", __name__, url_prefix="/student")


@student_bp.route("/dashboard")
@role_required("student")
def dashboard():
    return respond(get_upcoming_assignments_for_student(current_principal(), limit=5))


# =========================================================
# COURSES & ENROLLMENT
# =========================================================
@student_bp.route("/courses")
@role_required("student")
def available_courses():
    return respond(get_available_courses(current_principal()))


@student_bp.route("/courses/<int:course_id>")
@role_required("student")
def course_detail(course_id):
    return respond(get_course_details_for_student(current_principal(), course_id))


@student_bp.route("/courses/<int:course_id>/enroll", methods=["POST"])
@role_required("student")
def enroll(course_id):
    return respond(enroll_in_course(current_principal(), course_id), status=201)


@student_bp.route("/courses/<int:course_id>/enrolled")
@role_required("student")
def enrolled(course_id):
    return respond(is_student_enrolled(current_principal(), course_id))


# No login required: exposes a count, never identities
@student_bp.route("/courses/<int:course_id>/enrollment-count")
def enrollment_count(course_id):
    return respond(get_course_enrollment_count(course_id))


@student_bp.route("/enrollments")
@role_required("student")
def enrollments():
    return respond(get_student_enrollments(current_principal()))


# =========================================================
# ASSIGNMENTS & SUBMISSIONS
# =========================================================
@student_bp.route("/courses/<int:course_id>/assignments")
@role_required("student")
def course_assignments(course_id):
    return respond(get_student_course_assignments(current_principal(), course_id))


@student_bp.route("/assignments/upcoming")
@role_required("student")
def upcoming_assignments():
    limit = request.args.get("limit", type=int)
    return respond(get_upcoming_assignments_for_student(current_principal(), limit=limit))


@student_bp.route("/assignments/<int:assignment_id>")
@role_required("student")
def assignment_detail(assignment_id):
    return respond(get_assignment_by_id(current_principal(), assignment_id))


@student_bp.route("/assignments/<int:assignment_id>/upload", methods=["POST"])
@role_required("student")
def upload(assignment_id):
    return respond(upload_submission_file(
        current_principal(), assignment_id, request.files.get("file")
    ), status=201)


@student_bp.route("/assignments/<int:assignment_id>/submission", methods=["GET", "POST"])
@role_required("student")
def submission(assignment_id):
    if request.method == "POST":
        data = request.get_json(silent=True) or {}
        return respond(submit_assignment(
            current_principal(),
            assignment_id,
            text_answer=data.get("text_answer"),
            file_path=data.get("file_path")
        ))
    return respond(get_student_submission(current_principal(), assignment_id))


# =========================================================
# MARKS, GPA & ATTENDANCE
# =========================================================
@student_bp.route("/marks")
@role_required("student")
def marks():
    course_id = request.args.get("course_id", type=int)
    return respond(get_student_marks(current_principal(), course_id=course_id))


@student_bp.route("/gpa")
@role_required("student")
def gpa():
    return respond(calculate_student_gpa(current_principal()))


@student_bp.route("/courses/<int:course_id>/gpa")
@role_required("student")
def course_gpa(course_id):
    return respond(calculate_course_gpa(current_principal(), course_id))


@student_bp.route("/attendance")
@role_required("student")
def attendance():
    course_id = request.args.get("course_id", type=int)
    return respond(get_student_attendance(current_principal(), course_id=course_id))


@student_bp.route("/announcements")
@role_required("student")
def announcements():
    return respond(get_student_announcements(current_principal()))
