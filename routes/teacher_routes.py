from flask import Blueprint, request, send_file

from services.announcements import create_announcement, get_teacher_announcements
from services.assignments import (
    create_assignment, get_course_assignments, update_assignment_file, upload_assignment_file
)
from services.attendance import save_attendance, get_attendance_for_date, get_attendance_history
from services.courses import (
    create_course, get_teacher_courses, get_course_by_id,
    create_module, get_modules_for_course, get_teacher_stats
)
from services.enrollments import get_enrolled_students_for_course
from services.gpa import calculate_course_gpa, calculate_student_gpa
from services.marks import save_mark, get_marks_for_module, get_marks_for_course, get_course_statistics
from services.reports import build_gradebook, gradebook_pdf, gradebook_excel, gradebook_filename
from services.submissions import get_assignment_submissions, grade_submission
from utils.decorators import current_principal, role_required
from utils.responses import respond, error

teacher_bp = Blueprint("teacher", __name__, url_prefix="/teacher")


@teacher_bp.route("/dashboard")
@role_required("teacher")
def dashboard():
    return respond(get_teacher_stats(current_principal()))


# =========================================================
# COURSES & MODULES
# =========================================================
@teacher_bp.route("/courses", methods=["GET", "POST"])
@role_required("teacher")
def courses():
    if request.method == "POST":
        data = request.get_json(silent=True) or {}
        result = create_course(current_principal(), data.get("course_name"), data.get("course_code"))
        return respond(result, status=201)
    return respond(get_teacher_courses(current_principal()))


@teacher_bp.route("/courses/<int:course_id>")
@role_required("teacher")
def course_detail(course_id):
    return respond(get_course_by_id(current_principal(), course_id))


@teacher_bp.route("/courses/<int:course_id>/modules", methods=["GET", "POST"])
@role_required("teacher")
def modules(course_id):
    if request.method == "POST":
        data = request.get_json(silent=True) or {}
        result = create_module(
            current_principal(), course_id, data.get("module_name"), data.get("total_marks")
        )
        return respond(result, status=201)
    return respond(get_modules_for_course(current_principal(), course_id))


@teacher_bp.route("/courses/<int:course_id>/students")
@role_required("teacher")
def enrolled_students(course_id):
    return respond(get_enrolled_students_for_course(current_principal(), course_id))


# =========================================================
# MARKS, STATISTICS & GPA
# =========================================================
@teacher_bp.route("/marks", methods=["POST"])
@role_required("teacher")
def enter_mark():
    data = request.get_json(silent=True) or {}
    return respond(save_mark(
        current_principal(),
        data.get("module_id"),
        data.get("student_id"),
        data.get("obtained_marks"),
        feedback=data.get("feedback")
    ))


@teacher_bp.route("/courses/<int:course_id>/marks")
@role_required("teacher")
def course_marks(course_id):
    module_id = request.args.get("module_id", type=int)
    return respond(get_marks_for_course(current_principal(), course_id, module_id=module_id))


@teacher_bp.route("/courses/<int:course_id>/modules/<int:module_id>/marks")
@role_required("teacher")
def module_marks(course_id, module_id):
    return respond(get_marks_for_module(current_principal(), course_id, module_id))


@teacher_bp.route("/courses/<int:course_id>/statistics")
@role_required("teacher")
def course_statistics(course_id):
    return respond(get_course_statistics(current_principal(), course_id))


@teacher_bp.route("/students/<int:student_id>/gpa")
@role_required("teacher")
def student_gpa(student_id):
    return respond(calculate_student_gpa(current_principal(), student_id))


@teacher_bp.route("/courses/<int:course_id>/students/<int:student_id>/gpa")
@role_required("teacher")
def student_course_gpa(course_id, student_id):
    return respond(calculate_course_gpa(current_principal(), course_id, student_id))


@teacher_bp.route("/courses/<int:course_id>/gradebook")
@role_required("teacher")
def gradebook(course_id):
    result = build_gradebook(current_principal(), course_id)
    fmt = request.args.get("format", "json").lower()
    if not result.success or fmt == "json":
        return respond(result)

    book = result["gradebook"]
    if fmt == "pdf":
        return send_file(
            gradebook_pdf(book),
            as_attachment=True,
            download_name=gradebook_filename(book, "pdf"),
            mimetype="application/pdf"
        )
    if fmt == "xlsx":
        return send_file(
            gradebook_excel(book),
            as_attachment=True,
            download_name=gradebook_filename(book, "xlsx"),
            mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
    return error("Unsupported format. Use json, pdf or xlsx.", 400)


# =========================================================
# ATTENDANCE
# =========================================================
@teacher_bp.route("/courses/<int:course_id>/attendance", methods=["GET", "POST"])
@role_required("teacher")
def attendance(course_id):
    if request.method == "POST":
        data = request.get_json(silent=True) or {}
        return respond(save_attendance(
            current_principal(), course_id, data.get("date"), data.get("records")
        ))

    date = request.args.get("date")
    if not date:
        return error("date is required", 400)
    return respond(get_attendance_for_date(current_principal(), course_id, date))


@teacher_bp.route("/courses/<int:course_id>/attendance/history")
@role_required("teacher")
def attendance_history(course_id):
    return respond(get_attendance_history(current_principal(), course_id))


# =========================================================
# ASSIGNMENTS & SUBMISSIONS
# =========================================================
@teacher_bp.route("/courses/<int:course_id>/assignments", methods=["GET", "POST"])
@role_required("teacher")
def assignments(course_id):
    if request.method == "POST":
        data = request.get_json(silent=True) or {}
        result = create_assignment(
            current_principal(),
            course_id,
            data.get("title"),
            data.get("deadline"),
            description=data.get("description"),
            file_path=data.get("file_path")
        )
        return respond(result, status=201)
    return respond(get_course_assignments(current_principal(), course_id))


@teacher_bp.route("/assignments/<int:assignment_id>/file", methods=["POST", "PUT"])
@role_required("teacher")
def assignment_file(assignment_id):
    # PUT points the assignment at an already stored file, or clears it
    if request.method == "PUT":
        data = request.get_json(silent=True) or {}
        return respond(update_assignment_file(current_principal(), assignment_id, data.get("file_path")))
    return respond(upload_assignment_file(
        current_principal(), assignment_id, request.files.get("file")
    ))


@teacher_bp.route("/assignments/<int:assignment_id>/submissions")
@role_required("teacher")
def submissions(assignment_id):
    return respond(get_assignment_submissions(current_principal(), assignment_id))


@teacher_bp.route("/submissions/<int:submission_id>/grade", methods=["POST"])
@role_required("teacher")
def grade(submission_id):
    data = request.get_json(silent=True) or {}
    return respond(grade_submission(
        current_principal(), submission_id, data.get("marks"), feedback=data.get("feedback")
    ))


# =========================================================
# ANNOUNCEMENTS
# =========================================================
@teacher_bp.route("/announcements", methods=["GET", "POST"])
@role_required("teacher")
def announcements():
    if request.method == "POST":
        data = request.get_json(silent=True) or {}
        result = create_announcement(
            current_principal(),
            data.get("title"),
            data.get("content"),
            data.get("audience"),
            course_id=data.get("course_id"),
            is_all_students=bool(data.get("is_all_students"))
        )
        return respond(result, status=201)
    return respond(get_teacher_announcements(current_principal()))
