from flask import Blueprint, request

from services.announcements import get_parent_announcements
from services.attendance import get_child_attendance
from services.gpa import calculate_student_gpa
from services.marks import get_child_marks
from services.parents import get_parent_children, verify_child_access
from utils.decorators import current_principal, role_required
from utils.responses import respond

parent_bp = Blueprint("parent", __name__, url_prefix="/parent")


@parent_bp.route("/dashboard")
@parent_bp.route("/children")
@role_required("parent")
def children():
    return respond(get_parent_children(current_principal()))


@parent_bp.route("/children/<int:child_id>/access")
@role_required("parent")
def child_access(child_id):
    return respond(verify_child_access(current_principal(), child_id))


@parent_bp.route("/children/<int:child_id>/marks")
@role_required("parent")
def child_marks(child_id):
    course_id = request.args.get("course_id", type=int)
    return respond(get_child_marks(current_principal(), child_id, course_id=course_id))


@parent_bp.route("/children/<int:child_id>/attendance")
@role_required("parent")
def child_attendance(child_id):
    course_id = request.args.get("course_id", type=int)
    return respond(get_child_attendance(current_principal(), child_id, course_id=course_id))


@parent_bp.route("/children/<int:child_id>/gpa")
@role_required("parent")
def child_gpa(child_id):
    return respond(calculate_student_gpa(current_principal(), child_id))


@parent_bp.route("/announcements")
@role_required("parent")
def announcements():
    return respond(get_parent_announcements(current_principal()))
