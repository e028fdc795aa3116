from flask import Blueprint, request

from services.admin import get_users, set_user_active, get_course_overview
from utils.decorators import current_principal, role_required
from utils.responses import respond, error

admin_bp = Blueprint("admin", __name__, url_prefix="/admin")


@admin_bp.route("/users")
@role_required("admin")
def list_users():
    return respond(get_users(current_principal(), role=request.args.get("role")))


@admin_bp.route("/users/<int:user_id>/active", methods=["PATCH"])
@role_required("admin")
def update_user_active(user_id):
    data = request.get_json(silent=True) or {}
    if "is_active" not in data:
        return error("is_active is required", 400)
    return respond(set_user_active(current_principal(), user_id, data["is_active"]))


@admin_bp.route("/courses")
@role_required("admin")
def list_courses():
    return respond(get_course_overview(current_principal()))
