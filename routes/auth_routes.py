from flask import Blueprint, request, jsonify, session
from flask_login import login_user, logout_user, login_required

from services.auth_service import authenticate_user, register_user, get_profile
from utils.decorators import current_principal
from utils.responses import respond, error

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")

# Landing page per role after login
HOME_BY_ROLE = {
    "student": "/student/dashboard",
    "teacher": "/teacher/dashboard",
    "parent": "/parent/dashboard",
    "admin": "/admin/dashboard",
}


# =========================================================
# REGISTER
# =========================================================
@auth_bp.route("/register", methods=["POST"])
def register():
    data = request.get_json(silent=True) or {}
    return respond(register_user(data), status=201)


# =========================================================
# LOGIN
# =========================================================
@auth_bp.route("/login", methods=["POST"])
def login():
    data = request.get_json(silent=True) or request.form
    email = data.get("email")
    password = data.get("password")

    # 1. Basic validation
    if not email or not password:
        return error("Email and password are required", 400)

    # 2. Authenticate
    user = authenticate_user(email, password)
    if not user:
        return error("Invalid email or password", 401)

    # 3. Flask-Login session
    login_user(user)
    session["role"] = user.role

    return jsonify({
        "success": True,
        "user_id": user.user_id,
        "role": user.role,
        "redirect": HOME_BY_ROLE.get(user.role, "/"),
    })


# =========================================================
# LOGOUT
# =========================================================
@auth_bp.route("/logout", methods=["POST"])
@login_required
def logout():
    logout_user()
    session.clear()
    return jsonify({"success": True})


@auth_bp.route("/me")
@login_required
def me():
    return respond(get_profile(current_principal()))
