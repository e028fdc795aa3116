from flask import current_app

from extensions import db
from models import Course, Enrollment, User
from services.authorization import ADMIN, ensure_role
from services.courses import serialize_course
from services.result import ServiceResult, service_action
from utils.dates import isoformat
from utils.errors import NotFound, ValidationError

ADMIN_ONLY = "Only administrators can manage users."


def serialize_user(user):
    return {
        "user_id": user.user_id,
        "email": user.email,
        "full_name": user.full_name,
        "role": user.role,
        "is_active": bool(user.is_active),
        "created_at": isoformat(user.created_at),
    }


@service_action("Failed to fetch users.")
def get_users(principal, role=None):
    ensure_role(principal, ADMIN, message=ADMIN_ONLY)

    query = User.query
    if role:
        query = query.filter_by(role=role)
    users = query.order_by(User.created_at.desc(), User.user_id.desc()).all()

    counts = {}
    for user in users:
        counts[user.role] = counts.get(user.role, 0) + 1
    return ServiceResult.ok(users=[serialize_user(u) for u in users], counts=counts)


@service_action("Failed to update user.")
def set_user_active(principal, user_id, is_active):
    ensure_role(principal, ADMIN, message=ADMIN_ONLY)
    try:
        user_id = int(user_id)
    except (TypeError, ValueError):
        raise ValidationError("Invalid user.")
    if user_id == principal.user_id:
        raise ValidationError("You cannot change your own account status.")

    user = db.session.get(User, user_id)
    if user is None:
        raise NotFound("User not found.")

    user.is_active = bool(is_active)
    db.session.commit()

    current_app.logger.info("User %s active=%s (by admin %s)", user.user_id, user.is_active, principal.user_id)
    return ServiceResult.ok(user=serialize_user(user))


@service_action("Failed to fetch courses.")
def get_course_overview(principal):
    ensure_role(principal, ADMIN, message="Only administrators can view all courses.")

    counts = dict(
        db.session.query(Enrollment.course_id, db.func.count(Enrollment.enrollment_id))
        .group_by(Enrollment.course_id)
        .all()
    )
    courses = Course.query.order_by(Course.created_at.desc(), Course.course_id.desc()).all()

    listing = []
    for course in courses:
        data = serialize_course(course)
        data["student_count"] = counts.get(course.course_id, 0)
        listing.append(data)
    return ServiceResult.ok(courses=listing)
