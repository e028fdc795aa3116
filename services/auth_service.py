import uuid

from flask import current_app
from sqlalchemy.exc import IntegrityError
from werkzeug.security import check_password_hash, generate_password_hash

from extensions import db
from models import Parent, Student, Teacher, User
from models.user import ROLES
from services.authorization import ensure_authenticated
from services.result import ServiceResult, service_action
from utils.dates import utcnow
from utils.errors import Conflict, ValidationError

MIN_PASSWORD_LENGTH = 6


def authenticate_user(email: str, password: str):
    if not email or not password:
        return None

    user = User.query.filter_by(email=email.strip().lower()).first()
    if not user:
        return None

    if not check_password_hash(user.password_hash, password):
        return None

    if user.is_active is False:
        return None

    return user


def _required(payload, field, message):
    value = (payload.get(field) or "").strip()
    if not value:
        raise ValidationError(message)
    return value


def _link_codes(payload):
    codes = payload.get("link_codes") or []
    if isinstance(codes, str):
        codes = [codes]
    return [c.strip() for c in codes if c and c.strip()]


def validate_registration(payload):
    full_name = _required(payload, "full_name", "Full name is required.")
    email = (payload.get("email") or "").strip().lower()
    if "@" not in email or len(email) <= 3:
        raise ValidationError("A valid email address is required.")
    password = payload.get("password") or ""
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
    role = payload.get("role")
    if role not in ROLES:
        raise ValidationError("Invalid role. Must be student, teacher, parent, or admin.")

    profile = {}
    if role == "student":
        profile["class_name"] = _required(payload, "class_name", "Class is required for students.")
        profile["section"] = _required(payload, "section", "Section is required for students.")
    elif role == "teacher":
        profile["employee_id"] = _required(payload, "employee_id", "Employee ID is required for teachers.")
        profile["department"] = _required(payload, "department", "Department is required for teachers.")
        profile["designation"] = _required(payload, "designation", "Designation is required for teachers.")
    elif role == "parent":
        profile["link_codes"] = _link_codes(payload)
        if not profile["link_codes"]:
            raise ValidationError("At least one child link code is required.")
        profile["phone_number"] = _required(payload, "phone_number", "Phone number is required for parents.")
        profile["address"] = _required(payload, "address", "Address is required for parents.")

    return full_name, email, password, role, profile


def children_for_codes(codes):
    """Students matching every code, or raise if any code is unknown or already claimed."""
    students = Student.query.filter(Student.parent_link_code.in_(codes)).all()
    found = {s.parent_link_code for s in students}
    missing = [c for c in codes if c not in found]
    if missing:
        raise ValidationError(f"Invalid link code(s): {', '.join(missing)}.")
    if any(s.parent_id is not None for s in students):
        raise Conflict(
            "One or more of these children already have a parent account linked. Please contact support."
        )
    return students


def registration_number(user):
    return f"STU{utcnow().year}{user.user_id:05d}"


@service_action("Failed to create user.")
def register_user(payload):
    """Create a user and its role profile together; nothing is kept if either fails."""
    full_name, email, password, role, profile = validate_registration(payload or {})

    if User.query.filter_by(email=email).first() is not None:
        raise Conflict("Email already exists.")

    children = children_for_codes(profile["link_codes"]) if role == "parent" else []

    user = User(
        email=email,
        full_name=full_name,
        password_hash=generate_password_hash(password),
        role=role,
        is_active=True
    )
    db.session.add(user)
    try:
        db.session.flush()
    except IntegrityError:
        db.session.rollback()
        raise Conflict("Email already exists.")

    if role == "student":
        db.session.add(Student(
            student_id=user.user_id,
            registration_number=registration_number(user),
            class_name=profile["class_name"],
            section=profile["section"],
            parent_link_code=str(uuid.uuid4())
        ))
    elif role == "teacher":
        db.session.add(Teacher(
            teacher_id=user.user_id,
            employee_id=profile["employee_id"],
            department=profile["department"],
            designation=profile["designation"]
        ))
    elif role == "parent":
        db.session.add(Parent(
            parent_id=user.user_id,
            phone_number=profile["phone_number"],
            address=profile["address"]
        ))
        for child in children:
            child.parent_id = user.user_id

    # One commit for the user and its profile: a failure here rolls back both
    db.session.commit()

    current_app.logger.info("Registered %s user %s", role, user.user_id)
    return ServiceResult.ok(user_id=user.user_id, role=role)


@service_action("Failed to fetch profile.")
def get_profile(principal):
    ensure_authenticated(principal)

    user = db.session.get(User, principal.user_id)
    profile = {
        "user_id": user.user_id,
        "email": user.email,
        "full_name": user.full_name,
        "role": user.role,
    }
    if user.role == "student":
        student = db.session.get(Student, user.user_id)
        if student is not None:
            profile.update({
                "registration_number": student.registration_number,
                "class_name": student.class_name,
                "section": student.section,
                "parent_link_code": student.parent_link_code,
            })
    elif user.role == "teacher":
        teacher = db.session.get(Teacher, user.user_id)
        if teacher is not None:
            profile.update({
                "employee_id": teacher.employee_id,
                "department": teacher.department,
                "designation": teacher.designation,
            })
    elif user.role == "parent":
        parent = db.session.get(Parent, user.user_id)
        if parent is not None:
            profile.update({"phone_number": parent.phone_number, "address": parent.address})
    return ServiceResult.ok(profile=profile)
