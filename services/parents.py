from extensions import db
from models import Student
from services.authorization import PARENT, Resource, can_access, ensure_access, ensure_role
from services.result import ServiceResult, service_action
from utils.errors import NotFound


def load_student(student_id):
    student = db.session.get(Student, student_id) if student_id else None
    if student is None:
        raise NotFound("Student not found.")
    return student


def load_child(principal, child_id, message):
    """Fetch a student and check the caller is that student's linked parent."""
    ensure_role(principal, PARENT, message=message)
    student = load_student(child_id)
    ensure_access(principal, Resource.student_record(student), message)
    return student


def serialize_child(student):
    return {
        "student_id": student.student_id,
        "full_name": student.full_name or "Unknown",
        "registration_number": student.registration_number,
        "class_name": student.class_name,
        "section": student.section,
    }


def child_ids_for(parent_id):
    rows = db.session.query(Student.student_id).filter(Student.parent_id == parent_id).all()
    return [student_id for (student_id,) in rows]


@service_action("Failed to fetch children.")
def get_parent_children(principal):
    ensure_role(principal, PARENT, message="Only parents can view their children.")

    students = Student.query.filter_by(parent_id=principal.user_id).all()
    children = [serialize_child(s) for s in students if s.full_name]
    children.sort(key=lambda c: c["full_name"].casefold())
    return ServiceResult.ok(children=children)


@service_action("Failed to verify child access.")
def verify_child_access(principal, child_id):
    ensure_role(principal, PARENT, message="Only parents can access child data.")

    student = db.session.get(Student, child_id) if child_id else None
    if student is None or not can_access(principal, Resource.student_record(student)):
        return ServiceResult.ok(has_access=False)
    return ServiceResult.ok(has_access=True, child_name=student.full_name or "Unknown")
