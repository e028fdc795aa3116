from extensions import db
from models import Course, Mark, Module
from services.authorization import PARENT, STUDENT, TEACHER, ensure_authenticated
from services.courses import load_owned_course
from services.grading import percentage_to_gpa, weighted_percentage
from services.parents import load_child
from services.result import ServiceResult, service_action
from utils.errors import Forbidden, ValidationError


def parse_student_id(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("Invalid student.")


def resolve_target_student(principal, student_id):
    """Whose marks the caller may aggregate, or raise.

    Students see themselves, parents their linked children, teachers any
    student (restricted to the teacher's own courses by the query).
    """
    ensure_authenticated(principal)

    if principal.role == STUDENT:
        if student_id and parse_student_id(student_id) != principal.user_id:
            raise Forbidden("You can only view your own GPA.")
        return principal.user_id

    if principal.role == TEACHER:
        if not student_id:
            raise ValidationError("A student is required.")
        return parse_student_id(student_id)

    if principal.role == PARENT:
        if not student_id:
            raise ValidationError("A student is required.")
        child = load_child(
            principal, parse_student_id(student_id),
            "You do not have permission to view this student's GPA."
        )
        return child.student_id

    raise Forbidden("Only students, teachers and parents can view GPA.")


def mark_pairs(student_id, teacher_id=None, course_id=None):
    query = (
        db.session.query(Mark.obtained_marks, Module.total_marks)
        .join(Module, Mark.module_id == Module.module_id)
        .join(Course, Module.course_id == Course.course_id)
        .filter(Mark.student_id == student_id)
    )
    if teacher_id is not None:
        query = query.filter(Course.teacher_id == teacher_id)
    if course_id is not None:
        query = query.filter(Course.course_id == course_id)
    return [(obtained, total) for obtained, total in query.all() if total]


def gpa_summary(pairs):
    percentage = weighted_percentage(pairs)
    return {
        "gpa": round(percentage_to_gpa(percentage), 2),
        "percentage": round(percentage, 2),
        "modules_counted": len(pairs),
    }


@service_action("Failed to calculate GPA.")
def calculate_student_gpa(principal, student_id=None):
    target = resolve_target_student(principal, student_id)
    teacher_id = principal.user_id if principal.role == TEACHER else None
    return ServiceResult.ok(**gpa_summary(mark_pairs(target, teacher_id=teacher_id)))


@service_action("Failed to calculate course GPA.")
def calculate_course_gpa(principal, course_id, student_id=None):
    ensure_authenticated(principal)
    if principal.role == TEACHER:
        load_owned_course(
            principal, course_id,
            "You do not have permission to view GPA for this course."
        )
    target = resolve_target_student(principal, student_id)
    return ServiceResult.ok(**gpa_summary(mark_pairs(target, course_id=course_id)))
