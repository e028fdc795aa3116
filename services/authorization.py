"""Capability checks shared by every service.

A check takes the caller (a ``Principal``, or ``None`` when nobody is logged
in) and a ``Resource`` describing who owns the target record. Resources are
built from ids that the caller has already loaded, so the rules can be
exercised without a database.
"""
from collections import namedtuple

from utils.errors import Forbidden, Unauthenticated

STUDENT = "student"
TEACHER = "teacher"
PARENT = "parent"
ADMIN = "admin"

Principal = namedtuple("Principal", ["user_id", "role", "email", "full_name"])

COURSE = "course"
MODULE = "module"
ASSIGNMENT = "assignment"
ATTENDANCE = "attendance"
MARKS = "marks"
ENROLLMENT = "enrollment"
SUBMISSION = "submission"
STUDENT_RECORD = "student_record"

# Resources whose access is decided by the owning course's teacher
COURSE_SCOPED = {COURSE, MODULE, ASSIGNMENT, ATTENDANCE, MARKS}


class Resource(namedtuple("Resource", ["kind", "teacher_id", "student_id", "parent_id"])):
    __slots__ = ()

    @classmethod
    def course(cls, course):
        return cls(COURSE, course.teacher_id, None, None)

    @classmethod
    def module(cls, course):
        return cls(MODULE, course.teacher_id, None, None)

    @classmethod
    def assignment(cls, course):
        return cls(ASSIGNMENT, course.teacher_id, None, None)

    @classmethod
    def attendance(cls, course):
        return cls(ATTENDANCE, course.teacher_id, None, None)

    @classmethod
    def marks(cls, course):
        return cls(MARKS, course.teacher_id, None, None)

    @classmethod
    def enrollment(cls, student_id):
        return cls(ENROLLMENT, None, student_id, None)

    @classmethod
    def submission(cls, student_id, course):
        return cls(SUBMISSION, course.teacher_id, student_id, None)

    @classmethod
    def student_record(cls, student):
        return cls(STUDENT_RECORD, None, student.student_id, student.parent_id)


def principal_from_user(user):
    if user is None or not getattr(user, "is_authenticated", False):
        return None
    return Principal(user.user_id, user.role, user.email, user.full_name)


def can_access(principal, resource):
    if principal is None:
        return False

    kind = resource.kind
    if kind in COURSE_SCOPED:
        return principal.role == TEACHER and resource.teacher_id == principal.user_id

    if kind == ENROLLMENT:
        return principal.role == STUDENT and resource.student_id == principal.user_id

    if kind == SUBMISSION:
        if principal.role == STUDENT:
            return resource.student_id == principal.user_id
        if principal.role == TEACHER:
            return resource.teacher_id == principal.user_id
        return False

    if kind == STUDENT_RECORD:
        if principal.role == PARENT:
            return resource.parent_id is not None and resource.parent_id == principal.user_id
        if principal.role == STUDENT:
            return resource.student_id == principal.user_id
        return False

    return False


def ensure_authenticated(principal):
    if principal is None:
        raise Unauthenticated()
    return principal


def ensure_role(principal, *roles, message=None):
    ensure_authenticated(principal)
    if principal.role not in roles:
        raise Forbidden(message)
    return principal


def ensure_access(principal, resource, message=None):
    ensure_authenticated(principal)
    if not can_access(principal, resource):
        raise Forbidden(message)
    return principal
