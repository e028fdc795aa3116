from flask import current_app
from sqlalchemy import or_

from extensions import db
from models import Announcement
from models.announcement import AUDIENCES
from services.authorization import PARENT, Resource, STUDENT, TEACHER, ensure_access, ensure_role
from services.courses import load_course
from services.enrollments import enrolled_course_ids
from services.parents import child_ids_for
from services.result import ServiceResult, service_action
from utils.dates import isoformat
from utils.errors import ValidationError

STUDENT_AUDIENCES = ("students", "both")
PARENT_AUDIENCES = ("parents", "both")


def serialize_announcement(announcement):
    course = announcement.course
    teacher = announcement.teacher
    return {
        "announcement_id": announcement.announcement_id,
        "teacher_id": announcement.teacher_id,
        "course_id": announcement.course_id,
        "audience": announcement.audience,
        "title": announcement.title,
        "content": announcement.content,
        "created_at": isoformat(announcement.created_at),
        "teacher_name": (teacher.full_name if teacher else None) or "Unknown Teacher",
        "course_name": course.course_name if course else None,
        "course_code": course.course_code if course else None,
    }


def visible_announcements(audiences, course_ids):
    """Announcements for ``audiences`` that are either unscoped or scoped to one of ``course_ids``."""
    scope = Announcement.course_id.is_(None)
    if course_ids:
        scope = or_(scope, Announcement.course_id.in_(list(course_ids)))

    return (
        Announcement.query
        .filter(Announcement.audience.in_(audiences), scope)
        .order_by(Announcement.created_at.desc(), Announcement.announcement_id.desc())
        .all()
    )


@service_action("Failed to create announcement.")
def create_announcement(principal, title, content, audience, course_id=None, is_all_students=False):
    ensure_role(principal, TEACHER, message="Only teachers can create announcements.")

    title = (title or "").strip()
    content = (content or "").strip()
    if not title:
        raise ValidationError("Title is required.")
    if not content:
        raise ValidationError("Content is required.")
    if audience not in AUDIENCES:
        raise ValidationError("Invalid audience. Must be 'students', 'parents', or 'both'.")
    if bool(course_id) == bool(is_all_students):
        raise ValidationError("Choose either one course or all students.")

    if course_id:
        course = load_course(course_id)
        ensure_access(
            principal,
            Resource.course(course),
            "Invalid course. You can only create announcements for your own courses."
        )
        course_id = course.course_id

    announcement = Announcement(
        teacher_id=principal.user_id,
        course_id=course_id or None,
        audience=audience,
        title=title,
        content=content
    )
    db.session.add(announcement)
    db.session.commit()

    current_app.logger.info(
        "Announcement %s posted by teacher %s (audience=%s course=%s)",
        announcement.announcement_id, principal.user_id, audience, course_id
    )
    return ServiceResult.ok(announcement=serialize_announcement(announcement))


@service_action("Failed to fetch announcements.")
def get_student_announcements(principal):
    ensure_role(principal, STUDENT, message="Only students can view student announcements.")

    course_ids = enrolled_course_ids([principal.user_id])
    announcements = visible_announcements(STUDENT_AUDIENCES, course_ids)
    return ServiceResult.ok(announcements=[serialize_announcement(a) for a in announcements])


@service_action("Failed to fetch announcements.")
def get_parent_announcements(principal):
    ensure_role(principal, PARENT, message="Only parents can view parent announcements.")

    course_ids = enrolled_course_ids(child_ids_for(principal.user_id))
    announcements = visible_announcements(PARENT_AUDIENCES, course_ids)
    return ServiceResult.ok(announcements=[serialize_announcement(a) for a in announcements])


@service_action("Failed to fetch announcements.")
def get_teacher_announcements(principal):
    ensure_role(principal, TEACHER, message="Only teachers can view their announcements.")

    announcements = (
        Announcement.query
        .filter_by(teacher_id=principal.user_id)
        .order_by(Announcement.created_at.desc(), Announcement.announcement_id.desc())
        .all()
    )
    return ServiceResult.ok(announcements=[serialize_announcement(a) for a in announcements])
