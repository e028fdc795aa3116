from flask import current_app

from extensions import db
from models import Attendance, Enrollment, Student
from models.attendance import ATTENDANCE_STATUSES
from services.authorization import STUDENT, TEACHER, ensure_role
from services.courses import load_owned_course
from services.parents import load_child
from services.result import ServiceResult, service_action
from utils.dates import parse_date
from utils.errors import ValidationError


def serialize_attendance(row, student=None):
    data = {
        "attendance_id": row.attendance_id,
        "student_id": row.student_id,
        "course_id": row.course_id,
        "date": row.date.isoformat(),
        "status": row.status,
    }
    if student is not None:
        data["student_name"] = student.full_name or "Unknown"
        data["registration_number"] = student.registration_number
    elif row.course is not None:
        data["course_name"] = row.course.course_name
        data["course_code"] = row.course.course_code
    return data


def summarize_attendance(entries):
    """Counts per status plus the share of sessions attended (present or late)."""
    summary = {status: 0 for status in ATTENDANCE_STATUSES}
    for entry in entries:
        summary[entry["status"]] += 1
    total = len(entries)
    summary["total"] = total
    attended = summary["present"] + summary["late"]
    summary["attendance_percentage"] = round(attended * 100 / total, 2) if total else 0
    return summary


def validate_records(records):
    if not records:
        raise ValidationError("At least one attendance record is required.")

    seen = set()
    cleaned = []
    for record in records:
        if not isinstance(record, dict):
            raise ValidationError("Each attendance record needs a student.")
        student_id = record.get("student_id")
        status = record.get("status")
        try:
            student_id = int(student_id)
        except (TypeError, ValueError):
            raise ValidationError("Each attendance record needs a student.")
        if status not in ATTENDANCE_STATUSES:
            raise ValidationError(
                f"Invalid status: {status}. Must be present, absent, or late."
            )
        if student_id in seen:
            raise ValidationError(f"Duplicate attendance record for student {student_id}.")
        seen.add(student_id)
        cleaned.append((student_id, status))
    return cleaned


@service_action("Failed to save attendance.")
def save_attendance(principal, course_id, date, records):
    """Replace the whole attendance sheet of a course for one day."""
    ensure_role(principal, TEACHER, message="Only teachers can mark attendance.")
    if not course_id or not date:
        raise ValidationError("Course ID and date are required.")

    course = load_owned_course(
        principal, course_id,
        "You do not have permission to mark attendance for this course."
    )

    day = parse_date(date)
    if day is None:
        raise ValidationError("Invalid date format.")
    cleaned = validate_records(records)

    enrolled = {
        student_id for (student_id,) in
        db.session.query(Enrollment.student_id).filter_by(course_id=course.course_id).all()
    }
    strangers = [student_id for student_id, _ in cleaned if student_id not in enrolled]
    if strangers:
        raise ValidationError(f"Students not enrolled in this course: {strangers}")

    # Delete and insert commit together, so readers never see an empty day
    Attendance.query.filter_by(course_id=course.course_id, date=day).delete()
    db.session.add_all([
        Attendance(student_id=student_id, course_id=course.course_id, date=day, status=status)
        for student_id, status in cleaned
    ])
    db.session.commit()

    current_app.logger.info(
        "Attendance replaced: course=%s date=%s records=%s", course.course_id, day, len(cleaned)
    )
    return ServiceResult.ok(saved=len(cleaned))


@service_action("Failed to fetch attendance.")
def get_attendance_for_date(principal, course_id, date):
    course = load_owned_course(
        principal, course_id,
        "You do not have permission to view attendance for this course."
    )
    day = parse_date(date)
    if day is None:
        raise ValidationError("Invalid date format.")

    rows = (
        db.session.query(Attendance, Student)
        .join(Student, Attendance.student_id == Student.student_id)
        .filter(Attendance.course_id == course.course_id, Attendance.date == day)
        .all()
    )
    entries = [serialize_attendance(row, student=student) for row, student in rows]
    entries.sort(key=lambda e: e["student_name"].casefold())
    return ServiceResult.ok(attendance=entries)


@service_action("Failed to fetch attendance history.")
def get_attendance_history(principal, course_id):
    course = load_owned_course(
        principal, course_id,
        "You do not have permission to view attendance history for this course."
    )

    rows = (
        db.session.query(Attendance.date, db.func.count(Attendance.attendance_id))
        .filter(Attendance.course_id == course.course_id)
        .group_by(Attendance.date)
        .order_by(Attendance.date.desc())
        .all()
    )
    history = [{"date": day.isoformat(), "count": count} for day, count in rows]
    return ServiceResult.ok(history=history)


def attendance_for_student(student_id, course_id=None):
    query = Attendance.query.filter(Attendance.student_id == student_id)
    if course_id:
        query = query.filter(Attendance.course_id == course_id)
    rows = query.order_by(Attendance.date.desc(), Attendance.course_id.asc()).all()
    return [serialize_attendance(row) for row in rows]


def by_course(entries):
    courses = {}
    for entry in entries:
        courses.setdefault(entry["course_id"], []).append(entry)
    return {
        course_id: summarize_attendance(course_entries)
        for course_id, course_entries in courses.items()
    }


@service_action("Failed to fetch attendance.")
def get_student_attendance(principal, course_id=None):
    ensure_role(principal, STUDENT, message="Only students can view their own attendance.")
    entries = attendance_for_student(principal.user_id, course_id)
    return ServiceResult.ok(
        attendance=entries,
        summary=summarize_attendance(entries),
        by_course=by_course(entries)
    )


@service_action("Failed to fetch attendance.")
def get_child_attendance(principal, child_id, course_id=None):
    student = load_child(
        principal, child_id,
        "You do not have permission to view this student's attendance."
    )
    entries = attendance_for_student(student.student_id, course_id)
    return ServiceResult.ok(
        attendance=entries,
        summary=summarize_attendance(entries),
        by_course=by_course(entries)
    )
