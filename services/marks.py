"""Mark entry and module/course statistics.

Every save rewrites the module-wide statistics onto each mark row of that
module, inside the same transaction as the save itself. Teacher-facing
module views recompute statistics from the rows they read rather than
trusting the stored copy.
"""
from flask import current_app
from sqlalchemy.exc import IntegrityError

from extensions import db
from models import Course, Mark, Module, Student
from services.authorization import STUDENT, TEACHER, ensure_role
from services.courses import load_module, load_owned_course
from services.enrollments import find_enrollment
from services.parents import load_child
from services.result import ServiceResult, service_action
from services.statistics import compute_statistics, performance_remark
from utils.errors import NotFound, ValidationError

STAT_FIELDS = ("average", "std_deviation", "min_marks", "max_marks", "median_marks")


def recompute_module_statistics(module_id):
    """Recalculate statistics for a module and write them onto all of its marks."""
    marks = Mark.query.filter_by(module_id=module_id).all()
    stats = compute_statistics([m.obtained_marks for m in marks])
    for mark in marks:
        for field in STAT_FIELDS:
            setattr(mark, field, stats[field])
    return stats


def stored_statistics(mark):
    if mark is None or mark.average is None:
        return None
    return {field: getattr(mark, field) for field in STAT_FIELDS}


def pool_course_scores(modules_with_marks):
    """Raw obtained marks from every module in one flat list.

    Modules with different totals are mixed as-is, so a 10-point quiz and a
    100-point exam share one average.
    """
    return [m.obtained_marks for _, marks in modules_with_marks for m in marks]


def pool_course_percentages(modules_with_marks):
    """Like pool_course_scores, but each mark as a percentage of its module total."""
    return [
        m.obtained_marks * 100 / module.total_marks
        for module, marks in modules_with_marks
        for m in marks
    ]


COURSE_SCORE_POOL = pool_course_scores


def serialize_mark(mark, module=None, course=None, student=None):
    module = module or mark.module
    data = {
        "mark_id": mark.mark_id,
        "student_id": mark.student_id,
        "module_id": mark.module_id,
        "course_id": module.course_id if module else None,
        "obtained_marks": mark.obtained_marks,
        "total_marks": module.total_marks if module else None,
        "module_name": module.module_name if module else "Unknown Module",
        "feedback": mark.feedback,
    }
    if course is not None:
        data["course_name"] = course.course_name
        data["course_code"] = course.course_code
    if student is not None:
        data["student_name"] = student.full_name or "Unknown"
        data["registration_number"] = student.registration_number
    return data


def parse_obtained_marks(value, total_marks):
    try:
        obtained = float(value)
    except (TypeError, ValueError):
        raise ValidationError("Marks obtained must be a number.")
    if obtained < 0:
        raise ValidationError("Marks obtained must be >= 0.")
    if obtained > total_marks:
        raise ValidationError("Marks obtained cannot exceed total marks.")
    return obtained


def find_mark(student_id, module_id):
    return Mark.query.filter_by(student_id=student_id, module_id=module_id).first()


def write_mark(student_id, module_id, obtained, feedback):
    """Insert or update the (student, module) mark and flush it."""
    mark = find_mark(student_id, module_id)
    if mark is None:
        mark = Mark(student_id=student_id, module_id=module_id)
        db.session.add(mark)
    mark.obtained_marks = obtained
    mark.feedback = feedback
    db.session.flush()
    return mark


@service_action("Failed to save mark.")
def save_mark(principal, module_id, student_id, obtained_marks, feedback=None):
    ensure_role(principal, TEACHER, message="Only teachers can enter marks.")
    if not module_id or not student_id:
        raise ValidationError("Module and student are required.")

    module = db.session.get(Module, module_id)
    if module is None:
        raise NotFound("Module not found.")
    course = load_owned_course(
        principal, module.course_id,
        "You do not have permission to enter marks for this course."
    )

    obtained = parse_obtained_marks(obtained_marks, module.total_marks)
    feedback = str(feedback or "").strip() or None

    if db.session.get(Student, student_id) is None:
        raise NotFound("Student not found.")
    if find_enrollment(student_id, course.course_id) is None:
        raise ValidationError("Student is not enrolled in this course.")

    module_id = module.module_id
    try:
        mark = write_mark(student_id, module_id, obtained, feedback)
    except IntegrityError:
        # Another writer inserted the same pair first; update its row instead.
        db.session.rollback()
        mark = write_mark(student_id, module_id, obtained, feedback)

    stats = recompute_module_statistics(module_id)
    db.session.commit()

    current_app.logger.info(
        "Mark saved: module=%s student=%s obtained=%s", module_id, student_id, obtained
    )
    return ServiceResult.ok(mark_id=mark.mark_id, statistics=stats)


@service_action("Failed to fetch marks.")
def get_marks_for_module(principal, course_id, module_id):
    course = load_owned_course(
        principal, course_id,
        "You do not have permission to view marks for this course."
    )
    module = load_module(course, module_id)

    rows = (
        db.session.query(Mark, Student)
        .join(Student, Mark.student_id == Student.student_id)
        .filter(Mark.module_id == module.module_id)
        .all()
    )

    stats = compute_statistics([mark.obtained_marks for mark, _ in rows])
    statistics = dict(stats)
    statistics.update({
        "module_id": module.module_id,
        "module_name": module.module_name,
        "total_marks": module.total_marks,
        "student_count": len(rows),
    })

    entries = []
    for mark, student in rows:
        entry = serialize_mark(mark, module=module, student=student)
        entry["remark"] = performance_remark(mark.obtained_marks, stats)
        entries.append(entry)
    entries.sort(key=lambda e: e["student_name"].casefold())

    return ServiceResult.ok(marks=entries, statistics=statistics)


@service_action("Failed to fetch course statistics.")
def get_course_statistics(principal, course_id, pool=None):
    course = load_owned_course(
        principal, course_id,
        "You do not have permission to view statistics for this course."
    )
    pool = pool or COURSE_SCORE_POOL

    modules = (
        Module.query
        .filter_by(course_id=course.course_id)
        .order_by(Module.created_at.asc(), Module.module_id.asc())
        .all()
    )

    module_stats = []
    modules_with_marks = []
    for module in modules:
        marks = Mark.query.filter_by(module_id=module.module_id).order_by(Mark.mark_id.asc()).all()
        modules_with_marks.append((module, marks))
        module_stats.append({
            "module_id": module.module_id,
            "module_name": module.module_name,
            "total_marks": module.total_marks,
            "student_count": len(marks),
            "statistics": stored_statistics(marks[0] if marks else None),
        })

    pooled = pool(modules_with_marks)
    overall = compute_statistics(pooled)

    return ServiceResult.ok(
        modules=module_stats,
        course={
            "course_id": course.course_id,
            "average": overall["average"],
            "std_deviation": overall["std_deviation"],
            "total_entries": len(pooled),
        }
    )


@service_action("Failed to fetch marks.")
def get_marks_for_course(principal, course_id, module_id=None):
    course = load_owned_course(
        principal, course_id,
        "You do not have permission to view marks for this course."
    )

    query = (
        db.session.query(Mark, Module, Student)
        .join(Module, Mark.module_id == Module.module_id)
        .join(Student, Mark.student_id == Student.student_id)
        .filter(Module.course_id == course.course_id)
    )
    if module_id:
        query = query.filter(Module.module_id == module_id)

    entries = [
        serialize_mark(mark, module=module, student=student)
        for mark, module, student in query.all()
    ]
    entries.sort(key=lambda e: (e["student_name"].casefold(), e["module_id"]))
    return ServiceResult.ok(marks=entries)


def marks_for_student(student_id, course_id=None):
    query = (
        db.session.query(Mark, Module, Course)
        .join(Module, Mark.module_id == Module.module_id)
        .join(Course, Module.course_id == Course.course_id)
        .filter(Mark.student_id == student_id)
    )
    if course_id:
        query = query.filter(Course.course_id == course_id)
    rows = query.order_by(Course.course_id.asc(), Module.module_id.asc()).all()
    return [serialize_mark(mark, module=module, course=course) for mark, module, course in rows]


@service_action("Failed to fetch marks.")
def get_student_marks(principal, course_id=None):
    ensure_role(principal, STUDENT, message="Only students can view their own marks.")
    return ServiceResult.ok(marks=marks_for_student(principal.user_id, course_id))


@service_action("Failed to fetch marks.")
def get_child_marks(principal, child_id, course_id=None):
    student = load_child(
        principal, child_id,
        "You do not have permission to view this student's marks."
    )
    return ServiceResult.ok(marks=marks_for_student(student.student_id, course_id))
