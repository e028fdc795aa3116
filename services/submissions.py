from flask import current_app
from sqlalchemy.exc import IntegrityError

from extensions import db
from models import Submission
from services.assignments import load_assignment, load_owned_assignment, serialize_assignment
from services.authorization import Resource, STUDENT, TEACHER, ensure_access, ensure_role
from services.enrollments import ensure_enrolled
from services.result import ServiceResult, service_action
from services.storage import (
    SUBMISSIONS_BUCKET, get_object_store, submission_object_path, submission_path_assignment,
    submission_path_owner
)
from utils.dates import isoformat, utcnow
from utils.errors import NotFound, ValidationError


def serialize_submission(submission):
    student = submission.student
    return {
        "submission_id": submission.submission_id,
        "assignment_id": submission.assignment_id,
        "student_id": submission.student_id,
        "text_answer": submission.text_answer,
        "file_path": submission.file_path,
        "marks": submission.marks,
        "feedback": submission.feedback,
        "submitted_at": isoformat(submission.submitted_at),
        "graded_at": isoformat(submission.graded_at),
        "student_name": (student.full_name if student else None) or "Unknown",
        "registration_number": student.registration_number if student else None,
    }


@service_action("Failed to upload submission file.")
def upload_submission_file(principal, assignment_id, upload):
    """Store a file for a later ``submit_assignment`` call and return its path."""
    ensure_role(principal, STUDENT, message="Only students can upload submissions.")
    assignment = load_assignment(assignment_id)
    ensure_enrolled(principal, assignment.course_id)
    if upload is None or not upload.filename:
        raise ValidationError("A file is required.")

    path = submission_object_path(assignment.assignment_id, principal.user_id, upload.filename)
    get_object_store().put(SUBMISSIONS_BUCKET, path, upload.stream)
    return ServiceResult.ok(file_path=path)


def find_submission(assignment_id, student_id):
    return Submission.query.filter_by(
        assignment_id=assignment_id,
        student_id=student_id
    ).first()


def write_submission(assignment_id, student_id, text_answer, file_path):
    submission = find_submission(assignment_id, student_id)
    if submission is None:
        submission = Submission(assignment_id=assignment_id, student_id=student_id)
        db.session.add(submission)
    submission.text_answer = text_answer
    submission.file_path = file_path
    submission.submitted_at = utcnow()
    db.session.commit()
    return submission


@service_action("Failed to submit assignment.")
def submit_assignment(principal, assignment_id, text_answer=None, file_path=None):
    """Create or overwrite the caller's submission for an assignment.

    Resubmitting replaces the answer and submitted_at. Marks, feedback and
    graded_at are left as they were; only grade_submission touches them.
    """
    ensure_role(principal, STUDENT, message="Only students can submit assignments.")

    text_answer = (text_answer or "").strip() or None
    file_path = (file_path or "").strip() or None
    if not text_answer and not file_path:
        raise ValidationError("Please provide either a text answer or upload a file.")
    if file_path and submission_path_owner(file_path) != principal.user_id:
        raise ValidationError("The uploaded file does not belong to you.")

    assignment = load_assignment(assignment_id)
    ensure_enrolled(principal, assignment.course_id)
    assignment_id = assignment.assignment_id
    if file_path and submission_path_assignment(file_path) != assignment_id:
        raise ValidationError("The uploaded file belongs to a different assignment.")

    try:
        submission = write_submission(assignment_id, principal.user_id, text_answer, file_path)
    except IntegrityError:
        # A concurrent submit created the row; overwrite it.
        db.session.rollback()
        submission = write_submission(assignment_id, principal.user_id, text_answer, file_path)

    current_app.logger.info(
        "Submission %s saved for assignment %s", submission.submission_id, assignment_id
    )
    return ServiceResult.ok(submission=serialize_submission(submission))


@service_action("Failed to fetch submissions.")
def get_assignment_submissions(principal, assignment_id):
    assignment = load_owned_assignment(
        principal, assignment_id,
        "You do not have permission to view submissions for this assignment."
    )

    submissions = (
        Submission.query
        .filter_by(assignment_id=assignment.assignment_id)
        .order_by(Submission.submitted_at.desc(), Submission.submission_id.desc())
        .all()
    )
    return ServiceResult.ok(
        assignment=serialize_assignment(assignment),
        submissions=[serialize_submission(s) for s in submissions]
    )


@service_action("Failed to fetch submission.")
def get_student_submission(principal, assignment_id):
    ensure_role(principal, STUDENT, message="Only students can view their submissions.")
    assignment = load_assignment(assignment_id)
    ensure_enrolled(principal, assignment.course_id)

    submission = Submission.query.filter_by(
        assignment_id=assignment.assignment_id,
        student_id=principal.user_id
    ).first()
    return ServiceResult.ok(
        submission=serialize_submission(submission) if submission else None
    )


@service_action("Failed to grade submission.")
def grade_submission(principal, submission_id, marks, feedback=None):
    ensure_role(principal, TEACHER, message="Only teachers can grade submissions.")
    try:
        marks = float(marks)
    except (TypeError, ValueError):
        raise ValidationError("Marks must be a number.")
    if marks < 0:
        raise ValidationError("Marks cannot be negative.")

    submission = db.session.get(Submission, submission_id) if submission_id else None
    if submission is None:
        raise NotFound("Submission not found.")
    ensure_access(
        principal,
        Resource.submission(submission.student_id, submission.assignment.course),
        "You do not have permission to grade this submission."
    )

    submission.marks = marks
    submission.feedback = (feedback or "").strip() or None
    submission.graded_at = utcnow()
    db.session.commit()

    current_app.logger.info("Submission %s graded by teacher %s", submission.submission_id, principal.user_id)
    return ServiceResult.ok(submission=serialize_submission(submission))
