"""Bucketed file storage for assignment handouts and student submissions.

Files live under ``STORAGE_ROOT/<bucket>/<path>``. Downloads go through
short-lived signed tokens. Submission paths are laid out as
``<assignment_id>/<student_id>/<timestamp>-<filename>`` so ownership can be
read off the path without a database lookup.
"""
import os
import posixpath

from flask import current_app, url_for
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from werkzeug.utils import secure_filename

from extensions import db
from models import Assignment
from services.authorization import (
    Resource, STUDENT, TEACHER, ensure_access, ensure_authenticated
)
from services.result import ServiceResult, service_action
from utils.dates import utcnow
from utils.errors import Forbidden, NotFound, ValidationError

ASSIGNMENTS_BUCKET = "assignments"
SUBMISSIONS_BUCKET = "submissions"
BUCKETS = (ASSIGNMENTS_BUCKET, SUBMISSIONS_BUCKET)

ALLOWED_EXTENSIONS = {"pdf", "doc", "docx", "txt", "png", "jpg", "jpeg", "zip"}


class ObjectStore:

    def __init__(self, root, secret, expires_in=3600):
        self.root = root
        self.expires_in = expires_in
        self.serializer = URLSafeTimedSerializer(secret, salt="object-store")

    def _full_path(self, bucket, path):
        if bucket not in BUCKETS:
            raise ValidationError("Invalid bucket name.")
        normalized = posixpath.normpath(path or "")
        if not path or normalized.startswith("..") or normalized.startswith("/"):
            raise ValidationError("Invalid file path.")
        return os.path.join(self.root, bucket, *normalized.split("/"))

    def put(self, bucket, path, stream):
        full_path = self._full_path(bucket, path)
        os.makedirs(os.path.dirname(full_path), exist_ok=True)
        with open(full_path, "wb") as fh:
            fh.write(stream.read())
        return path

    def exists(self, bucket, path):
        return os.path.isfile(self._full_path(bucket, path))

    def open(self, bucket, path):
        full_path = self._full_path(bucket, path)
        if not os.path.isfile(full_path):
            raise NotFound("File not found.")
        return open(full_path, "rb")

    def sign(self, bucket, path):
        self._full_path(bucket, path)
        return self.serializer.dumps({"bucket": bucket, "path": path})

    def verify(self, token):
        """Return (bucket, path) for a token minted by ``sign`` within the expiry window."""
        try:
            payload = self.serializer.loads(token, max_age=self.expires_in)
        except SignatureExpired:
            raise Forbidden("This download link has expired.")
        except BadSignature:
            raise Forbidden("Invalid download link.")
        return payload["bucket"], payload["path"]


def get_object_store():
    return current_app.extensions["object_store"]


def signed_url(bucket, path):
    token = get_object_store().sign(bucket, path)
    return url_for("files.download", token=token)


def clean_filename(filename):
    name = secure_filename(filename or "")
    if not name or "." not in name:
        raise ValidationError("A file with an extension is required.")
    if name.rsplit(".", 1)[1].lower() not in ALLOWED_EXTENSIONS:
        raise ValidationError("This file type is not allowed.")
    return name


def assignment_object_path(course_id, filename):
    stamp = utcnow().strftime("%Y%m%d%H%M%S%f")
    return f"{course_id}/{stamp}-{clean_filename(filename)}"


def submission_object_path(assignment_id, student_id, filename):
    stamp = utcnow().strftime("%Y%m%d%H%M%S%f")
    return f"{assignment_id}/{student_id}/{stamp}-{clean_filename(filename)}"


def submission_path_owner(path):
    parts = (path or "").split("/")
    if len(parts) < 3:
        return None
    try:
        return int(parts[1])
    except ValueError:
        return None


def submission_path_assignment(path):
    parts = (path or "").split("/")
    if len(parts) < 3:
        return None
    try:
        return int(parts[0])
    except ValueError:
        return None


def assignment_for_path(path):
    try:
        assignment_id = int((path or "").split("/")[0])
    except ValueError:
        return None
    return db.session.get(Assignment, assignment_id)


def authorize_file_access(principal, bucket, path):
    """Who may read a stored file.

    Assignment handouts are readable by any logged-in user. Submissions are
    readable by the student whose id is the second path segment and by the
    teacher who owns the assignment's course.
    """
    ensure_authenticated(principal)
    if bucket == ASSIGNMENTS_BUCKET:
        return True
    if bucket != SUBMISSIONS_BUCKET:
        raise ValidationError("Invalid bucket name.")

    if principal.role == STUDENT:
        if submission_path_owner(path) != principal.user_id:
            raise Forbidden("You can only access your own submissions.")
        return True
    if principal.role == TEACHER:
        assignment = assignment_for_path(path)
        if assignment is None:
            raise NotFound("File not found.")
        ensure_access(
            principal,
            Resource.submission(submission_path_owner(path), assignment.course),
            "You do not have permission to access this file."
        )
        return True
    raise Forbidden("You do not have permission to access this file.")


@service_action("Failed to create download link.")
def get_file_url(principal, bucket, path):
    authorize_file_access(principal, bucket, path)
    if not get_object_store().exists(bucket, path):
        raise NotFound("File not found.")
    return ServiceResult.ok(url=signed_url(bucket, path), expires_in=get_object_store().expires_in)
