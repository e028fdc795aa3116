from functools import wraps

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from utils.errors import (
    ServiceError, STORE_FAILURE, UNEXPECTED, UNEXPECTED_MESSAGE
)


class ServiceResult:
    """Success/failure envelope returned by every public service operation."""

    def __init__(self, success, data=None, error=None, kind=None):
        self.success = success
        self.data = data or {}
        self.error = error
        self.kind = kind

    @classmethod
    def ok(cls, **data):
        return cls(True, data=data)

    @classmethod
    def fail(cls, kind, error):
        return cls(False, error=error, kind=kind)

    def __getitem__(self, key):
        return self.data[key]

    def get(self, key, default=None):
        return self.data.get(key, default)

    def to_dict(self):
        if self.success:
            return {"success": True, **self.data}
        return {"success": False, "error": self.error, "kind": self.kind}

    def __repr__(self):
        if self.success:
            return f"<ServiceResult ok {sorted(self.data)}>"
        return f"<ServiceResult {self.kind}: {self.error}>"


def service_action(failure_message):
    """Run a service function and turn anything it raises into a ServiceResult.

    Domain errors keep their kind and message. Database errors roll the
    session back and are reported as ``failure_message``. Anything else is
    logged with its traceback and reported with a generic apology.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except ServiceError as exc:
                db.session.rollback()
                return ServiceResult.fail(exc.kind, exc.message)
            except SQLAlchemyError as exc:
                db.session.rollback()
                current_app.logger.error("%s: %s", failure_message, exc)
                return ServiceResult.fail(STORE_FAILURE, failure_message)
            except Exception:
                db.session.rollback()
                current_app.logger.exception("Unexpected error in %s", func.__name__)
                return ServiceResult.fail(UNEXPECTED, UNEXPECTED_MESSAGE)
        return wrapper
    return decorator
