from flask import jsonify

from utils.errors import (
    CONFLICT, FORBIDDEN, NOT_FOUND, STORE_FAILURE, UNAUTHENTICATED, UNEXPECTED, VALIDATION
)

STATUS_BY_KIND = {
    UNAUTHENTICATED: 401,
    FORBIDDEN: 403,
    NOT_FOUND: 404,
    VALIDATION: 400,
    CONFLICT: 409,
    STORE_FAILURE: 500,
    UNEXPECTED: 500,
}


def respond(result, status=200):
    """Render a ServiceResult as JSON with the matching HTTP status."""
    if result.success:
        return jsonify(result.to_dict()), status
    return jsonify({"success": False, "error": result.error}), STATUS_BY_KIND.get(result.kind, 500)


def error(message, status):
    return jsonify({"success": False, "error": message}), status
