from functools import wraps

from flask import jsonify
from flask_login import current_user

from services.authorization import principal_from_user


def current_principal():
    return principal_from_user(current_user)


def role_required(*roles):
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            # 1. Check if user is logged in
            if not current_user.is_authenticated:
                return jsonify({"success": False, "error": "You must be logged in."}), 401

            # 2. Check if user has one of the allowed roles
            if current_user.role not in roles:
                return jsonify({
                    "success": False,
                    "error": "Access Denied: You do not have the required role."
                }), 403

            return func(*args, **kwargs)
        return wrapper
    return decorator
