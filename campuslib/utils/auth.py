"""
Role checks and JSON error bodies on top of flask_jwt_extended.

Tokens carry the user id as identity and a ``role`` claim. The borrow/return
confirmation tokens are never used for authorization.
"""
from functools import wraps

from flask import current_app, request
from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request

from campuslib.utils.http import json_error


def role_required(*roles):
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            claims = get_jwt()
            role = claims.get("role")
            if role not in roles:
                current_app.logger.warning(
                    f"[auth] user={get_jwt_identity()} role={role} denied {request.path}"
                )
                return json_error("Admin access required", 403)
            return fn(*args, **kwargs)
        return wrapper
    return decorator


def register_jwt_callbacks(jwt):
    @jwt.unauthorized_loader
    def missing_token(_reason):
        return json_error("Authorization token missing", 401)

    @jwt.invalid_token_loader
    def invalid_token(_reason):
        return json_error("Invalid token", 401)

    @jwt.expired_token_loader
    def expired_token(_jwt_header, _jwt_payload):
        return json_error("Token has expired", 401)
