from functools import wraps
from flask import current_app, g, jsonify
from flask_jwt_extended import get_jwt, get_jwt_identity


def current_role():
    """Role claim of the verified token, or None outside a JWT-protected view."""
    try:
        return get_jwt().get("role")
    except RuntimeError:
        return None


def roles_required(*allowed_roles):
    """
    Reject callers whose `role` claim is not allowed. Without explicit
    roles, `BUILDER_EDITOR_ROLES` from the app config applies.
    Must sit below `jwt_required()`.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            roles = allowed_roles or current_app.config["BUILDER_EDITOR_ROLES"]

            if current_role() not in roles:
                return jsonify({"error": "Forbidden", "message": "Insufficient permissions"}), 403

            g.current_user_id = get_jwt_identity()
            return fn(*args, **kwargs)
        return wrapper
    return decorator
