# Overview: Request and permission decorators for API routes.

from functools import wraps
from flask import request, jsonify, g, current_app

from .permissions import role_has_permission, validate_permission_code
from .services import get_services


def _is_authenticated() -> bool:
    return hasattr(g, 'current_user')


def bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


def require_auth(f):
    """
    Require a live bearer session.

    Sets the following Flask g attributes:
    - g.current_user: The authenticated User object
    - g.token: The plaintext bearer token (for logout)

    Returns 401 if the header is missing or the token is invalid,
    expired or revoked.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = bearer_token()
        if not token:
            return jsonify({"error": "Authentication required"}), 401

        context = get_services().sessions.validate(token)
        if not context:
            return jsonify({"error": "Invalid or expired token"}), 401

        g.current_user = context.user
        g.token = token

        return f(*args, **kwargs)

    return decorated_function


def require_permission(permission_code: str):
    """
    Require the caller's role to hold a permission in the capability table.

    Returns 403 (Unauthorized) on a role mismatch. An unknown code fails at
    import time rather than denying every request.
    """
    if not validate_permission_code(permission_code):
        raise ValueError(f"Unknown permission code: {permission_code}")

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            # Ensure @require_auth was called first
            if not _is_authenticated():
                return jsonify({"error": "Authentication required"}), 401

            user = g.current_user
            if not role_has_permission(user.role, permission_code):
                current_app.logger.warning(
                    "Permission denied: user=%s role=%s permission=%s path=%s",
                    user.username, user.role, permission_code, request.path,
                )
                return jsonify({
                    "error": "Unauthorized",
                    "required_permission": permission_code,
                    "message": f"Role {user.role} cannot perform {permission_code}",
                }), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator
