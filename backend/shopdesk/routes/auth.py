# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

"""
Authentication API routes

- Self-registration (employees approved immediately, admins pending)
- Login with approval check and bearer session token
- Logout revokes the presented token
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import get_services
from ..services.auth_service import (
    AlreadyExistsError,
    InvalidCredentialsError,
    NotApprovedError,
)
from ..validation import coerce_str, ValidationError
from ..decorators import require_auth


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/register")
def register_route():
    """
    Register a new account.

    Body: {username, password, role}; role defaults to employee.
    token is null for admins, who must be approved before they can log in.
    """
    data = request.get_json(silent=True) or {}

    if not all([data.get("username"), data.get("password")]):
        return jsonify({"error": "username and password required"}), 400

    try:
        username = coerce_str(data.get("username"), "username")
        password = coerce_str(data.get("password"), "password", strip=False)
        role = coerce_str(data.get("role"), "role", required=False) or "employee"
        user, token = get_services().access.register(username, password, role)
    except AlreadyExistsError as e:
        return jsonify({"error": str(e)}), 400
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to register user")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({
        "id": user.id,
        "username": user.username,
        "role": user.role,
        "isApproved": user.is_approved,
        "token": token,
    }), 201


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and create session token.

    Token must be included in Authorization header for protected routes.
    """
    data = request.get_json(silent=True) or {}

    if not all([data.get("username"), data.get("password")]):
        return jsonify({"error": "username and password required"}), 400

    try:
        username = coerce_str(data.get("username"), "username")
        password = coerce_str(data.get("password"), "password", strip=False)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        user, token = get_services().access.login(username, password)
    except InvalidCredentialsError as e:
        return jsonify({"error": str(e)}), 401
    except NotApprovedError as e:
        return jsonify({"error": str(e)}), 401
    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500

    payload = user.to_dict()
    payload["token"] = token
    return jsonify(payload), 200


@auth_bp.post("/logout")
@require_auth
def logout_route():
    get_services().access.logout(g.token)
    return jsonify({"message": "Logged out"}), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    return jsonify({"user": g.current_user.to_dict()}), 200
