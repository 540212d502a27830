# Overview: Flask API routes for account administration.

from flask import Blueprint, request, jsonify, current_app

from ..services import get_services
from ..validation import NotFoundError
from ..decorators import require_auth, require_permission

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@admin_bp.get("/users")
@require_auth
@require_permission("MANAGE_USERS")
def list_users():
    users = get_services().access.list_users()
    return jsonify({"users": [user.to_dict() for user in users], "count": len(users)})


@admin_bp.put("/users/<int:user_id>/approve")
@require_auth
@require_permission("MANAGE_USERS")
def approve_user(user_id: int):
    """
    Approve or disapprove an account.

    Body: {isApproved: bool}
    """
    data = request.get_json(silent=True) or {}
    is_approved = data.get("isApproved")
    if not isinstance(is_approved, bool):
        return jsonify({"error": "isApproved must be a boolean"}), 400

    try:
        user = get_services().access.set_approval(user_id, is_approved)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to update user approval")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"user": user.to_dict()}), 200
