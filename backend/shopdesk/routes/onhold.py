# Overview: Flask API routes for staged (on-hold) inventory.

"""
On-hold inventory routes.

- Staff (admin, employee) stage items and list the queue
- Admins approve, reject and delete
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..models import OnHoldItem
from ..services import get_services
from ..services.approval_service import ApprovalError
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_item,
    ValidationError,
    ConflictError,
    NotFoundError,
)
from ..decorators import require_auth, require_permission

ON_HOLD_POLICY = ModelValidationPolicy(
    writable_fields={"name", "price", "tags", "brand", "quantity", "is_taxable"},
    required_on_create={"name", "price"},
    aliases={"isTaxable": "is_taxable"},
)

onhold_bp = Blueprint("onhold", __name__, url_prefix="/api/onhold")


@onhold_bp.get("")
@require_auth
@require_permission("VIEW_ONHOLD")
def list_on_hold():
    """
    List staged items, newest first.

    Query params:
    - status: pending | approved | rejected (optional)
    """
    try:
        items = get_services().items.list_on_hold(status=request.args.get("status"))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify([item.to_dict() for item in items]), 200


@onhold_bp.post("")
@require_auth
@require_permission("CREATE_ONHOLD")
def create_on_hold():
    """Stage a new item. A unique code is generated server-side."""
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=OnHoldItem, payload=payload, policy=ON_HOLD_POLICY, partial=False)
        enforce_rules_item(patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        item = get_services().items.create_on_hold(patch, added_by_user_id=g.current_user.id)
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to add item to On-Hold Inventory")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(item.to_dict()), 201


@onhold_bp.put("/<int:on_hold_id>/approve")
@require_auth
@require_permission("APPROVE_ONHOLD")
def approve_on_hold(on_hold_id: int):
    try:
        active = get_services().approvals.approve(on_hold_id, approver_id=g.current_user.id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except (ApprovalError, ConflictError) as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to approve item")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({
        "message": "Item approved and moved to Active Inventory",
        "activeItem": active.to_dict(),
    }), 200


@onhold_bp.put("/<int:on_hold_id>/reject")
@require_auth
@require_permission("REJECT_ONHOLD")
def reject_on_hold(on_hold_id: int):
    try:
        on_hold = get_services().approvals.reject(on_hold_id, approver_id=g.current_user.id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ApprovalError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to reject item")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"message": "On-Hold Item rejected", "onHoldItem": on_hold.to_dict()}), 200


@onhold_bp.delete("/<int:on_hold_id>")
@require_auth
@require_permission("DELETE_ONHOLD")
def delete_on_hold(on_hold_id: int):
    try:
        get_services().approvals.delete(on_hold_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify({"message": "On-Hold Item removed"}), 200
