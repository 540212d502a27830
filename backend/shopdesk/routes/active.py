# Overview: Flask API routes for active (sellable) inventory.

"""
Active inventory routes.

- Read and manual stock deduction: admin, employee
- Edit and delete: admin only
"""

from flask import Blueprint, request, jsonify, current_app

from ..models import ActiveItem
from ..services import get_services
from ..services.inventory_service import InsufficientStockError
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_item,
    coerce_int,
    ValidationError,
    NotFoundError,
)
from ..decorators import require_auth, require_permission

# unique_code is immutable, so it is never writable here
ACTIVE_POLICY = ModelValidationPolicy(
    writable_fields={"name", "price", "tags", "brand", "quantity", "is_taxable"},
    aliases={"isTaxable": "is_taxable"},
)

active_bp = Blueprint("active", __name__, url_prefix="/api/active")


@active_bp.get("")
@require_auth
@require_permission("VIEW_ACTIVE")
def list_active():
    """
    Search active inventory, newest first.

    Query params:
    - name: case-insensitive substring
    - tag: exact tag
    - brand: case-insensitive substring
    """
    items = get_services().items.list_active(
        name=request.args.get("name"),
        tag=request.args.get("tag"),
        brand=request.args.get("brand"),
    )
    return jsonify([item.to_dict() for item in items]), 200


@active_bp.get("/<string:unique_code>")
@require_auth
@require_permission("VIEW_ACTIVE")
def get_active_by_code(unique_code: str):
    """Look up an item by the code scanned from its QR label."""
    try:
        item = get_services().items.get_active_by_code(unique_code)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify(item.to_dict()), 200


@active_bp.put("/<int:item_id>/quantity")
@require_auth
@require_permission("DEDUCT_ACTIVE_STOCK")
def deduct_active_quantity(item_id: int):
    """
    Reduce stock outside a sale.

    Body: {quantitySold: int > 0}
    """
    data = request.get_json(silent=True) or {}
    try:
        quantity_sold = coerce_int(data.get("quantitySold"), "quantitySold")
        item = get_services().items.deduct_stock(item_id, quantity_sold)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except InsufficientStockError as e:
        return jsonify({"error": str(e), "details": e.details}), 400

    return jsonify({"message": "Active Item quantity updated", "activeItem": item.to_dict()}), 200


@active_bp.put("/<int:item_id>")
@require_auth
@require_permission("UPDATE_ACTIVE")
def update_active(item_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=ActiveItem, payload=payload, policy=ACTIVE_POLICY, partial=True)
        enforce_rules_item(patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        item = get_services().items.update_active(item_id, patch)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to update active item")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(item.to_dict()), 200


@active_bp.delete("/<int:item_id>")
@require_auth
@require_permission("DELETE_ACTIVE")
def delete_active(item_id: int):
    try:
        get_services().items.delete_active(item_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify({"message": "Active Item removed"}), 200
