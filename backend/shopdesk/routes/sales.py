# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

"""
Sales API routes with permission enforcement.

- Record a sale and read history: admin, employee
- Analytics and low-stock alerts: admin
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..services import get_services
from ..services.inventory_service import InsufficientStockError
from ..services.sales_service import LineItemRequest, SaleError
from ..time_utils import parse_iso_date
from ..validation import coerce_decimal, coerce_int, coerce_str, ValidationError, NotFoundError
from ..decorators import require_auth, require_permission


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


def _parse_line_items(raw) -> list[LineItemRequest]:
    """
    itemsSold: [{item: <active item id | unique code>, quantity: int}]

    Integer refs are item ids, string refs are unique codes.
    """
    if not isinstance(raw, list) or not raw:
        raise ValidationError("No items provided for sale")

    line_items = []
    for position, entry in enumerate(raw, start=1):
        if not isinstance(entry, dict):
            raise ValidationError(f"Line {position}: expected an object")
        item_ref = entry.get("item")
        if item_ref is None or isinstance(item_ref, bool) or not isinstance(item_ref, (int, str)):
            raise ValidationError(f"Line {position}: item is required")
        if isinstance(item_ref, str):
            item_ref = item_ref.strip()
            if not item_ref:
                raise ValidationError(f"Line {position}: item is required")
        quantity = coerce_int(entry.get("quantity"), f"Line {position}: quantity")
        if quantity <= 0:
            raise ValidationError(f"Line {position}: quantity must be > 0")
        line_items.append(LineItemRequest(item_ref=item_ref, quantity=quantity))
    return line_items


def _optional_int_arg(name: str) -> int | None:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return None
    return coerce_int(raw, name)


@sales_bp.post("")
@require_auth
@require_permission("RECORD_SALE")
def record_sale_route():
    """
    Record a sale, deduct stock and return the bill.

    Body: {customerName, customerContact?, itemsSold, discount?, discountAmount?}
    """
    data = request.get_json(silent=True) or {}

    try:
        line_items = _parse_line_items(data.get("itemsSold"))
        discount_percent = coerce_decimal(data.get("discount") or 0, "discount")
        discount_amount = None
        if data.get("discountAmount") is not None:
            discount_amount = coerce_decimal(data["discountAmount"], "discountAmount")

        sale = get_services().sales.record_sale(
            customer_name=coerce_str(data.get("customerName"), "customerName"),
            customer_contact=coerce_str(data.get("customerContact"), "customerContact", required=False),
            line_items=line_items,
            discount_percent=discount_percent,
            discount_amount=discount_amount,
            billed_by_user_id=g.current_user.id,
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except InsufficientStockError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except SaleError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to record sale")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(sale.to_dict()), 201


@sales_bp.get("")
@require_auth
@require_permission("VIEW_SALES")
def list_sales_route():
    """
    Sales history, newest first.

    Query params:
    - date: YYYY-MM-DD (optional, UTC day)
    """
    try:
        day = parse_iso_date(request.args.get("date"))
    except ValueError:
        return jsonify({"error": "date must be YYYY-MM-DD"}), 400

    sales = get_services().sales.list_sales(day)
    return jsonify([sale.to_dict() for sale in sales]), 200


@sales_bp.get("/analytics")
@require_auth
@require_permission("VIEW_ANALYTICS")
def analytics_route():
    """Query params: year, month (both optional, applied independently)."""
    try:
        report = get_services().reports.sales_analytics(
            year=_optional_int_arg("year"),
            month=_optional_int_arg("month"),
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(report), 200


@sales_bp.get("/lowstock")
@require_auth
@require_permission("VIEW_LOW_STOCK")
def low_stock_route():
    """Query params: threshold (optional, defaults to LOW_STOCK_THRESHOLD)."""
    try:
        items = get_services().reports.low_stock(_optional_int_arg("threshold"))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify([item.to_dict() for item in items]), 200


@sales_bp.get("/<int:sale_id>")
@require_auth
@require_permission("VIEW_SALES")
def get_sale_route(sale_id: int):
    try:
        sale = get_services().sales.get_sale(sale_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify(sale.to_dict()), 200
