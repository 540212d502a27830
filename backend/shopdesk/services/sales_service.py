"""
Sale Recorder - point-of-sale billing

Validates stock, deducts it, clears stale on-hold duplicates and writes one
immutable Sale with its lines and totals:

    total_amount = (sub_total - discount_amount) + gst_amount
    gst_amount   = sum(price * quantity * 0.18) over taxable lines

The whole sale runs in a single database transaction. If any line fails
(missing item, not enough stock) every deduction already applied by this
call is rolled back and the failing line's error is raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from ..models import Sale, SaleLine
from ..money import ZERO, round_money
from ..validation import NotFoundError, ValidationError, enforce_rules_discount
from shopdesk.time_utils import day_bounds, utcnow
from .inventory_service import InsufficientStockError, ItemStore

logger = logging.getLogger(__name__)

# Flat GST applied to taxable lines
GST_RATE = Decimal("0.18")

BILL_PREFIX = "BILL"
BILL_PAD = 3


class SaleError(Exception):
    """Raised for sale operation errors."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


@dataclass(frozen=True)
class LineItemRequest:
    """One requested line: an active item id or unique code, and a quantity."""
    item_ref: int | str
    quantity: int


def line_gst(line_total: Decimal, is_taxable: bool) -> Decimal:
    return line_total * GST_RATE if is_taxable else ZERO


def compute_total(sub_total: Decimal, discount_amount: Decimal, gst_amount: Decimal) -> Decimal:
    return (sub_total - discount_amount) + gst_amount


def discount_from_percent(sub_total: Decimal, discount_percent: Decimal) -> Decimal:
    return round_money(sub_total * discount_percent / Decimal("100"))


def format_bill_number(number: int) -> str:
    return f"{BILL_PREFIX}{number:0{BILL_PAD}d}"


class SaleRecorder:
    def __init__(self, session: Session, items: ItemStore):
        self.session = session
        self.items = items

    def _next_bill_number(self) -> str:
        last = self.session.query(Sale.bill_number).order_by(Sale.id.desc()).first()
        if not last:
            return format_bill_number(1)
        try:
            return format_bill_number(int(last.bill_number[len(BILL_PREFIX):]) + 1)
        except ValueError:
            raise SaleError(f"Unrecognised bill number {last.bill_number!r}")

    def _apply_line(self, position: int, request: LineItemRequest) -> SaleLine:
        if request.quantity <= 0:
            raise ValidationError(f"Line {position}: quantity must be > 0")

        item = self.items.find_active_for_update(request.item_ref)
        if not item:
            raise NotFoundError(f"Item with ID {request.item_ref} not found")

        if request.quantity > item.quantity:
            raise InsufficientStockError(
                f"Insufficient stock for {item.name}. Available: {item.quantity}",
                details={
                    "line": position,
                    "item": item.id,
                    "uniqueCode": item.unique_code,
                    "requested": request.quantity,
                    "available": item.quantity,
                },
            )

        # Price is captured at deduction time
        price = item.price
        line_total = price * request.quantity

        line = SaleLine(
            position=position,
            item_id=item.id,
            unique_code=item.unique_code,
            item_name=item.name,
            is_taxable=item.is_taxable,
            quantity=request.quantity,
            price_at_sale=price,
            line_total=line_total,
            gst_amount=line_gst(line_total, item.is_taxable),
        )

        item.quantity -= request.quantity
        if item.quantity <= 0:
            self.session.delete(item)
            logger.info("Active item %s (%s) sold out and was removed", item.unique_code, item.name)

        self.items.delete_on_hold_for_code(item.unique_code)

        # Later lines for the same item must see this deduction or deletion
        self.session.flush()
        return line

    def record_sale(
        self,
        *,
        customer_name: str,
        line_items: list[LineItemRequest],
        billed_by_user_id: int,
        customer_contact: str | None = None,
        discount_percent: Decimal = ZERO,
        discount_amount: Decimal | None = None,
    ) -> Sale:
        """
        Record one sale.

        discount_amount is trusted as supplied; when omitted it is derived
        from discount_percent.

        Raises:
            ValidationError: empty sale, bad quantity or discount, blank customer
            NotFoundError: an item reference does not resolve
            InsufficientStockError: a line asks for more than is on hand
        """
        if not line_items:
            raise ValidationError("No items provided for sale")
        if not customer_name or not customer_name.strip():
            raise ValidationError("customerName is required")
        enforce_rules_discount(discount_percent, discount_amount)

        try:
            lines = [
                self._apply_line(position, request)
                for position, request in enumerate(line_items, start=1)
            ]

            sub_total = sum((line.line_total for line in lines), ZERO)
            gst_amount = sum((line.gst_amount for line in lines), ZERO)
            if discount_amount is None:
                discount_amount = discount_from_percent(sub_total, discount_percent)

            sale = Sale(
                bill_number=self._next_bill_number(),
                customer_name=customer_name.strip(),
                customer_contact=(customer_contact or "").strip() or None,
                discount_percent=discount_percent,
                discount_amount=discount_amount,
                sub_total=sub_total,
                gst_amount=gst_amount,
                total_amount=compute_total(sub_total, discount_amount, gst_amount),
                billed_by_user_id=billed_by_user_id,
                sale_date=utcnow(),
                lines=lines,
            )
            self.session.add(sale)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info(
            "Recorded sale %s: %d line(s), total %s",
            sale.bill_number, len(lines), round_money(sale.total_amount),
        )
        return sale

    def get_sale(self, sale_id: int) -> Sale:
        sale = self.session.get(Sale, sale_id)
        if not sale:
            raise NotFoundError("Sale not found")
        return sale

    def list_sales(self, day: date | None = None) -> list[Sale]:
        """All sales, or only those whose sale_date falls on the given UTC day."""
        query = self.session.query(Sale)
        if day is not None:
            start, end = day_bounds(day)
            query = query.filter(Sale.sale_date >= start, Sale.sale_date < end)
        return query.order_by(Sale.sale_date.desc(), Sale.id.desc()).all()
