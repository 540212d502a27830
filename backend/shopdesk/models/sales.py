from __future__ import annotations

from ..extensions import db
from shopdesk.money import format_money
from shopdesk.time_utils import to_utc_z


class Sale(db.Model):
    """
    Completed point-of-sale transaction.

    Immutable once written: there is no update path. Totals are stored
    unrounded (four places) and only rounded in to_dict().
    total_amount = (sub_total - discount_amount) + gst_amount
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.Index("ix_sales_sale_date", "sale_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # Human-readable bill number (e.g., "BILL001")
    bill_number = db.Column(db.String(32), nullable=False, unique=True)

    customer_name = db.Column(db.String(255), nullable=False)
    customer_contact = db.Column(db.String(64), nullable=True)

    discount_percent = db.Column(db.Numeric(5, 2), nullable=False, default=0)
    discount_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    sub_total = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    gst_amount = db.Column(db.Numeric(14, 4), nullable=False, default=0)
    total_amount = db.Column(db.Numeric(14, 4), nullable=False)

    billed_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    sale_date = db.Column(db.DateTime(timezone=True), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    billed_by = db.relationship("User")
    lines = db.relationship(
        "SaleLine",
        backref="sale",
        lazy=True,
        order_by="SaleLine.position",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Sale id={self.id} bill={self.bill_number!r} total={self.total_amount}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "billNumber": self.bill_number,
            "customerName": self.customer_name,
            "customerContact": self.customer_contact,
            "itemsSold": [line.to_dict() for line in self.lines],
            "discountPercent": format_money(self.discount_percent),
            "discountAmount": format_money(self.discount_amount),
            "subTotal": format_money(self.sub_total),
            "gstAmount": format_money(self.gst_amount),
            "totalAmount": format_money(self.total_amount),
            "billedBy": self.billed_by_user_id,
            "billedByUsername": self.billed_by.username if self.billed_by else None,
            "saleDate": to_utc_z(self.sale_date),
            "createdAt": to_utc_z(self.created_at),
        }


class SaleLine(db.Model):
    """
    One sold item on a sale.

    item_id is not a foreign key: the active item row is
    deleted when it sells out, so the code/name are snapshotted here for
    receipts and history.
    """
    __tablename__ = "sale_lines"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id"), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False)

    item_id = db.Column(db.Integer, nullable=False, index=True)
    unique_code = db.Column(db.String(64), nullable=False)
    item_name = db.Column(db.String(255), nullable=False)
    is_taxable = db.Column(db.Boolean, nullable=False, default=False)

    quantity = db.Column(db.Integer, nullable=False)
    price_at_sale = db.Column(db.Numeric(12, 2), nullable=False)
    line_total = db.Column(db.Numeric(12, 2), nullable=False)
    gst_amount = db.Column(db.Numeric(14, 4), nullable=False, default=0)

    def to_dict(self) -> dict:
        return {
            "item": self.item_id,
            "uniqueCode": self.unique_code,
            "name": self.item_name,
            "isTaxable": self.is_taxable,
            "quantity": self.quantity,
            "priceAtSale": format_money(self.price_at_sale),
            "lineTotal": format_money(self.line_total),
            "gstAmount": format_money(self.gst_amount),
        }
