from __future__ import annotations

from sqlalchemy.orm import declared_attr

from ..extensions import db
from shopdesk.money import format_money
from shopdesk.time_utils import to_utc_z

STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"
ON_HOLD_STATUSES = (STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED)


class InventoryItemMixin:
    """
    Columns shared by staged (on-hold) and sellable (active) inventory.

    unique_code is generated once at staging time and never changes; it is
    what the shop's QR labels encode.
    """
    id = db.Column(db.Integer, primary_key=True)

    unique_code = db.Column(db.String(64), nullable=False, unique=True, index=True)
    name = db.Column(db.String(255), nullable=False)

    # Decimal, two places
    price = db.Column(db.Numeric(12, 2), nullable=False)

    # Sorted, de-duplicated list of tag strings
    tags = db.Column(db.JSON, nullable=False, default=list)
    brand = db.Column(db.String(255), nullable=True)

    quantity = db.Column(db.Integer, nullable=False, default=1)
    is_taxable = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    @declared_attr
    def added_by_user_id(cls):
        return db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)

    @declared_attr
    def added_by(cls):
        return db.relationship("User", foreign_keys=f"{cls.__name__}.added_by_user_id")

    def _base_dict(self) -> dict:
        return {
            "id": self.id,
            "uniqueCode": self.unique_code,
            "name": self.name,
            "price": format_money(self.price),
            "tags": list(self.tags or []),
            "brand": self.brand,
            "quantity": self.quantity,
            "isTaxable": self.is_taxable,
            "addedBy": self.added_by_user_id,
            "addedByUsername": self.added_by.username if self.added_by else None,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }


class OnHoldItem(InventoryItemMixin, db.Model):
    """Inventory staged by staff, waiting for an admin decision."""
    __tablename__ = "on_hold_items"
    __table_args__ = (
        db.Index("ix_on_hold_items_status", "status"),
        {"sqlite_autoincrement": True},
    )

    status = db.Column(db.String(16), nullable=False, default=STATUS_PENDING)

    # Set when an admin approves or rejects
    approved_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    approved_by = db.relationship("User", foreign_keys=[approved_by_user_id])

    def __repr__(self) -> str:
        return f"<OnHoldItem id={self.id} code={self.unique_code!r} status={self.status}>"

    def to_dict(self) -> dict:
        data = self._base_dict()
        data["status"] = self.status
        data["approvedBy"] = self.approved_by_user_id
        return data


class ActiveItem(InventoryItemMixin, db.Model):
    """
    Approved, sellable inventory.

    Rows are only created through approval and are removed when a sale
    takes the quantity to zero.
    """
    __tablename__ = "active_items"
    __table_args__ = (
        db.Index("ix_active_items_quantity", "quantity"),
        {"sqlite_autoincrement": True},
    )

    approved_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    approved_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    approved_by = db.relationship("User", foreign_keys=[approved_by_user_id])

    def __repr__(self) -> str:
        return f"<ActiveItem id={self.id} code={self.unique_code!r} qty={self.quantity}>"

    def to_dict(self) -> dict:
        data = self._base_dict()
        data["approvedBy"] = self.approved_by_user_id
        data["approvedByUsername"] = self.approved_by.username if self.approved_by else None
        data["approvedAt"] = to_utc_z(self.approved_at)
        return data
