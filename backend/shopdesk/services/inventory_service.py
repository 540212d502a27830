# Overview: Service-layer operations for on-hold and active inventory.

from __future__ import annotations

import logging
import secrets
import string

from sqlalchemy.orm import Session

from ..models import ActiveItem, OnHoldItem
from ..models.inventory import STATUS_PENDING, ON_HOLD_STATUSES
from ..validation import ConflictError, NotFoundError, ValidationError
from shopdesk.time_utils import utcnow
from .concurrency import lock_for_update

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_SUFFIX_LENGTH = 6
CODE_ATTEMPTS = 5


class InsufficientStockError(Exception):
    """Requested quantity exceeds what is on the shelf."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


def generate_unique_code(now=None) -> str:
    """YYYYMMDD_HHMMSS_XXXXXX, the value printed into item QR labels."""
    now = now or utcnow()
    suffix = "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_SUFFIX_LENGTH))
    return f"{now:%Y%m%d}_{now:%H%M%S}_{suffix}"


class ItemStore:
    """
    Owns OnHoldItem and ActiveItem rows.

    unique_code is unique across both sets at creation time.
    """

    def __init__(self, session: Session):
        self.session = session

    # -- codes --

    def code_in_use(self, code: str) -> bool:
        return (
            self.session.query(OnHoldItem.id).filter_by(unique_code=code).first() is not None
            or self.session.query(ActiveItem.id).filter_by(unique_code=code).first() is not None
        )

    def allocate_code(self) -> str:
        for _ in range(CODE_ATTEMPTS):
            code = generate_unique_code()
            if not self.code_in_use(code):
                return code
        raise ConflictError("Could not allocate a unique item code")

    # -- on-hold --

    def create_on_hold(self, patch: dict, added_by_user_id: int) -> OnHoldItem:
        """
        Stage a new item as pending. patch is a validated column dict
        (name, price, tags, brand, quantity, is_taxable).
        """
        item = OnHoldItem(
            unique_code=self.allocate_code(),
            name=patch["name"],
            price=patch["price"],
            tags=patch.get("tags") or [],
            brand=patch.get("brand"),
            quantity=patch.get("quantity", 1),
            is_taxable=bool(patch.get("is_taxable", False)),
            added_by_user_id=added_by_user_id,
            status=STATUS_PENDING,
        )
        self.session.add(item)
        self.session.commit()
        logger.info("Staged item %s (%s) qty=%s", item.unique_code, item.name, item.quantity)
        return item

    def list_on_hold(self, status: str | None = None) -> list[OnHoldItem]:
        query = self.session.query(OnHoldItem)
        if status:
            if status not in ON_HOLD_STATUSES:
                raise ValidationError(f"status must be one of: {', '.join(ON_HOLD_STATUSES)}")
            query = query.filter(OnHoldItem.status == status)
        return query.order_by(OnHoldItem.created_at.desc(), OnHoldItem.id.desc()).all()

    def get_on_hold(self, on_hold_id: int) -> OnHoldItem:
        item = self.session.get(OnHoldItem, on_hold_id)
        if not item:
            raise NotFoundError("On-Hold Item not found")
        return item

    def delete_on_hold_for_code(self, unique_code: str) -> int:
        """Drop staged duplicates of a code. Caller commits."""
        return self.session.query(OnHoldItem).filter(
            OnHoldItem.unique_code == unique_code,
        ).delete(synchronize_session="fetch")

    # -- active --

    def list_active(
        self,
        *,
        name: str | None = None,
        tag: str | None = None,
        brand: str | None = None,
    ) -> list[ActiveItem]:
        """
        Case-insensitive substring match on name and brand, exact tag
        membership. Newest first.
        """
        query = self.session.query(ActiveItem)
        if name:
            query = query.filter(ActiveItem.name.ilike(f"%{name}%"))
        if brand:
            query = query.filter(ActiveItem.brand.ilike(f"%{brand}%"))

        items = query.order_by(ActiveItem.created_at.desc(), ActiveItem.id.desc()).all()

        # JSON containment is dialect specific; tags are small
        if tag:
            items = [item for item in items if tag in (item.tags or [])]
        return items

    def get_active(self, item_id: int) -> ActiveItem:
        item = self.session.get(ActiveItem, item_id)
        if not item:
            raise NotFoundError("Active Item not found")
        return item

    def get_active_by_code(self, unique_code: str) -> ActiveItem:
        item = self.session.query(ActiveItem).filter_by(unique_code=unique_code).first()
        if not item:
            raise NotFoundError("Active Item not found")
        return item

    def find_active_for_update(self, item_ref) -> ActiveItem | None:
        """
        Resolve an item reference (id or unique code) with a row lock.

        Returns None when nothing matches.
        """
        query = self.session.query(ActiveItem)
        if isinstance(item_ref, int) and not isinstance(item_ref, bool):
            query = query.filter(ActiveItem.id == item_ref)
        else:
            query = query.filter(ActiveItem.unique_code == str(item_ref))
        return lock_for_update(query).first()

    def update_active(self, item_id: int, patch: dict) -> ActiveItem:
        """Apply a validated partial update (unique_code is never writable)."""
        item = self.get_active(item_id)
        for key, value in patch.items():
            setattr(item, key, value)
        self.session.commit()
        return item

    def deduct_stock(self, item_id: int, quantity_sold: int) -> ActiveItem:
        """
        Manual stock deduction outside a sale.

        Unlike a sale, the row is kept even when it reaches zero.
        """
        if quantity_sold <= 0:
            raise ValidationError("quantitySold must be > 0")

        item = lock_for_update(
            self.session.query(ActiveItem).filter(ActiveItem.id == item_id)
        ).first()
        if not item:
            raise NotFoundError("Active Item not found")

        if item.quantity < quantity_sold:
            self.session.rollback()
            raise InsufficientStockError(
                "Not enough stock available",
                details={
                    "item": item_id,
                    "requested": quantity_sold,
                    "available": item.quantity,
                },
            )

        item.quantity -= quantity_sold
        self.session.commit()
        return item

    def delete_active(self, item_id: int) -> None:
        item = self.get_active(item_id)
        self.session.delete(item)
        self.session.commit()
        logger.info("Deleted active item %s", item.unique_code)

    def low_stock(self, threshold: int) -> list[ActiveItem]:
        """Active items with quantity <= threshold, in storage order."""
        return (
            self.session.query(ActiveItem)
            .filter(ActiveItem.quantity <= threshold)
            .order_by(ActiveItem.id)
            .all()
        )
