# Overview: Admin decisions on staged inventory.

"""
Approval Workflow

A staged (on-hold) item is either approved into active inventory or
rejected. Both transitions are one-way from "pending". Approved rows are
deleted once their ActiveItem exists; rejected rows stay until an admin
deletes them.
"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from ..models import ActiveItem, OnHoldItem
from ..models.inventory import STATUS_APPROVED, STATUS_PENDING, STATUS_REJECTED
from ..validation import ConflictError
from shopdesk.time_utils import utcnow
from .concurrency import lock_for_update
from .inventory_service import ItemStore

logger = logging.getLogger(__name__)


class ApprovalError(ConflictError):
    """Transition not allowed from the item's current status."""


class ApprovalWorkflow:
    def __init__(self, session: Session, items: ItemStore):
        self.session = session
        self.items = items

    def _load_pending(self, on_hold_id: int, action: str) -> OnHoldItem:
        on_hold = self.items.get_on_hold(on_hold_id)
        if on_hold.status != STATUS_PENDING:
            raise ApprovalError(f"Cannot {action} an item that is already {on_hold.status}")
        return on_hold

    def approve(self, on_hold_id: int, approver_id: int) -> ActiveItem:
        """
        Copy the staged item into active inventory and drop the staged row.

        Raises NotFoundError, ApprovalError (not pending) or ConflictError
        (code already active).
        """
        on_hold = self._load_pending(on_hold_id, "approve")

        existing = lock_for_update(
            self.session.query(ActiveItem).filter_by(unique_code=on_hold.unique_code)
        ).first()
        if existing:
            raise ConflictError(f"Item {on_hold.unique_code} is already active")

        now = utcnow()
        active = ActiveItem(
            unique_code=on_hold.unique_code,
            name=on_hold.name,
            price=on_hold.price,
            tags=list(on_hold.tags or []),
            brand=on_hold.brand,
            quantity=on_hold.quantity,
            is_taxable=on_hold.is_taxable,
            added_by_user_id=on_hold.added_by_user_id,
            approved_by_user_id=approver_id,
            approved_at=now,
        )
        self.session.add(active)

        on_hold.status = STATUS_APPROVED
        on_hold.approved_by_user_id = approver_id
        self.session.flush()
        self.session.delete(on_hold)

        self.session.commit()
        logger.info("Approved item %s into active inventory (by user %s)", active.unique_code, approver_id)
        return active

    def reject(self, on_hold_id: int, approver_id: int) -> OnHoldItem:
        on_hold = self._load_pending(on_hold_id, "reject")
        on_hold.status = STATUS_REJECTED
        on_hold.approved_by_user_id = approver_id
        self.session.commit()
        logger.info("Rejected item %s (by user %s)", on_hold.unique_code, approver_id)
        return on_hold

    def delete(self, on_hold_id: int) -> None:
        """Hard delete. Status is not checked here; the route is admin-only."""
        on_hold = self.items.get_on_hold(on_hold_id)
        self.session.delete(on_hold)
        self.session.commit()
