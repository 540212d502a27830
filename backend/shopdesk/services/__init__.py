# Overview: Service construction. Each service receives the storage session
# explicitly; the app factory builds one container per application.

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from flask import current_app
from sqlalchemy.orm import Session

from .approval_service import ApprovalWorkflow
from .auth_service import AccessGate
from .inventory_service import ItemStore
from .reporting_service import AnalyticsReporter
from .sales_service import SaleRecorder
from .session_service import SessionManager

EXTENSION_KEY = "shopdesk.services"


@dataclass
class ServiceContainer:
    sessions: SessionManager
    access: AccessGate
    items: ItemStore
    approvals: ApprovalWorkflow
    sales: SaleRecorder
    reports: AnalyticsReporter


def build_services(session: Session, config) -> ServiceContainer:
    """
    Wire every service against one session handle.

    config is any mapping with the Config keys (app.config in practice).
    """
    sessions = SessionManager(session, ttl=timedelta(minutes=int(config["SESSION_TTL_MINUTES"])))
    items = ItemStore(session)
    return ServiceContainer(
        sessions=sessions,
        access=AccessGate(
            session,
            sessions,
            bcrypt_rounds=int(config["BCRYPT_ROUNDS"]),
            special_username=config.get("SPECIAL_EMPLOYEE_USERNAME"),
            special_password=config.get("SPECIAL_EMPLOYEE_PASSWORD"),
        ),
        items=items,
        approvals=ApprovalWorkflow(session, items),
        sales=SaleRecorder(session, items),
        reports=AnalyticsReporter(session, items, low_stock_threshold=int(config["LOW_STOCK_THRESHOLD"])),
    )


def get_services() -> ServiceContainer:
    """Services built for the current application."""
    return current_app.extensions[EXTENSION_KEY]
