# Overview: Service-layer operations for reporting; encapsulates aggregate queries.

from __future__ import annotations

from sqlalchemy import extract, func
from sqlalchemy.orm import Session

from ..models import ActiveItem, Sale, SaleLine
from ..money import format_money, to_decimal
from ..validation import ValidationError
from .inventory_service import ItemStore


class ReportError(ValidationError):
    """Raised when report parameters are invalid."""
    pass


def _check_period(year: int | None, month: int | None) -> None:
    if year is not None and not (1 <= year <= 9999):
        raise ReportError("year must be between 1 and 9999")
    if month is not None and not (1 <= month <= 12):
        raise ReportError("month must be between 1 and 12")


class AnalyticsReporter:
    def __init__(self, session: Session, items: ItemStore, low_stock_threshold: int = 5):
        self.session = session
        self.items = items
        self.low_stock_threshold = low_stock_threshold

    def sales_analytics(self, *, year: int | None = None, month: int | None = None) -> dict:
        """
        Totals over sales whose sale_date falls in the given year and/or month.

        totalSales sums price_at_sale per line, without multiplying by
        quantity; grossSales carries price_at_sale * quantity alongside it.
        """
        _check_period(year, month)

        query = self.session.query(
            func.coalesce(func.sum(SaleLine.price_at_sale), 0).label("total_sales"),
            func.coalesce(func.sum(SaleLine.quantity), 0).label("items_sold"),
            func.count(func.distinct(Sale.id)).label("bills"),
            func.coalesce(func.sum(SaleLine.line_total), 0).label("gross_sales"),
        ).select_from(Sale).join(SaleLine, SaleLine.sale_id == Sale.id)

        if year is not None:
            query = query.filter(extract("year", Sale.sale_date) == year)
        if month is not None:
            query = query.filter(extract("month", Sale.sale_date) == month)

        row = query.one()
        return {
            "year": year,
            "month": month,
            "totalSales": format_money(to_decimal(row.total_sales)),
            "totalItemsSold": int(row.items_sold or 0),
            "totalBills": int(row.bills or 0),
            "grossSales": format_money(to_decimal(row.gross_sales)),
        }

    def low_stock(self, threshold: int | None = None) -> list[ActiveItem]:
        if threshold is None:
            threshold = self.low_stock_threshold
        if threshold < 0:
            raise ReportError("threshold must be >= 0")
        return self.items.low_stock(threshold)
