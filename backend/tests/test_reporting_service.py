"""
Sales analytics and low-stock report tests.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from shopdesk.models import Sale, SaleLine
from shopdesk.services.reporting_service import ReportError


@pytest.fixture
def dated_sales(db_session, employee_user):
    """Three bills on fixed dates: (date, [(price, qty), ...])."""
    specs = [
        (datetime(2024, 3, 10, 12, 0), [("100.00", 2)]),
        (datetime(2024, 4, 5, 9, 30), [("50.00", 1)]),
        (datetime(2023, 3, 15, 18, 45), [("10.00", 3)]),
    ]
    for number, (sale_date, lines) in enumerate(specs, start=1):
        sale_lines = []
        for position, (price, qty) in enumerate(lines, start=1):
            price = Decimal(price)
            sale_lines.append(SaleLine(
                position=position,
                item_id=position,
                unique_code=f"CODE{number}{position}",
                item_name="Item",
                is_taxable=False,
                quantity=qty,
                price_at_sale=price,
                line_total=price * qty,
                gst_amount=Decimal("0"),
            ))
        sub_total = sum((line.line_total for line in sale_lines), Decimal("0"))
        db_session.add(Sale(
            bill_number=f"BILL{number:03d}",
            customer_name="Customer",
            discount_percent=Decimal("0"),
            discount_amount=Decimal("0"),
            sub_total=sub_total,
            gst_amount=Decimal("0"),
            total_amount=sub_total,
            billed_by_user_id=employee_user.id,
            sale_date=sale_date,
            lines=sale_lines,
        ))
    db_session.commit()


class TestSalesAnalytics:

    def test_all_time(self, services, dated_sales):
        report = services.reports.sales_analytics()

        # totalSales sums unit prices; grossSales multiplies by quantity
        assert report["totalSales"] == "160.00"
        assert report["grossSales"] == "280.00"
        assert report["totalItemsSold"] == 6
        assert report["totalBills"] == 3

    def test_year_filter(self, services, dated_sales):
        report = services.reports.sales_analytics(year=2024)

        assert report["year"] == 2024
        assert report["totalSales"] == "150.00"
        assert report["totalItemsSold"] == 3
        assert report["totalBills"] == 2

    def test_month_filter_spans_years(self, services, dated_sales):
        report = services.reports.sales_analytics(month=3)

        assert report["totalSales"] == "110.00"
        assert report["totalItemsSold"] == 5
        assert report["totalBills"] == 2

    def test_year_and_month(self, services, dated_sales):
        report = services.reports.sales_analytics(year=2024, month=3)

        assert report["totalSales"] == "100.00"
        assert report["grossSales"] == "200.00"
        assert report["totalItemsSold"] == 2
        assert report["totalBills"] == 1

    def test_empty_period_is_zero(self, services, dated_sales):
        report = services.reports.sales_analytics(year=2025)

        assert report["totalSales"] == "0.00"
        assert report["grossSales"] == "0.00"
        assert report["totalItemsSold"] == 0
        assert report["totalBills"] == 0

    @pytest.mark.parametrize("kwargs", [{"month": 0}, {"month": 13}, {"year": 0}])
    def test_invalid_period(self, services, kwargs):
        with pytest.raises(ReportError):
            services.reports.sales_analytics(**kwargs)


class TestLowStock:

    def test_default_threshold(self, services, make_active_item):
        for qty in (2, 5, 6, 10):
            make_active_item(quantity=qty)

        assert [item.quantity for item in services.reports.low_stock()] == [2, 5]

    def test_explicit_threshold(self, services, make_active_item):
        for qty in (2, 5, 6, 10):
            make_active_item(quantity=qty)

        assert [item.quantity for item in services.reports.low_stock(6)] == [2, 5, 6]
        assert services.reports.low_stock(1) == []

    def test_negative_threshold(self, services):
        with pytest.raises(ReportError):
            services.reports.low_stock(-1)
