import csv
import io
from datetime import datetime, timedelta
from types import SimpleNamespace
from schemas.order_schemas import OrderOut
from services.report_service import ReportService, ORDER_CSV_HEADER, INVENTORY_CSV_HEADER

NOW = datetime(2024, 4, 10, 12, 0)


def _order(order_id, name="Rahim", phone="01712345678", total=1000.0, status="pending", age=timedelta(0)):
    return OrderOut(
        id=order_id,
        customer_name=name,
        phone=phone,
        address="Dhanmondi, Dhaka",
        total_amount=total,
        payment_method="cash_on_delivery",
        status=status,
        created_at=NOW - age,
    )


def _product(**overrides):
    fields = dict(sku="SH-001", name="Cotton Shirt", category="Men", stock=10, unit="pcs",
                  price=990.0, cost_price=600.0, min_stock_level=None)
    fields.update(overrides)
    return SimpleNamespace(**fields)


ORDERS = [
    _order(1, name="Rahim", status="pending"),
    _order(2, name="Karim", phone="01812345678", total=500.0, status="delivered", age=timedelta(days=3)),
    _order(3, name="Salma", phone="01912345678", total=1500.0, status="cancelled", age=timedelta(days=20)),
    _order(4, name="Nasrin", phone="01612345678", total=250.0, status="shipped", age=timedelta(days=60)),
]


def test_filter_by_search_matches_name_phone_and_id():
    assert [o.id for o in ReportService.filter_orders(ORDERS, search="karim", now=NOW)] == [2]
    assert [o.id for o in ReportService.filter_orders(ORDERS, search="0191", now=NOW)] == [3]
    by_id = [_order(987, phone="01700000000"), _order(55, phone="01700000000")]
    assert [o.id for o in ReportService.filter_orders(by_id, search="987", now=NOW)] == [987]


def test_filter_by_status():
    assert [o.id for o in ReportService.filter_orders(ORDERS, status="delivered", now=NOW)] == [2]
    assert len(ReportService.filter_orders(ORDERS, status="all", now=NOW)) == 4


def test_filter_by_date_range():
    assert [o.id for o in ReportService.filter_orders(ORDERS, date_range="today", now=NOW)] == [1]
    assert [o.id for o in ReportService.filter_orders(ORDERS, date_range="week", now=NOW)] == [1, 2]
    assert [o.id for o in ReportService.filter_orders(ORDERS, date_range="month", now=NOW)] == [1, 2, 3]
    assert len(ReportService.filter_orders(ORDERS, date_range="all", now=NOW)) == 4


def test_order_analytics():
    stats = ReportService.order_analytics(ORDERS, now=NOW)

    assert stats["total_revenue"] == 3250.0
    assert stats["total_orders"] == 4
    assert stats["pending_orders"] == 1
    assert stats["delivered_orders"] == 1
    assert stats["cancelled_orders"] == 1
    assert stats["shipped_orders"] == 1
    assert stats["today_orders"] == 1
    assert stats["avg_order_value"] == 812.5


def test_order_analytics_empty():
    stats = ReportService.order_analytics([], now=NOW)

    assert stats["total_orders"] == 0
    assert stats["avg_order_value"] == 0


def test_inventory_analytics():
    products = [
        _product(stock=10, price=100.0, cost_price=50.0),
        _product(stock=2, price=100.0, cost_price=50.0, min_stock_level=5),
        _product(stock=0, price=100.0, cost_price=None),
    ]

    stats = ReportService.inventory_analytics(products)

    assert stats["total_value"] == 1200.0
    assert stats["total_cost"] == 600.0
    assert stats["total_profit"] == 600.0
    assert stats["profit_margin"] == 100.0
    # 10 is not below the default threshold of 10; 2 < 5; 0 < 10
    assert stats["low_stock"] == 2
    assert stats["out_of_stock"] == 1
    assert stats["total_products"] == 3


def test_orders_csv_quotes_every_field():
    order = _order(1712345678901, name='Rahim "Bhai"')

    content = ReportService.orders_csv([order])

    lines = content.splitlines()
    assert lines[0] == ",".join(f'"{h}"' for h in ORDER_CSV_HEADER)
    rows = list(csv.reader(io.StringIO(content)))
    assert rows[1][0] == "#45678901"
    assert rows[1][1] == 'Rahim "Bhai"'
    assert rows[1][6] == "2024-04-10"
    assert lines[1].startswith('"#45678901","Rahim ""Bhai""",')


def test_inventory_csv():
    content = ReportService.inventory_csv([_product()])

    rows = list(csv.reader(io.StringIO(content)))
    assert rows[0] == INVENTORY_CSV_HEADER
    assert rows[1] == ["SH-001", "Cotton Shirt", "Men", "10", "pcs", "990.0", "600.0", "65.00%"]


def test_export_filename():
    assert ReportService.export_filename("orders", NOW) == "orders-2024-04-10.csv"
