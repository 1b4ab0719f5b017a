import csv
import io
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional
from core.config import settings
from schemas.order_schemas import OrderOut

DATE_RANGES = ("all", "today", "week", "month")

ORDER_CSV_HEADER = ["Order ID", "Customer Name", "Phone", "Address", "Total Price", "Status", "Date"]
INVENTORY_CSV_HEADER = ["SKU", "Product Name", "Category", "Stock", "Unit", "Price", "Cost", "Profit Margin"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _to_csv(header: list, rows: Iterable[list]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue()


def low_stock_level(product) -> int:
    return product.min_stock_level or settings.LOW_STOCK_THRESHOLD


def profit_margin(product) -> float:
    if not product.cost_price:
        return 0.0
    return (product.price - product.cost_price) / product.cost_price * 100


class ReportService:
    """Admin dashboard figures and CSV exports, computed in memory."""

    @staticmethod
    def filter_orders(orders: Iterable[OrderOut], search: Optional[str] = None,
                      status: Optional[str] = None, date_range: str = "all",
                      now: Optional[datetime] = None) -> list[OrderOut]:
        """
        Args:
            search: matched against customer name (case-insensitive), phone and id
            status: exact status, or None/"all" for every status
            date_range: one of all, today, week (7 days), month (30 days)
        """
        now = now or _utcnow()
        term = (search or "").strip()
        result = []

        for order in orders:
            if term and not (
                term.lower() in order.customer_name.lower()
                or term in order.phone
                or term in str(order.id)
            ):
                continue

            if status and status != "all" and order.status != status:
                continue

            if date_range == "today" and order.created_at.date() != now.date():
                continue
            if date_range == "week" and order.created_at < now - timedelta(days=7):
                continue
            if date_range == "month" and order.created_at < now - timedelta(days=30):
                continue

            result.append(order)
        return result

    @staticmethod
    def order_analytics(orders: Iterable[OrderOut], now: Optional[datetime] = None) -> dict:
        orders = list(orders)
        now = now or _utcnow()
        revenue = sum(order.total_amount for order in orders)

        def count(status):
            return sum(1 for order in orders if order.status == status)

        return {
            "total_revenue": revenue,
            "total_orders": len(orders),
            "pending_orders": count("pending"),
            "processing_orders": count("processing"),
            "shipped_orders": count("shipped"),
            "delivered_orders": count("delivered"),
            "cancelled_orders": count("cancelled"),
            "incomplete_orders": count("incomplete"),
            "today_orders": sum(1 for order in orders if order.created_at.date() == now.date()),
            "avg_order_value": revenue / len(orders) if orders else 0,
        }

    @staticmethod
    def inventory_analytics(products: Iterable) -> dict:
        products = list(products)
        total_value = sum(p.price * p.stock for p in products)
        total_cost = sum((p.cost_price or 0) * p.stock for p in products)
        profit = total_value - total_cost

        return {
            "total_value": total_value,
            "total_cost": total_cost,
            "total_profit": profit,
            "profit_margin": profit / total_cost * 100 if total_cost > 0 else 0,
            "low_stock": sum(1 for p in products if p.stock < low_stock_level(p)),
            "out_of_stock": sum(1 for p in products if p.stock <= 0),
            "total_products": len(products),
        }

    @staticmethod
    def orders_csv(orders: Iterable[OrderOut]) -> str:
        rows = [
            [
                f"#{str(order.id)[-8:].upper()}",
                order.customer_name,
                order.phone,
                order.address,
                order.total_amount,
                order.status,
                order.created_at.date().isoformat(),
            ]
            for order in orders
        ]
        return _to_csv(ORDER_CSV_HEADER, rows)

    @staticmethod
    def inventory_csv(products: Iterable) -> str:
        rows = [
            [
                p.sku or "",
                p.name,
                p.category,
                p.stock,
                p.unit or "pcs",
                p.price,
                p.cost_price or 0,
                f"{profit_margin(p):.2f}%",
            ]
            for p in products
        ]
        return _to_csv(INVENTORY_CSV_HEADER, rows)

    @staticmethod
    def export_filename(kind: str, now: Optional[datetime] = None) -> str:
        return f"{kind}-{(now or _utcnow()).date().isoformat()}.csv"
