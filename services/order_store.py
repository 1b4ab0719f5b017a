import functools
from typing import Iterable, Optional
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
from core.exceptions import InsufficientStockError, ProductNotFoundError, OrderNotFoundError
from models.orders import Order
from models.order_items import OrderItem
from models.products import Product
from models.profiles import Profile
from utils.logger import get_logger

logger = get_logger(__name__)


ORDER_COLUMNS = (
    "id", "customer_id", "customer_name", "phone", "address", "note", "total_amount",
    "payment_method", "payment_number", "status", "created_at",
    "consignment_id", "tracking_code",
)


def _order_row(order: Order) -> dict:
    return {column: getattr(order, column) for column in ORDER_COLUMNS}


def _item_row(item: OrderItem) -> dict:
    # Live product name wins; the snapshot covers renamed or deleted products
    live_name = item.product.name if item.product is not None else None
    return {
        "id": item.id,
        "order_id": item.order_id,
        "product_id": item.product_id,
        "product_name": live_name or item.product_name,
        "quantity": item.quantity,
        "price": item.price,
    }


def _rollback_on_error(method):
    """Reset the session when a read fails so the next query starts clean."""
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except SQLAlchemyError:
            self.db.rollback()
            raise
    return wrapper


def _item_field(item, key: str, default=None):
    if isinstance(item, dict):
        return item.get(key, default)
    return getattr(item, key, default)


class OrderStore:
    """
    Table-style access to orders, order items, products and profiles.

    Methods return plain dicts (raw rows); shape normalization happens in
    the services. Every write commits its own transaction, so a failure
    in one call never leaves the session half-written for the next.
    """

    def __init__(self, db: Session):
        self.db = db

    # -- writes -----------------------------------------------------------

    def place_order_with_stock_check(self, customer_name: str, phone: str, address: str,
                                     total_price: float, items: Iterable, status: str = "pending",
                                     **extra) -> int:
        """
        Validate stock, decrement it and insert the order with its items
        as one transaction.

        Args:
            items: iterable of objects/dicts with product_id, quantity, price
                and optionally name
            extra: additional order columns (note, payment_method, ...)

        Returns:
            The new order id

        Raises:
            ProductNotFoundError: a product does not exist
            InsufficientStockError: a product has less stock than requested
        """
        items = list(items)
        try:
            requested: dict = {}
            for item in items:
                pid = _item_field(item, "product_id")
                requested[pid] = requested.get(pid, 0) + _item_field(item, "quantity")

            products = {
                p.id: p for p in self.db.execute(
                    select(Product).where(Product.id.in_(list(requested))).with_for_update()
                ).scalars()
            }

            missing = [pid for pid in requested if pid not in products]
            if missing:
                raise ProductNotFoundError(missing)

            for pid, quantity in requested.items():
                product = products[pid]
                if product.stock < quantity:
                    raise InsufficientStockError(pid, quantity, product.stock)
                product.stock -= quantity

            order = Order(
                customer_name=customer_name,
                phone=phone,
                address=address,
                total_amount=total_price,
                status=status,
                **extra
            )
            self.db.add(order)
            self.db.flush()  # get order.id

            for item in items:
                pid = _item_field(item, "product_id")
                self.db.add(OrderItem(
                    order_id=order.id,
                    product_id=pid,
                    quantity=_item_field(item, "quantity"),
                    price=_item_field(item, "price"),
                    product_name=_item_field(item, "name") or products[pid].name,
                ))

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.debug(
            "Atomic order placement committed",
            extra={"order_id": order.id, "items": len(items)}
        )
        return order.id

    def insert_order(self, customer_name: str, phone: str, address: str, total_price: float,
                     status: str = "pending", **extra) -> int:
        """Insert a single order row without touching stock."""
        order = Order(
            customer_name=customer_name,
            phone=phone,
            address=address,
            total_amount=total_price,
            status=status,
            **extra
        )
        try:
            self.db.add(order)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return order.id

    def insert_order_items(self, order_id: int, items: Iterable) -> int:
        rows = [
            OrderItem(
                order_id=order_id,
                product_id=_item_field(item, "product_id"),
                quantity=_item_field(item, "quantity"),
                price=_item_field(item, "price"),
                product_name=_item_field(item, "name") or "Unknown product",
            )
            for item in items
        ]
        try:
            self.db.add_all(rows)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return len(rows)

    def update_order_status(self, order_id: int, status: str) -> None:
        order = self.db.get(Order, order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        try:
            order.status = status
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

    def record_consignment(self, order_id: int, consignment_id: Optional[str],
                           tracking_code: Optional[str], status: str) -> None:
        order = self.db.get(Order, order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        try:
            order.consignment_id = consignment_id
            order.tracking_code = tracking_code
            order.status = status
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

    # -- reads ------------------------------------------------------------

    @_rollback_on_error
    def count_orders(self) -> int:
        return self.db.execute(select(func.count(Order.id))).scalar_one()

    @_rollback_on_error
    def fetch_orders_joined(self, offset: int, limit: int) -> list[dict]:
        """Orders newest first with their items and product names."""
        orders = self.db.execute(
            select(Order)
            .options(selectinload(Order.items).joinedload(OrderItem.product))
            .order_by(Order.created_at.desc(), Order.id.desc())
            .offset(offset)
            .limit(limit)
        ).scalars().all()

        rows = []
        for order in orders:
            row = _order_row(order)
            row["items"] = [_item_row(item) for item in order.items]
            rows.append(row)
        return rows

    @_rollback_on_error
    def fetch_orders_flat(self, offset: int, limit: int) -> list[dict]:
        """Order rows only, newest first."""
        columns = [getattr(Order, column) for column in ORDER_COLUMNS]
        result = self.db.execute(
            select(*columns)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return [dict(row._mapping) for row in result]

    @_rollback_on_error
    def get_order(self, order_id: int) -> dict:
        order = self.db.execute(
            select(Order)
            .options(selectinload(Order.items).joinedload(OrderItem.product))
            .where(Order.id == order_id)
        ).scalar_one_or_none()
        if order is None:
            raise OrderNotFoundError(order_id)

        row = _order_row(order)
        row["items"] = [_item_row(item) for item in order.items]
        return row

    @_rollback_on_error
    def fetch_profiles(self) -> list[dict]:
        profiles = self.db.execute(
            select(Profile).order_by(Profile.created_at.desc())
        ).scalars().all()
        return [
            {"id": p.id, "name": p.name, "email": p.email, "phone": p.phone, "created_at": p.created_at}
            for p in profiles
        ]

    @_rollback_on_error
    def fetch_order_stats(self) -> list[dict]:
        """Lightweight projection used to aggregate per-profile statistics."""
        result = self.db.execute(
            select(Order.customer_id, Order.total_amount, Order.created_at, Order.phone)
        )
        return [dict(row._mapping) for row in result]

    @_rollback_on_error
    def fetch_order_contacts(self) -> list[dict]:
        """Projection used to derive guest customers, newest first."""
        result = self.db.execute(
            select(Order.customer_name, Order.phone, Order.address, Order.total_amount, Order.created_at)
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
        return [dict(row._mapping) for row in result]

    def list_products(self, category: Optional[str] = None) -> list[Product]:
        query = select(Product).order_by(Product.created_at.desc(), Product.id.desc())
        if category:
            query = query.where(Product.category == category)
        return list(self.db.execute(query).scalars())
