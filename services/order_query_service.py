import math
from typing import Optional
from schemas.order_schemas import OrderPage, OrderOut, CustomerOut
from services.ledger import OrderLedger
from services.order_store import OrderStore
from utils.fallback import try_in_order
from utils.logger import get_logger, describe_error
from utils.normalize import normalize_order, parse_timestamp

logger = get_logger(__name__)


class EmptyLedgerError(Exception):
    """The local ledger holds no orders, so it cannot stand in for the database."""


def page_bounds(page: int, page_size: int) -> tuple[int, int]:
    """Inclusive [first, last] row index of a 1-based page."""
    first = (page - 1) * page_size
    return first, page * page_size - 1


def total_pages(total: int, page_size: int) -> int:
    return math.ceil(total / page_size) if page_size else 0


class OrderQueryService:
    """
    Read side for the admin views: paginated orders and customer aggregates.

    Order listing falls back joined query -> flat query -> local ledger and
    raises AllTiersFailedError only when all three fail.
    """

    def __init__(self, store: OrderStore, ledger: Optional[OrderLedger] = None):
        self.store = store
        self.ledger = ledger

    # -- orders -----------------------------------------------------------

    def _page(self, rows: list[dict], total: int, page: int, page_size: int,
              include_items: bool, source: str) -> OrderPage:
        return OrderPage(
            orders=[OrderOut(**normalize_order(row, include_items=include_items)) for row in rows],
            total=total,
            page=page,
            page_size=page_size,
            total_pages=total_pages(total, page_size),
            source=source,
        )

    def _joined(self, page: int, page_size: int) -> OrderPage:
        first, last = page_bounds(page, page_size)
        total = self.store.count_orders()
        rows = self.store.fetch_orders_joined(first, last - first + 1)
        return self._page(rows, total, page, page_size, include_items=True, source="joined")

    def _flat(self, page: int, page_size: int) -> OrderPage:
        first, last = page_bounds(page, page_size)
        total = self.store.count_orders()
        rows = self.store.fetch_orders_flat(first, last - first + 1)
        return self._page(rows, total, page, page_size, include_items=False, source="flat")

    def _local(self, page: int, page_size: int) -> OrderPage:
        if self.ledger is None:
            raise EmptyLedgerError("No local ledger configured")

        # The ledger appends, so its newest orders are at the end
        orders = list(reversed(self.ledger.list()))
        if not orders:
            raise EmptyLedgerError("Local ledger is empty")

        first, last = page_bounds(page, page_size)
        logger.info("Serving orders from local ledger", extra={"ledger_size": len(orders)})
        return self._page(orders[first:last + 1], len(orders), page, page_size,
                          include_items=True, source="ledger")

    def list_orders(self, page: int = 1, page_size: int = 20) -> OrderPage:
        """
        One page of orders, newest first.

        Args:
            page: 1-based page number
            page_size: orders per page (> 0)

        Raises:
            ValueError: page < 1 or page_size < 1
            AllTiersFailedError: database and local ledger both unavailable
        """
        if page < 1:
            raise ValueError("page must be >= 1")
        if page_size < 1:
            raise ValueError("page_size must be > 0")

        result = try_in_order(
            [
                ("joined", lambda: self._joined(page, page_size)),
                ("flat", lambda: self._flat(page, page_size)),
                ("ledger", lambda: self._local(page, page_size)),
            ],
            logger=logger,
            context={"page": page, "page_size": page_size},
        )
        return result.value

    def get_order(self, order_id) -> OrderOut:
        return OrderOut(**normalize_order(self.store.get_order(order_id)))

    # -- customers --------------------------------------------------------

    def list_customers(self) -> list[CustomerOut]:
        """
        Customers with order statistics.

        Uses the profiles table when it can be read; otherwise derives
        guest customers from the orders themselves.
        """
        try:
            return self._customers_from_profiles()
        except Exception as e:
            logger.warning(
                f"Profile-based customer listing failed, deriving from orders: {describe_error(e)}",
                extra={"error_type": type(e).__name__}
            )

        try:
            return self._customers_from_orders()
        except Exception as e:
            logger.error(
                f"Guest customer derivation failed: {describe_error(e)}",
                extra={"error_type": type(e).__name__}
            )
            return []

    def _customers_from_profiles(self) -> list[CustomerOut]:
        profiles = self.store.fetch_profiles()
        orders = self.store.fetch_order_stats()

        stats: dict = {}
        for order in orders:
            customer_id = order.get("customer_id")
            if not customer_id:
                continue
            stat = stats.setdefault(customer_id, {"count": 0, "spent": 0.0, "last": None})
            stat["count"] += 1
            stat["spent"] += float(order.get("total_amount") or 0)
            created = parse_timestamp(order.get("created_at"))
            if created is not None and (stat["last"] is None or created > stat["last"]):
                stat["last"] = created

        customers = []
        for profile in profiles:
            stat = stats.get(profile["id"], {"count": 0, "spent": 0.0, "last": None})
            customers.append(CustomerOut(
                id=str(profile["id"]),
                name=profile.get("name") or "Unknown",
                email=profile.get("email") or "",
                phone=profile.get("phone") or "",
                total_orders=stat["count"],
                total_spent=stat["spent"],
                join_date=parse_timestamp(profile.get("created_at")),
                last_order=stat["last"],
            ))
        return customers

    def _customers_from_orders(self) -> list[CustomerOut]:
        """
        Group orders by phone (or name) into guest customers.

        Rows arrive newest first, so the first row seen for a customer
        supplies its name and address.
        """
        customers: dict = {}
        for order in self.store.fetch_order_contacts():
            key = order.get("phone") or order.get("customer_name") or "unknown"
            created = parse_timestamp(order.get("created_at"))

            customer = customers.get(key)
            if customer is None:
                customer = customers[key] = {
                    "id": f"guest-{key}",
                    "name": order.get("customer_name") or "Unknown",
                    "phone": order.get("phone") or "",
                    "email": "",
                    "address": order.get("address"),
                    "total_orders": 0,
                    "total_spent": 0.0,
                    "join_date": created,
                    "last_order": created,
                }

            customer["total_orders"] += 1
            customer["total_spent"] += float(order.get("total_amount") or 0)
            if created is not None:
                if customer["join_date"] is None or created < customer["join_date"]:
                    customer["join_date"] = created
                if customer["last_order"] is None or created > customer["last_order"]:
                    customer["last_order"] = created

        return [CustomerOut(**customer) for customer in customers.values()]
