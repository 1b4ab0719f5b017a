import pytest
from core import messages
from sqlalchemy.exc import SQLAlchemyError, OperationalError
from models.orders import Order
from models.order_items import OrderItem
from schemas.order_schemas import CheckoutRequest, DraftCheckoutRequest
from services.ledger import MemoryLedger
from services.order_service import OrderService
from services.order_store import OrderStore


class AtomicDownStore(OrderStore):
    """Stock-checking procedure unavailable; plain inserts still work."""

    def place_order_with_stock_check(self, *args, **kwargs):
        raise SQLAlchemyError("function place_order_with_stock_check does not exist")


class DatabaseDownStore(AtomicDownStore):
    """Every write fails."""

    def insert_order(self, *args, **kwargs):
        raise OperationalError("INSERT INTO orders", {}, Exception("connection refused"))


def _checkout(product, quantity=2, **overrides):
    fields = dict(
        name="Rahim Uddin",
        phone="01712345678",
        address="House 12, Road 5, Dhanmondi, Dhaka",
        items=[{"product_id": product.id, "quantity": quantity, "price": product.price, "name": product.name}],
        total=product.price * quantity + 80,
    )
    fields.update(overrides)
    return CheckoutRequest(**fields)


def test_atomic_placement_decrements_stock(session, products):
    shirt = products[0]
    service = OrderService(OrderStore(session))

    result = service.place_order(_checkout(shirt, quantity=2, total=1862))

    assert result.success is True
    assert result.source == "atomic"
    session.refresh(shirt)
    assert shirt.stock == 8

    order = session.get(Order, result.order_id)
    assert order.total_amount == 1862
    assert order.status == "pending"
    assert [(i.product_id, i.quantity, i.price, i.product_name) for i in order.items] == [
        (shirt.id, 2, 990, "Cotton Shirt")
    ]


def test_insufficient_stock_falls_back_to_direct_insert(session, products):
    panjabi = products[1]
    service = OrderService(OrderStore(session))

    result = service.place_order(_checkout(panjabi, quantity=2))

    assert result.success is True
    assert result.source == "direct"
    session.refresh(panjabi)
    assert panjabi.stock == 1  # the direct path never touches stock

    order = session.get(Order, result.order_id)
    assert len(order.items) == 1
    assert order.items[0].quantity == 2


def test_rejected_atomic_placement_leaves_no_partial_stock_change(session, products):
    shirt, panjabi = products
    request = _checkout(shirt, items=[
        {"product_id": shirt.id, "quantity": 3, "price": 990},
        {"product_id": panjabi.id, "quantity": 5, "price": 2500},
    ], total=15050)

    result = OrderService(OrderStore(session)).place_order(request)

    assert result.source == "direct"
    session.refresh(shirt)
    assert shirt.stock == 10
    assert session.query(Order).count() == 1


def test_atomic_failure_falls_back_to_direct(session, products):
    shirt = products[0]
    service = OrderService(AtomicDownStore(session))

    result = service.place_order(_checkout(shirt))

    assert result.success is True
    assert result.source == "direct"
    assert session.query(OrderItem).filter(OrderItem.order_id == result.order_id).count() == 1


def test_incomplete_draft_skips_atomic(session, products):
    shirt = products[0]
    service = OrderService(OrderStore(session))
    draft = DraftCheckoutRequest(
        phone="01712345678",
        name="Ra",
        items=[{"product_id": shirt.id, "quantity": 1, "price": 990}],
        total=1070,
    )

    result = service.place_order(draft)

    assert result.success is True
    assert result.source == "direct"
    session.refresh(shirt)
    assert shirt.stock == 10
    assert session.get(Order, result.order_id).status == "incomplete"


def test_item_insert_failure_keeps_order(session, products):
    """An order referencing a missing product is stored without its items."""
    request = _checkout(products[0], items=[{"product_id": 999, "quantity": 1, "price": 100}], total=180)

    result = OrderService(OrderStore(session)).place_order(request)

    assert result.success is True
    assert result.source == "direct"
    order = session.get(Order, result.order_id)
    assert order is not None
    assert order.items == []


def test_direct_failure_reports_error_without_ledger(session, products):
    ledger = MemoryLedger()
    service = OrderService(DatabaseDownStore(session), ledger=ledger)

    result = service.place_order(_checkout(products[0]))

    assert result.success is False
    assert result.order_id is None
    assert result.error == messages.ORDER_FAILED
    assert ledger.list() == []


def test_ledger_write_fallback_when_enabled(session, products):
    ledger = MemoryLedger()
    service = OrderService(DatabaseDownStore(session), ledger=ledger, ledger_write_fallback=True)

    result = service.place_order(_checkout(products[0], total=2060))

    assert result.success is True
    assert result.source == "ledger"
    stored = ledger.get(result.order_id)
    assert stored["isLocal"] is True
    assert stored["total_amount"] == 2060
    assert stored["items"][0]["quantity"] == 2


def test_place_order_never_raises_on_unexpected_errors(session, products):
    class ExplodingStore(OrderStore):
        def place_order_with_stock_check(self, *args, **kwargs):
            raise RuntimeError("unexpected")

        def insert_order(self, *args, **kwargs):
            raise RuntimeError("still unexpected")

    result = OrderService(ExplodingStore(session)).place_order(_checkout(products[0]))

    assert result.success is False
    assert result.error == messages.ORDER_FAILED


def test_update_order_status(session, products):
    service = OrderService(OrderStore(session))
    order_id = service.place_order(_checkout(products[0])).order_id

    result = service.update_order_status(order_id, "delivered")

    assert result.success is True
    assert session.get(Order, order_id).status == "delivered"


def test_update_unknown_order_raises(session):
    from core.exceptions import OrderNotFoundError

    with pytest.raises(OrderNotFoundError):
        OrderService(OrderStore(session)).update_order_status(404, "delivered")
