from typing import Optional, Union
from core import messages
from core.exceptions import AllTiersFailedError, OrderNotFoundError
from schemas.order_schemas import (CheckoutRequest, DraftCheckoutRequest, PlaceOrderResult,
                                   ActionResult, CourierDispatchResult)
from services.courier_service import CourierClient
from services.ledger import OrderLedger
from services.order_store import OrderStore
from utils.fallback import try_in_order
from utils.logger import get_logger, mask_phone, describe_error
from utils.normalize import normalize_order

logger = get_logger(__name__)

CheckoutPayload = Union[CheckoutRequest, DraftCheckoutRequest]

# Status an order moves to once the courier accepts it
DISPATCHED_STATUS = "shipped"


class OrderService:
    """
    Order Submission Coordinator plus the admin write actions.

    Placement tries, in order:
        1. atomic placement with stock check (skipped for incomplete drafts)
        2. direct insert of the order, then best-effort insert of its items
        3. the local ledger, only when ledger_write_fallback is enabled

    Nothing raises out of place_order; every outcome is a PlaceOrderResult.
    """

    def __init__(self, store: OrderStore, ledger: Optional[OrderLedger] = None,
                 courier: Optional[CourierClient] = None, ledger_write_fallback: bool = False):
        self.store = store
        self.ledger = ledger
        self.courier = courier
        self.ledger_write_fallback = ledger_write_fallback

    @staticmethod
    def _order_columns(request: CheckoutPayload) -> dict:
        return {
            "note": request.note,
            "payment_method": request.payment_method,
            "payment_number": request.payment_number,
            "customer_id": request.customer_id,
        }

    def _place_atomic(self, request: CheckoutPayload):
        return self.store.place_order_with_stock_check(
            customer_name=request.name,
            phone=request.phone,
            address=request.address,
            total_price=request.total,
            items=request.items,
            status=request.status,
            **self._order_columns(request)
        )

    def _place_direct(self, request: CheckoutPayload):
        """
        Insert the order row, then its items.

        Stock is not decremented on this path. An item insert failure is
        logged and the order is kept without (some of) its items.
        """
        order_id = self.store.insert_order(
            customer_name=request.name,
            phone=request.phone,
            address=request.address,
            total_price=request.total,
            status=request.status,
            **self._order_columns(request)
        )

        if request.items:
            try:
                self.store.insert_order_items(order_id, request.items)
            except Exception as e:
                logger.error(
                    f"Order items insert failed: {describe_error(e)}",
                    extra={
                        "order_id": order_id,
                        "items": len(request.items),
                        "error_type": type(e).__name__,
                    }
                )
        return order_id

    def _place_local(self, request: CheckoutPayload):
        return self.ledger.put({
            "customer_name": request.name,
            "phone": request.phone,
            "address": request.address,
            "note": request.note,
            "total_amount": request.total,
            "payment_method": request.payment_method,
            "payment_number": request.payment_number,
            "status": request.status,
            "items": [
                {
                    "product_id": item.product_id,
                    "product_name": item.name,
                    "quantity": item.quantity,
                    "price": item.price,
                }
                for item in request.items
            ],
        })

    def place_order(self, request: CheckoutPayload) -> PlaceOrderResult:
        context = {
            "phone": mask_phone(request.phone),
            "total": request.total,
            "items": len(request.items),
            "order_status": request.status,
        }
        logger.info("Placing order", extra=context)

        strategies = []
        if request.status != "incomplete":
            strategies.append(("atomic", lambda: self._place_atomic(request)))
        strategies.append(("direct", lambda: self._place_direct(request)))
        if self.ledger_write_fallback and self.ledger is not None:
            strategies.append(("ledger", lambda: self._place_local(request)))

        try:
            result = try_in_order(strategies, logger=logger, context=context)
        except AllTiersFailedError as e:
            logger.error(
                f"Order placement failed: {describe_error(e.last_error)}",
                extra={**context, "tiers": [name for name, _ in e.errors]}
            )
            return PlaceOrderResult(success=False, error=messages.ORDER_FAILED)

        logger.info(
            "Order placed",
            extra={**context, "order_id": result.value, "tier": result.tier}
        )
        return PlaceOrderResult(success=True, order_id=result.value, source=result.tier)

    def update_order_status(self, order_id: int, status: str) -> ActionResult:
        """Raises OrderNotFoundError for unknown ids; other failures are reported."""
        try:
            self.store.update_order_status(order_id, status)
        except OrderNotFoundError:
            raise
        except Exception as e:
            logger.error(
                f"Order status update failed: {describe_error(e)}",
                extra={"order_id": order_id, "order_status": status, "error_type": type(e).__name__}
            )
            return ActionResult(success=False, error=describe_error(e))

        logger.info("Order status updated", extra={"order_id": order_id, "order_status": status})
        return ActionResult(success=True)

    async def dispatch_to_courier(self, order_id: int) -> CourierDispatchResult:
        """
        Hand an order to the courier.

        On courier success the consignment is recorded and the order moves
        to "shipped". On failure the stored status is left untouched.
        """
        try:
            order = normalize_order(self.store.get_order(order_id))
        except OrderNotFoundError:
            raise
        except Exception as e:
            logger.error(
                f"Could not load order for dispatch: {describe_error(e)}",
                extra={"order_id": order_id, "error_type": type(e).__name__}
            )
            return CourierDispatchResult(success=False, message=messages.COURIER_FAILED + type(e).__name__)

        if self.courier is None:
            return CourierDispatchResult(success=False, message="Courier not configured", status=order["status"])

        result = await self.courier.create_order(order)
        if not result.success:
            return CourierDispatchResult(
                success=False,
                message=messages.COURIER_FAILED + result.message,
                status=order["status"],
            )

        update = self.record_dispatch(order_id, result.consignment_id, result.tracking_code)
        if not update.success:
            return CourierDispatchResult(
                success=False,
                message=messages.COURIER_FAILED + (update.error or ""),
                consignment_id=result.consignment_id,
                tracking_code=result.tracking_code,
                status=order["status"],
            )

        return CourierDispatchResult(
            success=True,
            message=messages.COURIER_SENT,
            consignment_id=result.consignment_id,
            tracking_code=result.tracking_code,
            status=DISPATCHED_STATUS,
        )

    def record_dispatch(self, order_id: int, consignment_id: Optional[str],
                        tracking_code: Optional[str]) -> ActionResult:
        try:
            self.store.record_consignment(order_id, consignment_id, tracking_code, DISPATCHED_STATUS)
        except Exception as e:
            logger.error(
                f"Recording courier consignment failed: {describe_error(e)}",
                extra={"order_id": order_id, "consignment_id": consignment_id, "error_type": type(e).__name__}
            )
            return ActionResult(success=False, error=describe_error(e))
        return ActionResult(success=True)
