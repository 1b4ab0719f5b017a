from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from starlette import status
from schemas.checkout_schemas import QuoteRequest, CheckoutQuote
from schemas.order_schemas import CheckoutRequest, DraftCheckoutRequest, PlaceOrderResult
from services.checkout_service import CheckoutService
from utils.deps import order_service_dependency
from middleware.rate_limiter import limiter
from utils.logger import get_logger

# Setup logger
logger = get_logger(__name__)


router = APIRouter(
    prefix="/checkout",
    tags=["checkout"]
)


def _result_response(result: PlaceOrderResult):
    if result.success:
        return result
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=result.model_dump(mode="json", by_alias=True)
    )


@router.post("/quote", response_model=CheckoutQuote)
@limiter.limit("60/minute")
async def quote(request: Request, body: QuoteRequest):
    """
    Price a cart with delivery charge and an optional promo code.
    An invalid code does not fail the request; the promo block carries the message.
    """
    return CheckoutService.quote(body.items, body.delivery_location, body.promo_code)


@router.post("/orders", response_model=PlaceOrderResult, status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
def place_order(request: Request, body: CheckoutRequest, service: order_service_dependency):
    """
    Place an order. The submitted total is stored as sent.
    """
    return _result_response(service.place_order(body))


@router.post("/drafts", response_model=PlaceOrderResult, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def save_draft(request: Request, body: DraftCheckoutRequest, service: order_service_dependency):
    """
    Capture a partially filled checkout as an "incomplete" order.
    No stock check is done for drafts.
    """
    return _result_response(service.place_order(body))
