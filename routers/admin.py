from typing import Annotated, Optional
from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import JSONResponse, Response
from starlette import status
from core import messages
from core.config import settings
from core.exceptions import AllTiersFailedError, OrderNotFoundError
from schemas.order_schemas import (OrderPage, OrderOut, CustomerOut, StatusUpdateRequest,
                                   ActionResult, CourierDispatchResult)
from services.order_query_service import OrderQueryService
from services.report_service import ReportService, DATE_RANGES
from utils.deps import admin_dependency, order_service_dependency, query_service_dependency, store_dependency
from utils.logger import get_logger, describe_error

# Setup logger
logger = get_logger(__name__)


router = APIRouter(
    prefix="/admin",
    tags=["admin"]
)

PageParam = Annotated[int, Query(ge=1)]
PageSizeParam = Annotated[int, Query(ge=1, le=settings.MAX_PAGE_SIZE)]
StatusParam = Annotated[Optional[str], Query(alias="status")]
DateRangeParam = Annotated[str, Query(pattern="^(" + "|".join(DATE_RANGES) + ")$")]


def _load_orders(query: OrderQueryService, page: int, page_size: int) -> OrderPage:
    try:
        return query.list_orders(page=page, page_size=page_size)
    except AllTiersFailedError as e:
        logger.error(
            f"Order listing unavailable: {describe_error(e.last_error)}",
            extra={"page": page, "page_size": page_size}
        )
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                            detail=messages.ORDERS_UNAVAILABLE)


@router.get("/orders", response_model=OrderPage)
def list_orders(admin: admin_dependency, query: query_service_dependency,
                page: PageParam = 1, page_size: PageSizeParam = settings.DEFAULT_PAGE_SIZE):
    """
    One page of orders with their items, newest first.
    Served from the local ledger when the database cannot be read.
    """
    return _load_orders(query, page, page_size)


@router.get("/orders/analytics")
def order_analytics(admin: admin_dependency, query: query_service_dependency,
                    page: PageParam = 1, page_size: PageSizeParam = settings.MAX_PAGE_SIZE,
                    search: Optional[str] = None, order_status: StatusParam = None,
                    date_range: DateRangeParam = "all"):
    orders = _load_orders(query, page, page_size).orders
    filtered = ReportService.filter_orders(orders, search=search, status=order_status, date_range=date_range)
    return ReportService.order_analytics(filtered)


@router.get("/orders/export")
def export_orders(admin: admin_dependency, query: query_service_dependency,
                  page: PageParam = 1, page_size: PageSizeParam = settings.MAX_PAGE_SIZE,
                  search: Optional[str] = None, order_status: StatusParam = None,
                  date_range: DateRangeParam = "all"):
    """
    CSV of the filtered orders. Every field is quoted.
    """
    orders = _load_orders(query, page, page_size).orders
    filtered = ReportService.filter_orders(orders, search=search, status=order_status, date_range=date_range)

    filename = ReportService.export_filename("orders")
    logger.info("Orders exported", extra={"rows": len(filtered), "admin_id": admin.get("user_id")})
    return Response(
        content=ReportService.orders_csv(filtered),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.get("/orders/{order_id}", response_model=OrderOut)
def get_order(order_id: int, admin: admin_dependency, query: query_service_dependency):
    try:
        return query.get_order(order_id)
    except OrderNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")


@router.patch("/orders/{order_id}/status", response_model=ActionResult)
def update_order_status(order_id: int, body: StatusUpdateRequest, admin: admin_dependency,
                        service: order_service_dependency):
    try:
        result = service.update_order_status(order_id, body.status)
    except OrderNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")

    if not result.success:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=result.model_dump(mode="json", by_alias=True)
        )
    return result


@router.post("/orders/{order_id}/courier", response_model=CourierDispatchResult)
async def send_to_courier(order_id: int, admin: admin_dependency, service: order_service_dependency):
    """
    Dispatch an order to the courier; on success the order becomes "shipped".
    """
    try:
        result = await service.dispatch_to_courier(order_id)
    except OrderNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")

    if not result.success:
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content=result.model_dump(mode="json", by_alias=True)
        )
    return result


@router.get("/customers", response_model=list[CustomerOut])
def list_customers(admin: admin_dependency, query: query_service_dependency):
    return query.list_customers()


@router.get("/products/analytics")
def product_analytics(admin: admin_dependency, store: store_dependency):
    return ReportService.inventory_analytics(store.list_products())


@router.get("/products/export")
def export_products(admin: admin_dependency, store: store_dependency, category: Optional[str] = None):
    products = store.list_products(category=category)
    filename = ReportService.export_filename("inventory")
    return Response(
        content=ReportService.inventory_csv(products),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )
