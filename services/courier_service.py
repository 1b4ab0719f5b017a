from dataclasses import dataclass, field
from typing import Any, Optional
import httpx
from core.config import settings
from utils.logger import get_logger, sanitize_log_data

logger = get_logger(__name__)

CONFIG_MISSING = "API Configuration Missing"


@dataclass
class CourierResult:
    success: bool
    message: str
    data: dict = field(default_factory=dict)

    @property
    def consignment_id(self) -> Optional[str]:
        value = self.data.get("consignment_id")
        return str(value) if value is not None else None

    @property
    def tracking_code(self) -> Optional[str]:
        return self.data.get("tracking_code")


class CourierClient:
    """
    Client for the Steadfast courier "create order" endpoint.

    A dispatch succeeds only when the HTTP status is 200 and the body's
    own "status" field is 200 as well.
    """

    def __init__(self, api_key: str, secret_key: str, base_url: str,
                 timeout: float = 10.0, note: str = "",
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = api_key
        self.secret_key = secret_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.note = note
        self._transport = transport

    @classmethod
    def from_settings(cls, transport: Optional[httpx.AsyncBaseTransport] = None) -> "CourierClient":
        return cls(
            api_key=settings.COURIER_API_KEY,
            secret_key=settings.COURIER_SECRET_KEY,
            base_url=settings.COURIER_BASE_URL,
            timeout=settings.COURIER_TIMEOUT,
            note=settings.COURIER_NOTE,
            transport=transport,
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.secret_key)

    def build_payload(self, order: dict) -> dict[str, Any]:
        return {
            "invoice": str(order["id"]),
            "recipient_name": order.get("customer_name") or "",
            "recipient_phone": order.get("phone") or "",
            "recipient_address": order.get("address") or "",
            "cod_amount": order.get("total_amount") or 0,
            "note": self.note,
        }

    async def create_order(self, order: dict) -> CourierResult:
        """
        Send an order to the courier.

        Args:
            order: canonical order dict (id, customer_name, phone, address, total_amount)

        Returns:
            CourierResult; transport and API errors are reported, not raised
        """
        if not self.configured:
            logger.warning("Courier API keys are missing; dispatch disabled")
            return CourierResult(success=False, message=CONFIG_MISSING)

        payload = self.build_payload(order)
        headers = {
            "Content-Type": "application/json",
            "Api-Key": self.api_key,
            "Secret-Key": self.secret_key,
        }

        logger.debug("Sending order to courier", extra=sanitize_log_data(payload))

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(f"{self.base_url}/create_order", json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error(
                f"Courier request failed: {str(e)}",
                extra={"invoice": payload["invoice"], "error_type": type(e).__name__}
            )
            return CourierResult(success=False, message=str(e) or "Network error")

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if response.status_code == 200 and data.get("status") == 200:
            logger.info(
                "Order sent to courier",
                extra={
                    "invoice": payload["invoice"],
                    "consignment_id": data.get("consignment_id"),
                    "tracking_code": data.get("tracking_code"),
                }
            )
            return CourierResult(success=True, message="Order sent to courier successfully!", data=data)

        logger.warning(
            "Courier rejected order",
            extra={
                "invoice": payload["invoice"],
                "http_status": response.status_code,
                "courier_status": data.get("status"),
                "courier_message": data.get("message"),
            }
        )
        return CourierResult(success=False, message=data.get("message") or "Failed to send to courier", data=data)
