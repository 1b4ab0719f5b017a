from datetime import datetime
from typing import Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
import phonenumbers
import re
from core.config import settings

MIN_NAME_LENGTH, MAX_NAME_LENGTH = 2, 50
MIN_PHONE_DIGITS, MAX_PHONE_DIGITS = 10, 15
MIN_ADDRESS_LENGTH, MAX_ADDRESS_LENGTH = 5, 200

OrderStatus = Literal["pending", "processing", "shipped", "delivered", "cancelled", "incomplete"]


class CamelModel(BaseModel):
    """Response envelope serialized with camelCase keys for the storefront."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CheckoutItem(BaseModel):
    product_id: int
    quantity: int = Field(ge=1)
    price: float = Field(ge=0)
    name: Optional[str] = None


class CheckoutRequest(BaseModel):
    name: str
    phone: str
    address: str
    items: list[CheckoutItem]
    total: float = Field(ge=0)
    status: Literal["pending", "processing"] = "pending"
    note: Optional[str] = None
    payment_method: str = "cash_on_delivery"
    payment_number: Optional[str] = None
    customer_id: Optional[str] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, value):
        value = value.strip()
        if not MIN_NAME_LENGTH <= len(value) <= MAX_NAME_LENGTH:
            raise ValueError(f'Name must be {MIN_NAME_LENGTH}-{MAX_NAME_LENGTH} characters')
        return value

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, value):
        """
        Accepts local (01XXXXXXXXX) or international (+8801XXXXXXXXX) numbers.
        The number is stored as entered, only surrounding whitespace is removed.
        """
        value = value.strip()
        digits = re.sub(r'\D', '', value)
        if not MIN_PHONE_DIGITS <= len(digits) <= MAX_PHONE_DIGITS:
            raise ValueError(f'Phone number must have {MIN_PHONE_DIGITS}-{MAX_PHONE_DIGITS} digits')

        try:
            phonenumbers.parse(value, settings.DEFAULT_PHONE_REGION)
        except phonenumbers.NumberParseException:
            raise ValueError('Invalid phone number')

        return value

    @field_validator('address')
    @classmethod
    def validate_address(cls, value):
        value = value.strip()
        if not MIN_ADDRESS_LENGTH <= len(value) <= MAX_ADDRESS_LENGTH:
            raise ValueError(f'Address must be {MIN_ADDRESS_LENGTH}-{MAX_ADDRESS_LENGTH} characters')
        return value

    @field_validator('items')
    @classmethod
    def validate_items(cls, value):
        if not value:
            raise ValueError('Cart is empty')
        return value


class DraftCheckoutRequest(BaseModel):
    """
    Partially filled checkout form, captured when the customer leaves a
    field, so abandoned checkouts can be followed up.
    """
    name: str = ""
    phone: str
    address: str = ""
    items: list[CheckoutItem] = []
    total: float = Field(default=0, ge=0)
    note: Optional[str] = None
    customer_id: Optional[str] = None
    payment_method: str = "cash_on_delivery"
    payment_number: Optional[str] = None

    status: Literal["incomplete"] = "incomplete"

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, value):
        if not value.strip():
            raise ValueError('Phone number is required to save a draft')
        return value.strip()


class PlaceOrderResult(CamelModel):
    success: bool
    order_id: Optional[Union[int, str]] = None
    error: Optional[str] = None
    # Which tier stored the order: "atomic", "direct" or "ledger"
    source: Optional[str] = None


class OrderItemOut(BaseModel):
    product_id: Optional[Union[int, str]] = None
    product_name: str
    quantity: int
    price: float


class OrderOut(BaseModel):
    id: Union[int, str]
    customer_id: Optional[str] = None
    customer_name: str
    phone: str
    address: str
    note: Optional[str] = None
    total_amount: float
    payment_method: str
    payment_number: Optional[str] = None
    status: str
    created_at: datetime
    consignment_id: Optional[str] = None
    tracking_code: Optional[str] = None
    is_local: bool = False
    items: list[OrderItemOut] = []


class OrderPage(CamelModel):
    orders: list[OrderOut]
    total: int
    page: int
    page_size: int
    total_pages: int
    # Tier that produced the page: "joined", "flat" or "ledger"
    source: Optional[str] = None


class CustomerOut(CamelModel):
    id: str
    name: str
    email: str = ""
    phone: str = ""
    address: Optional[str] = None
    total_orders: int = 0
    total_spent: float = 0
    join_date: Optional[datetime] = None
    last_order: Optional[datetime] = None


class StatusUpdateRequest(BaseModel):
    status: OrderStatus


class ActionResult(CamelModel):
    success: bool
    error: Optional[str] = None


class CourierDispatchResult(CamelModel):
    success: bool
    message: str
    consignment_id: Optional[str] = None
    tracking_code: Optional[str] = None
    status: Optional[str] = None
