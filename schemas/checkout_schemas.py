from typing import Literal, Optional
from pydantic import BaseModel, Field
from schemas.order_schemas import CamelModel


class QuoteItem(BaseModel):
    quantity: int = Field(ge=1)
    price: float = Field(ge=0)


class QuoteRequest(BaseModel):
    items: list[QuoteItem]
    delivery_location: Literal["inside", "outside"] = "inside"
    promo_code: Optional[str] = None


class PromoResult(CamelModel):
    code: str
    valid: bool
    discount: float
    message: Optional[str] = None


class CheckoutQuote(CamelModel):
    subtotal: float
    delivery_charge: float
    discount: float
    total: float
    promo: Optional[PromoResult] = None
