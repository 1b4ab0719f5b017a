import math
from typing import Iterable, Optional
from core import messages
from schemas.checkout_schemas import CheckoutQuote, PromoResult
from utils.logger import get_logger

logger = get_logger(__name__)


DELIVERY_CHARGES = {
    "inside": 80,   # inside Dhaka
    "outside": 150,
}

# code -> (kind, value); "percent" values are a share of the subtotal
PROMO_CODES = {
    "SAVE10": ("percent", 0.10),
    "FLAT50": ("flat", 50),
    "EID2024": ("percent", 0.15),
}

PROMO_MESSAGES = {
    "SAVE10": messages.PROMO_SAVE10_APPLIED,
    "FLAT50": messages.PROMO_FLAT50_APPLIED,
    "EID2024": messages.PROMO_EID2024_APPLIED,
}


def round_taka(amount: float) -> int:
    """Round to whole taka, halves up."""
    return math.floor(amount + 0.5)


class CheckoutService:

    @staticmethod
    def subtotal(items: Iterable) -> float:
        return sum(item.price * item.quantity for item in items)

    @staticmethod
    def delivery_charge(location: str) -> float:
        return DELIVERY_CHARGES.get(location, DELIVERY_CHARGES["outside"])

    @staticmethod
    def apply_promo(code: Optional[str], subtotal: float) -> Optional[PromoResult]:
        """
        Look up a promo code and compute its discount for the subtotal.

        Returns None when no code was entered. Unknown codes give a zero
        discount and the invalid-code message; checkout continues.
        """
        normalized = (code or "").strip().upper()
        if not normalized:
            return None

        promo = PROMO_CODES.get(normalized)
        if promo is None:
            logger.info("Invalid promo code entered", extra={"promo_code": normalized})
            return PromoResult(code=normalized, valid=False, discount=0, message=messages.PROMO_INVALID)

        kind, value = promo
        discount = round_taka(subtotal * value) if kind == "percent" else value
        return PromoResult(code=normalized, valid=True, discount=discount, message=PROMO_MESSAGES[normalized])

    @staticmethod
    def quote(items: Iterable, delivery_location: str = "inside", promo_code: Optional[str] = None) -> CheckoutQuote:
        """
        Price a cart: subtotal + delivery charge - discount.

        The discount never exceeds the subtotal.
        """
        items = list(items)
        subtotal = CheckoutService.subtotal(items)
        delivery = CheckoutService.delivery_charge(delivery_location)
        promo = CheckoutService.apply_promo(promo_code, subtotal)

        discount = min(promo.discount, subtotal) if promo else 0
        return CheckoutQuote(
            subtotal=subtotal,
            delivery_charge=delivery,
            discount=discount,
            total=subtotal + delivery - discount,
            promo=promo,
        )
