from core import messages
from schemas.checkout_schemas import QuoteItem
from services.checkout_service import CheckoutService, round_taka


def _items(*pairs):
    return [QuoteItem(price=price, quantity=quantity) for price, quantity in pairs]


def test_save10_inside_dhaka():
    """990 x 2 inside Dhaka with SAVE10: 1980 + 80 - 198 = 1862."""
    quote = CheckoutService.quote(_items((990, 2)), "inside", "SAVE10")

    assert quote.subtotal == 1980
    assert quote.delivery_charge == 80
    assert quote.discount == 198
    assert quote.total == 1862
    assert quote.promo.valid is True
    assert quote.promo.message == messages.PROMO_SAVE10_APPLIED


def test_unknown_promo_code_gives_no_discount():
    quote = CheckoutService.quote(_items((990, 2)), "inside", "UNKNOWN123")

    assert quote.discount == 0
    assert quote.total == 2060
    assert quote.promo.valid is False
    assert quote.promo.message == messages.PROMO_INVALID


def test_no_promo_code():
    quote = CheckoutService.quote(_items((500, 1)), "outside", "   ")

    assert quote.promo is None
    assert quote.discount == 0
    assert quote.total == 650


def test_promo_code_is_case_insensitive():
    promo = CheckoutService.apply_promo(" eid2024 ", 1000)

    assert promo.code == "EID2024"
    assert promo.discount == 150


def test_flat_discount_capped_at_subtotal():
    quote = CheckoutService.quote(_items((30, 1)), "inside", "FLAT50")

    assert quote.discount == 30
    assert quote.total == 80


def test_percent_discount_rounds_half_up():
    # 10% of 1005 = 100.5
    assert CheckoutService.apply_promo("SAVE10", 1005).discount == 101
    assert round_taka(2.5) == 3
    assert round_taka(2.4) == 2


def test_unknown_location_charged_as_outside():
    assert CheckoutService.delivery_charge("sylhet") == 150
