"""
Domain exceptions raised by the order store and services.

Routers translate these into HTTP responses; the checkout coordinator
converts them into a PlaceOrderResult instead of letting them escape.
"""


class StorefrontError(Exception):
    """Base class for storefront domain errors."""


class ProductNotFoundError(StorefrontError):
    def __init__(self, product_ids):
        self.product_ids = list(product_ids)
        super().__init__(f"Products not found: {', '.join(str(p) for p in self.product_ids)}")


class InsufficientStockError(StorefrontError):
    def __init__(self, product_id, requested: int, available: int):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for product {product_id}: "
            f"requested {requested}, available {available}"
        )


class OrderNotFoundError(StorefrontError):
    def __init__(self, order_id):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")


class AllTiersFailedError(StorefrontError):
    """
    Raised by try_in_order when every strategy failed.

    Attributes:
        errors: list of (tier_name, exception) in the order they were attempted
    """
    def __init__(self, errors):
        self.errors = list(errors)
        names = ", ".join(name for name, _ in self.errors)
        super().__init__(f"All tiers failed ({names})")

    @property
    def last_error(self):
        return self.errors[-1][1] if self.errors else None
