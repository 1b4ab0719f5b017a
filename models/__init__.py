from models.orders import Order, ORDER_STATUSES
from models.order_items import OrderItem
from models.products import Product
from models.profiles import Profile

__all__ = ["Order", "ORDER_STATUSES", "OrderItem", "Product", "Profile"]
