from core.database import Base
from sqlalchemy.orm import relationship
from sqlalchemy import (Column, Integer, String, Numeric, Enum)
from .mixins import CreatedAtMixin, UpdatedAtMixin

ORDER_STATUSES = ("pending", "processing", "shipped", "delivered", "cancelled", "incomplete")


class Order(Base, CreatedAtMixin, UpdatedAtMixin):
    __tablename__ = "orders"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    # Profile id from the hosted auth backend; empty for guest checkout
    customer_id = Column(String, index=True, nullable=True)

    #relationships
    items = relationship("OrderItem", back_populates="order", order_by="OrderItem.id")

    customer_name = Column(String, nullable=False)
    phone = Column(String, index=True)
    address = Column(String)
    note = Column(String, nullable=True)

    # Submitted by the storefront, not recomputed here
    total_amount = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    payment_method = Column(String, default="cash_on_delivery")
    payment_number = Column(String, nullable=True)
    status = Column(Enum(*ORDER_STATUSES, name="order_status"), default="pending", nullable=False)

    # Courier consignment
    consignment_id = Column(String, nullable=True)
    tracking_code = Column(String, nullable=True)
