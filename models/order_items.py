from core.database import Base
from sqlalchemy import (Column, Integer, String, ForeignKey, Numeric)
from sqlalchemy.orm import relationship

class OrderItem(Base):
    __tablename__ = "order_items"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    # Weak reference: the product may change or disappear after the order
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True)

    #relationships
    order = relationship("Order", back_populates="items")
    product = relationship("Product", back_populates="order_items")

    quantity = Column(Integer, nullable=False)
    # Unit price at the time of the order
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    product_name = Column(String)
