from core.database import Base
from sqlalchemy import (Column, Integer, String, Boolean, Numeric)
from sqlalchemy.orm import relationship
from .mixins import CreatedAtMixin, UpdatedAtMixin

class Product(Base, CreatedAtMixin, UpdatedAtMixin):
    __tablename__ = "products"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #relationships
    order_items = relationship("OrderItem", back_populates="product", passive_deletes=True)

    name = Column(String, nullable=False)
    category = Column(String, index=True)
    description = Column(String)
    sku = Column(String, nullable=True)
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    cost_price = Column(Numeric(10, 2, asdecimal=False), nullable=True)
    stock = Column(Integer, default=0, nullable=False)
    min_stock_level = Column(Integer, nullable=True)
    unit = Column(String, default="pcs")
    image_url = Column(String)
    is_popular = Column(Boolean, default=False)
    is_new = Column(Boolean, default=False)
    status = Column(String, default="active")
