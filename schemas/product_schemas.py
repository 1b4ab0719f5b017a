from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProductBase(BaseModel):
    name: str
    category: str
    price: float = Field(ge=0)
    stock: int = Field(default=0, ge=0)
    unit: str = "pcs"
    description: Optional[str] = None
    sku: Optional[str] = None
    cost_price: Optional[float] = Field(default=None, ge=0)
    min_stock_level: Optional[int] = Field(default=None, ge=0)
    image_url: Optional[str] = None
    is_popular: bool = False
    is_new: bool = False
    status: str = "active"

    @field_validator('name', 'category')
    @classmethod
    def validate_not_blank(cls, value):
        if not value or not value.strip():
            raise ValueError('must not be empty')
        return value.strip()


class CreateProductRequest(ProductBase):
    pass


class UpdateProductRequest(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    stock: Optional[int] = Field(default=None, ge=0)
    unit: Optional[str] = None
    description: Optional[str] = None
    sku: Optional[str] = None
    cost_price: Optional[float] = Field(default=None, ge=0)
    min_stock_level: Optional[int] = Field(default=None, ge=0)
    image_url: Optional[str] = None
    is_popular: Optional[bool] = None
    is_new: Optional[bool] = None
    status: Optional[str] = None


class ProductOut(ProductBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: Optional[datetime] = None
