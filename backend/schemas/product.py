# backend/schemas/product.py
from datetime import datetime
from decimal import Decimal
from typing import Optional, List, Dict

from pydantic import BaseModel, Field, ConfigDict, computed_field

from models.product import ProductCategory
from utils.money import format_price, to_amount


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Public product representation; price is rendered from minor units here
class ProductOut(ORMBase):
    id: int
    slug: str
    name: str
    category: str
    price_cents: int
    currency: str
    unit: Optional[str] = None
    description: Optional[str] = None
    long_description: Optional[str] = None
    image: Optional[str] = None
    images: Optional[List[str]] = None
    features: Optional[List[str]] = None
    specifications: Optional[Dict[str, str]] = None
    benefits: Optional[List[str]] = None
    is_active: bool
    sort_order: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @computed_field
    @property
    def price(self) -> str:
        return format_price(self.price_cents, self.currency)

    @computed_field
    @property
    def price_amount(self) -> float:
        return to_amount(self.price_cents)


# Schema for creating a new product (admin)
class ProductCreate(BaseModel):
    slug: str
    name: str
    category: ProductCategory
    price: Decimal = Field(ge=0, description="Price in major units, e.g. 45.00")
    currency: Optional[str] = None
    unit: Optional[str] = None
    description: Optional[str] = None
    long_description: Optional[str] = None
    image: Optional[str] = None
    images: Optional[List[str]] = None
    features: Optional[List[str]] = None
    specifications: Optional[Dict[str, str]] = None
    benefits: Optional[List[str]] = None
    is_active: bool = True
    sort_order: int = 0


# Schema for partial product updates (admin); the id travels in the body
class ProductUpdate(BaseModel):
    id: Optional[int] = None
    slug: Optional[str] = None
    name: Optional[str] = None
    category: Optional[ProductCategory] = None
    price: Optional[Decimal] = Field(None, ge=0)
    currency: Optional[str] = None
    unit: Optional[str] = None
    description: Optional[str] = None
    long_description: Optional[str] = None
    image: Optional[str] = None
    images: Optional[List[str]] = None
    features: Optional[List[str]] = None
    specifications: Optional[Dict[str, str]] = None
    benefits: Optional[List[str]] = None
    is_active: Optional[bool] = None
    sort_order: Optional[int] = None
