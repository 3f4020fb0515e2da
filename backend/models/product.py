# backend/models/product.py
import enum

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, JSON, CheckConstraint, func
from database import Base


class ProductCategory(str, enum.Enum):
    FIREWOOD = "firewood"
    CHARCOAL = "charcoal"
    BUNDLES = "bundles"
    RENTALS = "rentals"


# Catalogue entry. Prices are kept in minor units (cents) with a currency code;
# the display string is rendered by the response schemas only.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False, index=True)
    category = Column(String, nullable=False, index=True)

    price_cents = Column(Integer, CheckConstraint("price_cents >= 0"), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    unit = Column(String, nullable=True)  # e.g. "per cord"

    description = Column(Text, nullable=True)
    long_description = Column(Text, nullable=True)
    image = Column(String, nullable=True)
    images = Column(JSON, nullable=True)
    features = Column(JSON, nullable=True)
    specifications = Column(JSON, nullable=True)
    benefits = Column(JSON, nullable=True)

    is_active = Column(Boolean, nullable=False, default=True, index=True)
    sort_order = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
