from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, computed_field

from utils.money import format_price


class PackageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    price_cents: int
    currency: str
    features: Optional[List[str]] = None
    image_url: Optional[str] = None
    is_active: bool
    display_order: int

    @computed_field
    @property
    def price(self) -> str:
        return format_price(self.price_cents, self.currency)


class PackageCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    features: Optional[List[str]] = None
    image_url: Optional[str] = None
    is_active: bool = True
    display_order: int = 0


class PackageUpdate(BaseModel):
    id: Optional[int] = None
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    features: Optional[List[str]] = None
    image_url: Optional[str] = None
    is_active: Optional[bool] = None
    display_order: Optional[int] = None


# Customer request to rent a package
class BookingCreate(BaseModel):
    package_id: int
    customer_name: str
    customer_email: EmailStr
    customer_phone: str
    customer_address: Optional[str] = None
    rental_date: date
    return_date: date
    notes: Optional[str] = None


class BookingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    booking_reference: str
    package_id: int
    package_name: Optional[str] = None
    user_id: Optional[str] = None
    customer_name: str
    customer_email: str
    customer_phone: str
    customer_address: Optional[str] = None
    rental_date: date
    return_date: date
    handover_date: Optional[datetime] = None
    returned_date: Optional[datetime] = None
    total_cents: int
    deposit_cents: int
    balance_cents: int
    currency: str
    payment_status: str
    booking_status: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


# Admin update; only provided fields change
class BookingUpdate(BaseModel):
    id: Optional[int] = None
    handover_date: Optional[datetime] = None
    returned_date: Optional[datetime] = None
    deposit_amount: Optional[Decimal] = Field(None, ge=0)
    balance_amount: Optional[Decimal] = Field(None, ge=0)
    payment_status: Optional[str] = None
    booking_status: Optional[str] = None
    notes: Optional[str] = None
