from pydantic import BaseModel, ConfigDict, EmailStr, computed_field
from typing import List, Optional
from datetime import datetime

from utils.money import format_price, to_amount


# Ad hoc shipping form filled at checkout
class ShippingForm(BaseModel):
    full_name: Optional[str] = None
    phone: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None


# Input schema for placing an order from the current cart
class CheckoutPayload(BaseModel):
    email: Optional[EmailStr] = None
    address_id: Optional[int] = None
    shipping: Optional[ShippingForm] = None
    payment_method: str = "cash_on_delivery"
    notes: Optional[str] = None


# Output schema for an individual order line item
class OrderItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: Optional[int] = None
    product_name: str
    product_price: str
    unit_price_cents: int
    quantity: int


class ShippingSnapshot(BaseModel):
    full_name: Optional[str] = None
    phone: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None


# Output schema representing the full order details
class OrderResponse(BaseModel):
    id: int
    order_number: str
    user_id: Optional[str] = None
    guest_session_id: Optional[str] = None
    email: str
    status: str
    payment_status: str
    payment_method: Optional[str] = None
    total_cents: int
    currency: str
    shipping_address: ShippingSnapshot
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[OrderItemOut]

    @computed_field
    @property
    def total_amount(self) -> float:
        return to_amount(self.total_cents)

    @computed_field
    @property
    def total(self) -> str:
        return format_price(self.total_cents, self.currency)


class OrderList(BaseModel):
    orders: List[OrderResponse]


class OrderEnvelope(BaseModel):
    order: OrderResponse
    success: bool = True


# Admin status/payment update; the id travels in the body
class OrderStatusPatch(BaseModel):
    order_id: Optional[int] = None
    status: Optional[str] = None
    payment_status: Optional[str] = None
    notes: Optional[str] = None
