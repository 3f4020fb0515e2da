from pydantic import BaseModel, Field
from typing import List, Optional

from schemas.product import ProductOut

# Request schema for adding an item to the cart
class CartAddItem(BaseModel):
    product_id: int
    quantity: int = Field(default=1, ge=1)

# Request schema for updating cart item quantity; values below 1 remove the line
class CartUpdateItem(BaseModel):
    quantity: int

# Response schema for a single cart line, carrying the live product
class CartItemOut(BaseModel):
    id: int
    product_id: int
    quantity: int
    product: ProductOut
    line_total_cents: int
    line_total: str

# Response schema for the entire cart summary
class CartOut(BaseModel):
    items: List[CartItemOut]
    item_count: int
    total_cents: int
    total_amount: float
    total: str
    currency: str
    message: Optional[str] = None
