from pydantic import BaseModel
from typing import List, Optional

from schemas.product import ProductOut

class WishlistAddItem(BaseModel):
    product_id: int

class WishlistItemOut(BaseModel):
    id: int
    product_id: int
    product: ProductOut

class WishlistOut(BaseModel):
    items: List[WishlistItemOut]
    item_count: int
    message: Optional[str] = None
    added: Optional[bool] = None
