# backend/routes/wishlist.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from schemas.product import ProductOut
from schemas.wishlist import WishlistAddItem, WishlistItemOut, WishlistOut
from services.catalog import get_active_product
from services.wishlist import WishlistManager
from utils.session import Scope, get_scope

router = APIRouter(prefix="/api/wishlist", tags=["Wishlist"])

# Managers start from a fresh read so membership checks see the store
def _manager(db: Session = Depends(get_db), scope: Scope = Depends(get_scope)) -> WishlistManager:
    wishlist = WishlistManager(db, scope)
    wishlist.refresh_wishlist()
    return wishlist

def _wishlist_to_out(wishlist: WishlistManager, added=None) -> WishlistOut:
    return WishlistOut(
        items=[
            WishlistItemOut(id=it.id, product_id=it.product_id, product=ProductOut.model_validate(it.product))
            for it in wishlist.items
        ],
        item_count=wishlist.item_count,
        message=wishlist.message,
        added=added,
    )

@router.get("", response_model=WishlistOut)
def get_wishlist(wishlist: WishlistManager = Depends(_manager)):
    return _wishlist_to_out(wishlist)

# Duplicate adds are reported in `message`, not as an error
@router.post("/add", response_model=WishlistOut)
def add_to_wishlist(payload: WishlistAddItem, wishlist: WishlistManager = Depends(_manager)):
    product = get_active_product(wishlist.db, payload.product_id)
    added = wishlist.add_to_wishlist(product)
    return _wishlist_to_out(wishlist, added=added)

@router.post("/toggle", response_model=WishlistOut)
def toggle_wishlist(payload: WishlistAddItem, wishlist: WishlistManager = Depends(_manager)):
    product = get_active_product(wishlist.db, payload.product_id)
    added = wishlist.toggle_wishlist(product)
    return _wishlist_to_out(wishlist, added=added)

@router.get("/contains/{product_id}")
def is_in_wishlist(product_id: int, wishlist: WishlistManager = Depends(_manager)):
    return {"product_id": product_id, "in_wishlist": wishlist.is_in_wishlist(product_id)}

@router.delete("/items/{product_id}", response_model=WishlistOut)
def remove_from_wishlist(product_id: int, wishlist: WishlistManager = Depends(_manager)):
    wishlist.remove_from_wishlist(product_id)
    return _wishlist_to_out(wishlist)

@router.delete("", response_model=WishlistOut)
def clear_wishlist(wishlist: WishlistManager = Depends(_manager)):
    wishlist.clear_wishlist()
    return _wishlist_to_out(wishlist)
