# backend/routes/cart.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from schemas.cart import CartAddItem, CartUpdateItem, CartOut, CartItemOut
from schemas.product import ProductOut
from services.cart import CartManager
from services.catalog import get_active_product
from utils.money import format_price, to_amount
from utils.session import Scope, get_scope

router = APIRouter(prefix="/api/cart", tags=["Cart"])

def _manager(db: Session = Depends(get_db), scope: Scope = Depends(get_scope)) -> CartManager:
    return CartManager(db, scope)

def _cart_to_out(cart: CartManager) -> CartOut:
    items_out = []
    for it in cart.items:
        line_total = it.product.price_cents * it.quantity
        items_out.append(CartItemOut(
            id=it.id,
            product_id=it.product_id,
            quantity=it.quantity,
            product=ProductOut.model_validate(it.product),
            line_total_cents=line_total,
            line_total=format_price(line_total, it.product.currency),
        ))

    total = cart.total_cents
    return CartOut(
        items=items_out,
        item_count=cart.item_count,
        total_cents=total,
        total_amount=to_amount(total),
        total=format_price(total, cart.currency),
        currency=cart.currency,
        message=cart.message,
    )

@router.get("", response_model=CartOut)
def get_cart(cart: CartManager = Depends(_manager)):
    cart.refresh_cart()
    return _cart_to_out(cart)

# Adding a product already in the cart increases its quantity
@router.post("/add", response_model=CartOut)
def add_to_cart(payload: CartAddItem, cart: CartManager = Depends(_manager)):
    product = get_active_product(cart.db, payload.product_id)
    cart.add_to_cart(product, payload.quantity)
    return _cart_to_out(cart)

@router.put("/items/{item_id}", response_model=CartOut)
def update_cart_item(item_id: int, payload: CartUpdateItem, cart: CartManager = Depends(_manager)):
    cart.update_quantity(item_id, payload.quantity)
    return _cart_to_out(cart)

@router.delete("/items/{item_id}", response_model=CartOut)
def delete_cart_item(item_id: int, cart: CartManager = Depends(_manager)):
    cart.remove_from_cart(item_id)
    return _cart_to_out(cart)

@router.delete("", response_model=CartOut)
def clear_cart(cart: CartManager = Depends(_manager)):
    cart.clear_cart()
    return _cart_to_out(cart)
