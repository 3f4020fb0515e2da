# backend/services/checkout.py
import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from models.order import Order, OrderItem, OrderStatus, PaymentStatus
from schemas.order import CheckoutPayload
from schemas.user import IdentityUser
from services.addresses import ADDRESS_FIELDS, AddressManager
from services.cart import CartManager
from utils.audit import write_log
from utils.money import format_price
from utils.references import generate_guest_session_id, generate_order_number

logger = logging.getLogger(__name__)

REQUIRED_SHIPPING_FIELDS = ("full_name", "phone", "address_line1", "city", "state", "zip_code")

# Order numbers are random enough that more than one retry is rare
MAX_ORDER_NUMBER_ATTEMPTS = 5


def resolve_shipping(db: Session, user: Optional[IdentityUser], payload: CheckoutPayload) -> dict:
    """Shipping snapshot for the order: a verbatim copy of the selected saved
    address for signed-in buyers, the ad hoc form otherwise."""
    if user is not None and payload.address_id is not None:
        address = AddressManager(db, user.id).get_address(payload.address_id)
        return {f"shipping_{field}": getattr(address, field) for field in ADDRESS_FIELDS}

    form = payload.shipping
    missing = [f for f in REQUIRED_SHIPPING_FIELDS if not (form and getattr(form, f))]
    if missing:
        raise HTTPException(status_code=400, detail=f"Missing shipping fields: {', '.join(missing)}")
    return {f"shipping_{field}": getattr(form, field) for field in ADDRESS_FIELDS}


def place_order(
    db: Session,
    cart: CartManager,
    user: Optional[IdentityUser],
    payload: CheckoutPayload,
    ip: Optional[str] = None,
) -> Order:
    """Snapshot the cart into an order and empty the cart, atomically.

    The total is the cart's derived total at submission. Order, order lines,
    the audit entry and the cart clear commit together; on any store error
    everything is rolled back and the cart is left as it was.
    """
    items = cart.refresh_cart()
    if not items:
        raise HTTPException(status_code=400, detail="Cart is empty")
    unavailable = [item.product.name for item in items if not item.product.is_active]
    if unavailable:
        raise HTTPException(status_code=400, detail=f"No longer available: {', '.join(unavailable)}")

    shipping = resolve_shipping(db, user, payload)
    email = payload.email or (user.email if user else None)
    if not email:
        raise HTTPException(status_code=400, detail="Email is required")

    total_cents = cart.total_cents
    # Denormalized copies; later catalogue edits must not touch them
    lines = [
        {
            "product_id": item.product_id,
            "product_name": item.product.name,
            "product_price": format_price(item.product.price_cents, item.product.currency),
            "unit_price_cents": item.product.price_cents,
            "quantity": item.quantity,
        }
        for item in items
    ]

    for attempt in range(1, MAX_ORDER_NUMBER_ATTEMPTS + 1):
        order_number = generate_order_number()
        order = Order(
            order_number=order_number,
            user_id=user.id if user else None,
            guest_session_id=None if user else generate_guest_session_id(),
            email=email,
            status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
            payment_method=payload.payment_method,
            total_cents=total_cents,
            currency=cart.currency,
            notes=payload.notes,
            **shipping,
        )
        order.items = [OrderItem(**line) for line in lines]
        db.add(order)

        try:
            db.flush()
            write_log(
                db, user_id=order.user_id, action="ORDER_PLACE", resource="orders", status="SUCCESS", ip=ip,
                meta={"order_number": order_number, "total_cents": total_cents, "lines": len(lines)},
                commit=False,
            )
            cart.clear_cart(commit=False)
            db.commit()
        except IntegrityError as e:
            db.rollback()
            if db.query(Order.id).filter(Order.order_number == order_number).first():
                logger.warning("Order number %s collided (attempt %s), regenerating", order_number, attempt)
                continue
            logger.exception("Failed to place order")
            raise HTTPException(status_code=500, detail=str(e.orig))
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("Failed to place order")
            raise HTTPException(status_code=500, detail=str(getattr(e, "orig", None) or e))

        db.refresh(order)
        logger.info("Placed order %s (%s lines, %s cents)", order.order_number, len(lines), total_cents)
        return order

    raise HTTPException(status_code=500, detail="Could not allocate a unique order number")
