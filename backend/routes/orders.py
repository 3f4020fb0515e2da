# backend/routes/orders.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Query
from sqlalchemy.orm import Session, joinedload

from database import get_db
from models.order import Order, OrderItem, OrderStatus, PaymentStatus, ORDER_TRANSITIONS
from schemas.order import (
    CheckoutPayload, OrderResponse, OrderItemOut, OrderList, OrderEnvelope,
    OrderStatusPatch, ShippingSnapshot,
)
from schemas.user import IdentityUser
from services.cart import CartManager
from services.checkout import place_order
from utils.audit import write_log, client_ip
from utils.security import get_current_user, get_optional_user, require_admin
from utils.session import Scope, get_scope
from utils.transitions import check_transition

router = APIRouter(tags=["Orders"])
logger = logging.getLogger(__name__)


# Map Order model to OrderResponse schema
def _order_to_out(order: Order) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        order_number=order.order_number,
        user_id=order.user_id,
        guest_session_id=order.guest_session_id,
        email=order.email,
        status=order.status,
        payment_status=order.payment_status,
        payment_method=order.payment_method,
        total_cents=order.total_cents,
        currency=order.currency,
        shipping_address=ShippingSnapshot(
            full_name=order.shipping_full_name,
            phone=order.shipping_phone,
            address_line1=order.shipping_address_line1,
            address_line2=order.shipping_address_line2,
            city=order.shipping_city,
            state=order.shipping_state,
            zip_code=order.shipping_zip_code,
            country=order.shipping_country,
        ),
        notes=order.notes,
        created_at=order.created_at,
        updated_at=order.updated_at,
        items=[OrderItemOut.model_validate(it) for it in order.items],
    )


def _orders_query(db: Session):
    return db.query(Order).options(joinedload(Order.items))


# Place an order from the caller's cart (guest or signed in)
@router.post("/api/checkout", response_model=OrderEnvelope, status_code=201)
def checkout(
    payload: CheckoutPayload,
    request: Request,
    db: Session = Depends(get_db),
    scope: Scope = Depends(get_scope),
    current_user: Optional[IdentityUser] = Depends(get_optional_user),
):
    cart = CartManager(db, scope)
    order = place_order(db, cart, current_user, payload, ip=client_ip(request))
    return {"order": _order_to_out(order), "success": True}


# List the signed-in user's orders, newest first
@router.get("/api/orders", response_model=OrderList)
def list_my_orders(
    db: Session = Depends(get_db),
    current_user: IdentityUser = Depends(get_current_user),
):
    orders = (
        _orders_query(db)
        .filter(Order.user_id == current_user.id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )
    return {"orders": [_order_to_out(o) for o in orders]}


@router.get("/api/orders/{order_number}", response_model=OrderResponse)
def get_my_order(
    order_number: str,
    db: Session = Depends(get_db),
    current_user: IdentityUser = Depends(get_current_user),
):
    order = _orders_query(db).filter(Order.order_number == order_number).first()
    if not order or order.user_id != current_user.id:
        raise HTTPException(status_code=404, detail="Order not found")
    return _order_to_out(order)


# =========================
# BACK OFFICE
# =========================
@router.get("/api/admin/orders", response_model=OrderList)
def admin_list_orders(
    status: Optional[OrderStatus] = Query(None, description="Filter by order status"),
    db: Session = Depends(get_db),
    admin: IdentityUser = Depends(require_admin),
):
    query = _orders_query(db)
    if status:
        query = query.filter(Order.status == status.value)
    orders = query.order_by(Order.created_at.desc(), Order.id.desc()).all()
    return {"orders": [_order_to_out(o) for o in orders]}


# Update order status / payment status; status moves must follow ORDER_TRANSITIONS
@router.patch("/api/admin/orders", response_model=OrderEnvelope)
def admin_update_order(
    payload: OrderStatusPatch,
    request: Request,
    db: Session = Depends(get_db),
    admin: IdentityUser = Depends(require_admin),
):
    if payload.order_id is None:
        raise HTTPException(status_code=400, detail="Order ID is required")

    order = _orders_query(db).filter(Order.id == payload.order_id).first()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    old_status, old_payment = order.status, order.payment_status
    if payload.status is not None:
        order.status = check_transition(OrderStatus, ORDER_TRANSITIONS, order.status, payload.status).value
    if payload.payment_status is not None:
        # Payment is tracked independently of fulfilment (cash on delivery)
        try:
            order.payment_status = PaymentStatus(payload.payment_status).value
        except ValueError:
            allowed = ", ".join(p.value for p in PaymentStatus)
            raise HTTPException(status_code=400, detail=f"Invalid payment status '{payload.payment_status}'. Allowed: {allowed}")
    if payload.notes is not None:
        order.notes = payload.notes

    db.commit()
    db.refresh(order)

    write_log(
        db, user_id=admin.id, action="ORDER_STATUS_CHANGE", resource="orders", status="SUCCESS",
        ip=client_ip(request),
        meta={
            "order_id": order.id,
            "status": [old_status, order.status],
            "payment_status": [old_payment, order.payment_status],
        },
    )
    logger.info("Order %s: status %s -> %s, payment %s -> %s",
                order.order_number, old_status, order.status, old_payment, order.payment_status)
    return {"order": _order_to_out(order), "success": True}
