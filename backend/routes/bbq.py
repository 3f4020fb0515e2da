# backend/routes/bbq.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Query
from sqlalchemy.orm import Session, joinedload

from config import settings
from database import get_db
from models.booking import BBQBooking, BBQPackage, BookingStatus, BOOKING_TRANSITIONS
from models.order import PaymentStatus
from schemas.booking import (
    PackageOut, PackageCreate, PackageUpdate, BookingCreate, BookingOut, BookingUpdate,
)
from schemas.user import IdentityUser
from services.bookings import place_booking
from utils.audit import write_log, client_ip
from utils.money import to_cents
from utils.security import get_optional_user, require_admin
from utils.transitions import check_transition
from utils.updates import changed_fields

router = APIRouter(tags=["BBQ Rentals"])
logger = logging.getLogger(__name__)


def _booking_to_out(booking: BBQBooking) -> BookingOut:
    out = BookingOut.model_validate(booking)
    out.package_name = booking.package.name if booking.package else None
    return out


# =========================
# STOREFRONT
# =========================
@router.get("/api/bbq-packages", response_model=List[PackageOut])
def list_active_packages(db: Session = Depends(get_db)):
    return (
        db.query(BBQPackage)
        .filter(BBQPackage.is_active == True)  # noqa: E712
        .order_by(BBQPackage.display_order.asc(), BBQPackage.id.asc())
        .all()
    )


# Deposit/balance are a fixed split of the package price at submission time
@router.post("/api/bbq-bookings", response_model=BookingOut, status_code=201)
def create_booking(
    payload: BookingCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Optional[IdentityUser] = Depends(get_optional_user),
):
    booking = place_booking(db, payload, current_user)
    write_log(db, user_id=booking.user_id, action="BOOKING_PLACE", resource="bbq_bookings", status="SUCCESS",
              ip=client_ip(request), meta={"reference": booking.booking_reference, "package_id": booking.package_id})
    return _booking_to_out(booking)


# =========================
# BACK OFFICE: PACKAGES
# =========================
@router.get("/api/admin/bbq-packages")
def admin_list_packages(db: Session = Depends(get_db), admin: IdentityUser = Depends(require_admin)):
    packages = db.query(BBQPackage).order_by(BBQPackage.display_order.asc(), BBQPackage.id.asc()).all()
    return {"packages": [PackageOut.model_validate(p) for p in packages]}


@router.post("/api/admin/bbq-packages")
def admin_create_package(
    payload: PackageCreate,
    request: Request,
    db: Session = Depends(get_db),
    admin: IdentityUser = Depends(require_admin),
):
    if not payload.name or payload.price is None:
        raise HTTPException(status_code=400, detail="Name and price are required")

    package = BBQPackage(
        name=payload.name,
        description=payload.description or "",
        price_cents=to_cents(payload.price),
        currency=settings.CURRENCY,
        features=payload.features or [],
        image_url=payload.image_url,
        is_active=payload.is_active,
        display_order=payload.display_order,
    )
    db.add(package)
    db.commit()
    db.refresh(package)

    write_log(db, user_id=admin.id, action="PACKAGE_CREATE", resource="bbq_packages", status="SUCCESS",
              ip=client_ip(request), meta={"id": package.id})
    return {"package": PackageOut.model_validate(package)}


@router.patch("/api/admin/bbq-packages")
def admin_update_package(
    payload: PackageUpdate,
    request: Request,
    db: Session = Depends(get_db),
    admin: IdentityUser = Depends(require_admin),
):
    if payload.id is None:
        raise HTTPException(status_code=400, detail="Package ID is required")
    package = db.query(BBQPackage).filter(BBQPackage.id == payload.id).first()
    if not package:
        raise HTTPException(status_code=404, detail="Package not found")

    data = changed_fields(payload, nullable=("description", "features", "image_url"))
    if "price" in data:
        package.price_cents = to_cents(data.pop("price"))
    for key, value in data.items():
        setattr(package, key, value)
    db.commit()
    db.refresh(package)

    write_log(db, user_id=admin.id, action="PACKAGE_UPDATE", resource="bbq_packages", status="SUCCESS",
              ip=client_ip(request), meta={"id": package.id})
    return {"package": PackageOut.model_validate(package)}


@router.delete("/api/admin/bbq-packages")
def admin_delete_package(
    request: Request,
    id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    admin: IdentityUser = Depends(require_admin),
):
    if id is None:
        raise HTTPException(status_code=400, detail="Package ID is required")
    package = db.query(BBQPackage).filter(BBQPackage.id == id).first()
    if not package:
        raise HTTPException(status_code=404, detail="Package not found")
    if db.query(BBQBooking.id).filter(BBQBooking.package_id == id).first():
        raise HTTPException(status_code=409, detail="Package has bookings; deactivate it instead")

    db.delete(package)
    db.commit()
    write_log(db, user_id=admin.id, action="PACKAGE_DELETE", resource="bbq_packages", status="SUCCESS",
              ip=client_ip(request), meta={"id": id})
    return {"success": True}


# =========================
# BACK OFFICE: BOOKINGS
# =========================
@router.get("/api/admin/bbq-bookings")
def admin_list_bookings(
    status: Optional[BookingStatus] = Query(None, description="Filter by booking status"),
    db: Session = Depends(get_db),
    admin: IdentityUser = Depends(require_admin),
):
    query = db.query(BBQBooking).options(joinedload(BBQBooking.package))
    if status:
        query = query.filter(BBQBooking.booking_status == status.value)
    bookings = query.order_by(BBQBooking.created_at.desc(), BBQBooking.id.desc()).all()
    return {"bookings": [_booking_to_out(b) for b in bookings]}


@router.put("/api/admin/bbq-bookings")
def admin_update_booking(
    payload: BookingUpdate,
    request: Request,
    db: Session = Depends(get_db),
    admin: IdentityUser = Depends(require_admin),
):
    if payload.id is None:
        raise HTTPException(status_code=400, detail="Booking ID is required")
    booking = db.query(BBQBooking).filter(BBQBooking.id == payload.id).first()
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")

    old_status, old_payment = booking.booking_status, booking.payment_status
    if payload.booking_status is not None:
        booking.booking_status = check_transition(
            BookingStatus, BOOKING_TRANSITIONS, booking.booking_status, payload.booking_status, label="booking status"
        ).value
    if payload.payment_status is not None:
        try:
            booking.payment_status = PaymentStatus(payload.payment_status).value
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Invalid payment status '{payload.payment_status}'")

    if payload.deposit_amount is not None:
        booking.deposit_cents = to_cents(payload.deposit_amount)
    if payload.balance_amount is not None:
        booking.balance_cents = to_cents(payload.balance_amount)
    if payload.handover_date is not None:
        booking.handover_date = payload.handover_date
    if payload.returned_date is not None:
        booking.returned_date = payload.returned_date
    if payload.notes is not None:
        booking.notes = payload.notes

    db.commit()
    db.refresh(booking)

    write_log(
        db, user_id=admin.id, action="BOOKING_UPDATE", resource="bbq_bookings", status="SUCCESS",
        ip=client_ip(request),
        meta={
            "id": booking.id,
            "booking_status": [old_status, booking.booking_status],
            "payment_status": [old_payment, booking.payment_status],
        },
    )
    return {"booking": _booking_to_out(booking)}


@router.delete("/api/admin/bbq-bookings")
def admin_delete_booking(
    request: Request,
    id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    admin: IdentityUser = Depends(require_admin),
):
    if id is None:
        raise HTTPException(status_code=400, detail="Booking ID is required")
    booking = db.query(BBQBooking).filter(BBQBooking.id == id).first()
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")

    db.delete(booking)
    db.commit()
    write_log(db, user_id=admin.id, action="BOOKING_DELETE", resource="bbq_bookings", status="SUCCESS",
              ip=client_ip(request), meta={"id": id})
    return {"success": True}
