# backend/services/bookings.py
import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from models.booking import BBQBooking, BBQPackage, BookingStatus, DEPOSIT_PERCENT
from models.order import PaymentStatus
from schemas.booking import BookingCreate
from schemas.user import IdentityUser
from utils.money import percent_of
from utils.references import generate_booking_reference

logger = logging.getLogger(__name__)


def find_overlapping(db: Session, package_id: int, rental_date, return_date):
    """Live bookings of the package whose rental window intersects the given one."""
    return (
        db.query(BBQBooking)
        .filter(
            BBQBooking.package_id == package_id,
            BBQBooking.booking_status != BookingStatus.CANCELLED.value,
            BBQBooking.rental_date <= return_date,
            BBQBooking.return_date >= rental_date,
        )
        .all()
    )


def place_booking(db: Session, payload: BookingCreate, user: Optional[IdentityUser] = None) -> BBQBooking:
    package = db.query(BBQPackage).filter(BBQPackage.id == payload.package_id, BBQPackage.is_active == True).first()  # noqa: E712
    if not package:
        raise HTTPException(status_code=404, detail="BBQ package not found")
    if payload.return_date < payload.rental_date:
        raise HTTPException(status_code=400, detail="Return date must not be before rental date")

    # Overlaps are accepted and left to the dispatcher
    overlapping = find_overlapping(db, package.id, payload.rental_date, payload.return_date)
    if overlapping:
        logger.warning(
            "Package %s double-booked for %s..%s (overlaps %s)",
            package.id, payload.rental_date, payload.return_date,
            [b.booking_reference for b in overlapping],
        )

    total = package.price_cents
    deposit = percent_of(total, DEPOSIT_PERCENT)
    booking = BBQBooking(
        booking_reference=generate_booking_reference(),
        package_id=package.id,
        user_id=user.id if user else None,
        customer_name=payload.customer_name,
        customer_email=payload.customer_email,
        customer_phone=payload.customer_phone,
        customer_address=payload.customer_address,
        rental_date=payload.rental_date,
        return_date=payload.return_date,
        total_cents=total,
        deposit_cents=deposit,
        balance_cents=total - deposit,
        currency=package.currency,
        payment_status=PaymentStatus.PENDING.value,
        booking_status=BookingStatus.PENDING.value,
        notes=payload.notes,
    )
    db.add(booking)
    db.commit()
    db.refresh(booking)
    logger.info("Booking %s placed for package %s", booking.booking_reference, package.id)
    return booking
