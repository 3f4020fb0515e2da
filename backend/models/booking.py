# backend/models/booking.py
import enum

from sqlalchemy import Column, Integer, String, Text, Boolean, Date, DateTime, ForeignKey, JSON, func
from sqlalchemy.orm import relationship
from database import Base


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Rental lifecycle; once equipment is handed over (active) it can only be completed
BOOKING_TRANSITIONS = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.ACTIVE, BookingStatus.CANCELLED},
    BookingStatus.ACTIVE: {BookingStatus.COMPLETED},
    BookingStatus.COMPLETED: set(),
    BookingStatus.CANCELLED: set(),
}

# Share of the package price collected up front
DEPOSIT_PERCENT = 30


# BBQ equipment package offered for rent
class BBQPackage(Base):
    __tablename__ = "bbq_rental_packages"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    price_cents = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    features = Column(JSON, nullable=True)
    image_url = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    display_order = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class BBQBooking(Base):
    __tablename__ = "bbq_rental_bookings"

    id = Column(Integer, primary_key=True, index=True)
    booking_reference = Column(String, unique=True, nullable=False, index=True)
    package_id = Column(Integer, ForeignKey("bbq_rental_packages.id"), index=True, nullable=False)
    user_id = Column(String, index=True, nullable=True)

    customer_name = Column(String, nullable=False)
    customer_email = Column(String, nullable=False)
    customer_phone = Column(String, nullable=False)
    customer_address = Column(String, nullable=True)

    rental_date = Column(Date, nullable=False)
    return_date = Column(Date, nullable=False)
    handover_date = Column(DateTime(timezone=True), nullable=True)
    returned_date = Column(DateTime(timezone=True), nullable=True)

    total_cents = Column(Integer, nullable=False)
    deposit_cents = Column(Integer, nullable=False)
    balance_cents = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False, default="USD")

    payment_status = Column(String, nullable=False, default="pending")
    booking_status = Column(String, nullable=False, default=BookingStatus.PENDING.value, index=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    package = relationship("BBQPackage")
