from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, CheckConstraint, func
from database import Base

# Customer testimonial shown on the storefront. Ordering is manual (display_order).
class Review(Base):
    __tablename__ = "customer_reviews"

    id = Column(Integer, primary_key=True, index=True)
    customer_name = Column(String, nullable=False)
    customer_title = Column(String, nullable=True)
    review_text = Column(Text, nullable=False)
    rating = Column(Integer, CheckConstraint("rating >= 1 AND rating <= 5"), nullable=False, default=5)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    display_order = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
