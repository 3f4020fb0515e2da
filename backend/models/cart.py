# backend/models/cart.py
from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, UniqueConstraint, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base

# A row is owned either by an account (user_id) or by an anonymous visitor
# (session_id), never both.
SCOPE_CHECK = "(user_id IS NULL) <> (session_id IS NULL)"


# A single product line in a visitor's shopping cart
class CartItem(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, index=True, nullable=True)  # identity provider user id
    session_id = Column(String, index=True, nullable=True)  # anonymous visitor id
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), index=True, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    product = relationship("Product")

    __table_args__ = (
        CheckConstraint(SCOPE_CHECK, name="ck_cartitem_single_scope"),
        CheckConstraint("quantity >= 1", name="ck_cartitem_quantity_positive"),
        # One row per (scope, product); quantities are merged instead
        UniqueConstraint("user_id", "product_id", name="uq_cartitem_user_product"),
        UniqueConstraint("session_id", "product_id", name="uq_cartitem_session_product"),
    )


# Saved-for-later product; presence is the only state
class WishlistItem(Base):
    __tablename__ = "wishlist_items"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, index=True, nullable=True)
    session_id = Column(String, index=True, nullable=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), index=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    product = relationship("Product")

    __table_args__ = (
        CheckConstraint(SCOPE_CHECK, name="ck_wishlistitem_single_scope"),
        UniqueConstraint("user_id", "product_id", name="uq_wishlistitem_user_product"),
        UniqueConstraint("session_id", "product_id", name="uq_wishlistitem_session_product"),
    )
