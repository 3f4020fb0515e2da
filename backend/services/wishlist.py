# backend/services/wishlist.py
import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from models.cart import WishlistItem
from models.product import Product
from utils.session import Scope

logger = logging.getLogger(__name__)

ALREADY_PRESENT = "Item is already in your wishlist"


class WishlistManager:
    """Saved-for-later products of one scope; mirrors CartManager minus quantity."""

    def __init__(self, db: Session, scope: Scope):
        self.db = db
        self.scope = scope
        self.items: List[WishlistItem] = []
        self.message: Optional[str] = None

    def _query(self):
        return self.db.query(WishlistItem).filter(self.scope.filter(WishlistItem))

    @property
    def item_count(self) -> int:
        return len(self.items)

    def refresh_wishlist(self) -> List[WishlistItem]:
        rows = (
            self._query()
            .options(joinedload(WishlistItem.product))
            .order_by(WishlistItem.created_at, WishlistItem.id)
            .all()
        )
        self.items = [row for row in rows if row.product is not None]
        return self.items

    def is_in_wishlist(self, product_id: int) -> bool:
        # Checked against the last refresh only
        return any(item.product_id == product_id for item in self.items)

    def add_to_wishlist(self, product: Product) -> bool:
        """Insert the product; returns False when it was already there."""
        if self.is_in_wishlist(product.id):
            self.message = ALREADY_PRESENT
            return False

        self.db.add(WishlistItem(product_id=product.id, **self.scope.columns()))
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race with another add of the same product
            self.db.rollback()
            self.message = ALREADY_PRESENT
            self.refresh_wishlist()
            return False

        self.message = f"{product.name} added to wishlist"
        self.refresh_wishlist()
        return True

    def remove_from_wishlist(self, product_id: int) -> int:
        deleted = self._query().filter(WishlistItem.product_id == product_id).delete(synchronize_session=False)
        self.db.commit()
        self.message = "Item removed from wishlist"
        self.refresh_wishlist()
        return deleted

    def toggle_wishlist(self, product: Product) -> bool:
        """Add when absent, remove when present. Returns the new membership."""
        if self.is_in_wishlist(product.id):
            self.remove_from_wishlist(product.id)
            return False
        self.add_to_wishlist(product)
        return True

    def clear_wishlist(self) -> int:
        deleted = self._query().delete(synchronize_session=False)
        self.db.commit()
        self.items = []
        self.message = "Wishlist cleared"
        return deleted

    def merge_from(self, anonymous: Scope) -> int:
        """Union an anonymous visitor's wishlist into this account's one."""
        if not anonymous.is_anonymous or self.scope.is_anonymous:
            raise ValueError("merge_from moves anonymous rows into an account scope")

        incoming = self.db.query(WishlistItem).filter(anonymous.filter(WishlistItem)).all()
        if not incoming:
            return 0

        present = {item.product_id for item in self._query().all()}
        for row in incoming:
            if row.product_id in present:
                self.db.delete(row)
            else:
                row.session_id = None
                row.user_id = self.scope.user_id
                present.add(row.product_id)

        self.db.commit()
        logger.info("Merged %s anonymous wishlist rows into %s", len(incoming), self.scope)
        self.refresh_wishlist()
        return len(incoming)
