# backend/services/cart.py
import logging
from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from config import settings
from models.cart import CartItem
from models.product import Product
from utils.session import Scope

logger = logging.getLogger(__name__)


class CartManager:
    """Shopping cart of one scope (account or anonymous visitor).

    The in-memory ``items`` list is replaced wholesale on every refresh, so it
    always mirrors the last successful read of the store. Counts and totals are
    derived from it on demand and never stored.
    """

    def __init__(self, db: Session, scope: Scope, currency: Optional[str] = None):
        self.db = db
        self.scope = scope
        self.currency = currency or settings.CURRENCY
        self.items: List[CartItem] = []
        self.message: Optional[str] = None

    def _query(self):
        return self.db.query(CartItem).filter(self.scope.filter(CartItem))

    def _get_item(self, item_id: int) -> CartItem:
        item = self._query().filter(CartItem.id == item_id).first()
        if not item:
            raise HTTPException(status_code=404, detail="Cart item not found")
        return item

    def _find_by_product(self, product_id: int) -> Optional[CartItem]:
        return self._query().filter(CartItem.product_id == product_id).first()

    # Derived values
    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def total_cents(self) -> int:
        return sum(item.product.price_cents * item.quantity for item in self.items)

    def refresh_cart(self) -> List[CartItem]:
        rows = (
            self._query()
            .options(joinedload(CartItem.product))
            .order_by(CartItem.created_at, CartItem.id)
            .all()
        )
        # Lines whose product vanished from the catalogue are not shown
        self.items = [row for row in rows if row.product is not None]
        return self.items

    def add_to_cart(self, product: Product, quantity: int = 1) -> List[CartItem]:
        if quantity < 1:
            raise HTTPException(status_code=400, detail="Quantity must be at least 1")
        if product.currency != self.currency:
            raise HTTPException(status_code=400, detail=f"Product is priced in {product.currency}, cart uses {self.currency}")

        item = self._find_by_product(product.id)
        if item:
            item.quantity += quantity
        else:
            item = CartItem(product_id=product.id, quantity=quantity, **self.scope.columns())
            self.db.add(item)

        try:
            self.db.commit()
        except IntegrityError:
            # A concurrent add inserted the row first: merge into it instead
            self.db.rollback()
            item = self._find_by_product(product.id)
            if item is None:
                raise
            item.quantity += quantity
            self.db.commit()

        logger.info("Cart %s: added product %s x%s", self.scope, product.id, quantity)
        self.message = f"{product.name} added to cart"
        return self.refresh_cart()

    def update_quantity(self, item_id: int, quantity: int) -> List[CartItem]:
        if quantity < 1:
            return self.remove_from_cart(item_id)

        # No upper bound: the catalogue has no stock concept
        item = self._get_item(item_id)
        item.quantity = quantity
        self.db.commit()
        self.message = "Cart updated"
        return self.refresh_cart()

    def remove_from_cart(self, item_id: int) -> List[CartItem]:
        item = self._get_item(item_id)
        self.db.delete(item)
        self.db.commit()
        self.message = "Item removed from cart"
        return self.refresh_cart()

    def clear_cart(self, commit: bool = True) -> int:
        # Deletes by scope, so a stale in-memory view does not matter
        deleted = self._query().delete(synchronize_session=False)
        if commit:
            self.db.commit()
        self.items = []
        self.message = "Cart cleared"
        return deleted

    def merge_from(self, anonymous: Scope) -> int:
        """Fold an anonymous visitor's cart into this (account) cart.

        Quantities are summed per product; the anonymous rows are consumed.
        Returns the number of anonymous rows processed.
        """
        if not anonymous.is_anonymous or self.scope.is_anonymous:
            raise ValueError("merge_from moves anonymous rows into an account scope")

        incoming = self.db.query(CartItem).filter(anonymous.filter(CartItem)).all()
        if not incoming:
            return 0

        existing = {item.product_id: item for item in self._query().all()}
        for row in incoming:
            target = existing.get(row.product_id)
            if target is not None:
                target.quantity += row.quantity
                self.db.delete(row)
            else:
                row.session_id = None
                row.user_id = self.scope.user_id
                existing[row.product_id] = row

        self.db.commit()
        logger.info("Merged %s anonymous cart rows into %s", len(incoming), self.scope)
        self.refresh_cart()
        return len(incoming)
