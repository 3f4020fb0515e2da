# backend/services/reconcile.py
import logging
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from services.cart import CartManager
from services.wishlist import WishlistManager
from utils.session import Scope

logger = logging.getLogger(__name__)


def reconcile_identity(db: Session, session_id: Optional[str], user_id: str) -> Tuple[int, int]:
    """Sign-in reconciliation: move the visitor's anonymous cart and wishlist
    under the account so nothing added before login is lost.

    Returns (cart rows merged, wishlist rows merged).
    """
    if not session_id:
        return 0, 0

    anonymous = Scope(session_id=session_id)
    account = Scope(user_id=user_id)

    cart_merged = CartManager(db, account).merge_from(anonymous)
    wishlist_merged = WishlistManager(db, account).merge_from(anonymous)

    if cart_merged or wishlist_merged:
        logger.info(
            "Reconciled session %s into user %s (cart=%s, wishlist=%s)",
            session_id, user_id, cart_merged, wishlist_merged,
        )
    return cart_merged, wishlist_merged
