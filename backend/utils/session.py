# backend/utils/session.py
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request, Response

from config import settings
from schemas.user import IdentityUser
from utils.references import generate_session_id
from utils.security import get_optional_user

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Scope:
    """Owner of cart and wishlist rows: an account or an anonymous visitor."""

    user_id: Optional[str] = None
    session_id: Optional[str] = None

    def __post_init__(self):
        if (self.user_id is None) == (self.session_id is None):
            raise ValueError("Scope needs exactly one of user_id or session_id")

    @property
    def is_anonymous(self) -> bool:
        return self.user_id is None

    def filter(self, model):
        # SQLAlchemy criterion selecting the rows this scope owns
        if self.user_id is not None:
            return model.user_id == self.user_id
        return model.session_id == self.session_id

    def columns(self) -> dict:
        return {"user_id": self.user_id, "session_id": self.session_id}


def read_session_id(request: Request) -> Optional[str]:
    return request.headers.get(settings.SESSION_HEADER_NAME) or request.cookies.get(settings.SESSION_COOKIE_NAME)


def resolve_session_id(request: Request, response: Response) -> str:
    """Reuse the visitor's id when presented, otherwise mint and persist a new one."""
    session_id = read_session_id(request)
    if not session_id:
        session_id = generate_session_id()
        logger.debug("Minted anonymous session %s", session_id)
        response.set_cookie(
            settings.SESSION_COOKIE_NAME,
            session_id,
            max_age=settings.SESSION_COOKIE_MAX_AGE,
            httponly=True,
            samesite="lax",
        )
    response.headers[settings.SESSION_HEADER_NAME] = session_id
    return session_id


def get_scope(
    request: Request,
    response: Response,
    current_user: Optional[IdentityUser] = Depends(get_optional_user),
) -> Scope:
    if current_user is not None:
        return Scope(user_id=current_user.id)
    return Scope(session_id=resolve_session_id(request, response))
