# backend/utils/security.py
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from database import get_db
from models.users import Admin
from schemas.user import IdentityUser
from utils.identity_client import IdentityProviderError, SupabaseAuthClient, get_identity_provider

# Missing headers are handled here so they map to 401 rather than 403
bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def _lookup(token: str, identity: SupabaseAuthClient) -> IdentityUser:
    try:
        return await identity.get_user(token)
    except IdentityProviderError as e:
        if e.status_code >= 500:
            raise HTTPException(status_code=e.status_code, detail=e.message)
        raise _unauthorized("Invalid token")


# Retrieve the account behind the bearer token via the identity provider
async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    identity: SupabaseAuthClient = Depends(get_identity_provider),
) -> IdentityUser:
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Unauthorized")
    return await _lookup(credentials.credentials, identity)


# Same as get_current_user, but anonymous visitors are allowed through
async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    identity: SupabaseAuthClient = Depends(get_identity_provider),
) -> Optional[IdentityUser]:
    if credentials is None or not credentials.credentials:
        return None
    return await _lookup(credentials.credentials, identity)


def is_active_admin(db: Session, user: IdentityUser) -> bool:
    admin = db.query(Admin).filter(
        or_(Admin.user_id == user.id, func.lower(Admin.email) == user.email.lower()),
        Admin.is_active == True,  # noqa: E712
    ).first()
    return admin is not None


# Back office guard: valid token and an active row in the admins table
def require_admin(
    current_user: IdentityUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> IdentityUser:
    if not is_active_admin(db, current_user):
        raise _unauthorized("Admin access required")
    return current_user
