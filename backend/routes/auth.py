# backend/routes/auth.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from database import get_db
from models.users import UserProfile
from schemas.user import (
    AuthResponse, IdentityUser, ProfileOut, ProfileUpdate, TokenVerify, UserCreate, UserLogin, VerifyResponse,
)
from services.reconcile import reconcile_identity
from utils.audit import write_log, client_ip
from utils.identity_client import IdentityProviderError, SupabaseAuthClient, get_identity_provider
from utils.security import bearer_scheme, get_current_user
from utils.session import read_session_id

router = APIRouter(tags=["Auth"])
logger = logging.getLogger(__name__)


def _provider_failure(e: IdentityProviderError, fallback_status: int) -> HTTPException:
    # Provider outages surface as such; everything else is the caller's problem
    if e.status_code >= 500:
        return HTTPException(status_code=e.status_code, detail=e.message)
    return HTTPException(status_code=fallback_status, detail=e.message)


# Register a new account with the identity provider and create its profile
@router.post("/api/auth/register", response_model=AuthResponse)
async def register(
    payload: UserCreate,
    request: Request,
    db: Session = Depends(get_db),
    identity: SupabaseAuthClient = Depends(get_identity_provider),
):
    normalized_email = payload.email.strip().lower()
    try:
        session = await identity.sign_up(
            normalized_email, payload.password,
            metadata={"full_name": payload.full_name, "phone": payload.phone or ""},
        )
    except IdentityProviderError as e:
        write_log(db, user_id=None, action="REGISTER", resource="auth", status="FAIL",
                  ip=client_ip(request), meta={"email": normalized_email, "reason": e.message})
        raise _provider_failure(e, status.HTTP_400_BAD_REQUEST)

    user = session.user
    if not db.query(UserProfile).filter(UserProfile.id == user.id).first():
        db.add(UserProfile(id=user.id, email=user.email or normalized_email,
                           full_name=payload.full_name, phone=payload.phone))
        db.commit()

    merged_cart = merged_wishlist = 0
    if session.access_token:
        merged_cart, merged_wishlist = reconcile_identity(db, read_session_id(request), user.id)

    write_log(db, user_id=user.id, action="REGISTER", resource="auth", status="SUCCESS",
              ip=client_ip(request), meta={"email": normalized_email})

    return AuthResponse(
        token=session.access_token,
        user=IdentityUser(id=user.id, email=user.email, name=payload.full_name),
        message="Registration successful" if session.access_token else "Registration successful, please confirm your e-mail",
        merged_cart_items=merged_cart,
        merged_wishlist_items=merged_wishlist,
    )


# Sign in; the visitor's anonymous cart and wishlist move to the account
@router.post("/api/auth/user-login", response_model=AuthResponse)
async def user_login(
    payload: UserLogin,
    request: Request,
    db: Session = Depends(get_db),
    identity: SupabaseAuthClient = Depends(get_identity_provider),
):
    try:
        session = await identity.sign_in(payload.email.strip().lower(), payload.password)
    except IdentityProviderError as e:
        write_log(db, user_id=None, action="LOGIN", resource="auth", status="FAIL",
                  ip=client_ip(request), meta={"email": payload.email})
        raise _provider_failure(e, status.HTTP_401_UNAUTHORIZED)

    if not session.access_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Login failed")

    user = session.user
    profile = db.query(UserProfile).filter(UserProfile.id == user.id).first()
    merged_cart, merged_wishlist = reconcile_identity(db, read_session_id(request), user.id)

    write_log(db, user_id=user.id, action="LOGIN", resource="auth", status="SUCCESS",
              ip=client_ip(request), meta={"email": user.email})

    return AuthResponse(
        token=session.access_token,
        user=IdentityUser(
            id=user.id,
            email=user.email,
            name=(profile.full_name if profile and profile.full_name else user.name),
        ),
        message="Login successful",
        merged_cart_items=merged_cart,
        merged_wishlist_items=merged_wishlist,
    )


@router.post("/api/auth/logout")
async def logout(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    identity: SupabaseAuthClient = Depends(get_identity_provider),
):
    if credentials is not None:
        try:
            await identity.sign_out(credentials.credentials)
        except IdentityProviderError as e:
            # The client drops its token either way
            logger.warning("Provider sign-out failed: %s", e.message)
    return {"success": True, "message": "Logged out successfully"}


# Resolve a token to its account, 401 when the provider rejects it
@router.post("/api/auth/verify", response_model=VerifyResponse)
async def verify(
    payload: TokenVerify,
    identity: SupabaseAuthClient = Depends(get_identity_provider),
):
    if not payload.token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No token provided")
    try:
        user = await identity.get_user(payload.token)
    except IdentityProviderError as e:
        if e.status_code >= 500:
            raise HTTPException(status_code=e.status_code, detail=e.message)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return VerifyResponse(valid=True, user=user)


# Explicit reconciliation for clients that authenticate elsewhere
@router.post("/api/session/reconcile")
def reconcile_session(
    request: Request,
    db: Session = Depends(get_db),
    current_user: IdentityUser = Depends(get_current_user),
):
    merged_cart, merged_wishlist = reconcile_identity(db, read_session_id(request), current_user.id)
    return {"merged_cart_items": merged_cart, "merged_wishlist_items": merged_wishlist}


# =========================
# PROFILE
# =========================
def _profile_for(db: Session, user: IdentityUser) -> UserProfile:
    profile = db.query(UserProfile).filter(UserProfile.id == user.id).first()
    if not profile:
        # Accounts created outside /register get a profile on first use
        profile = UserProfile(id=user.id, email=user.email, full_name=user.name)
        db.add(profile)
        db.commit()
        db.refresh(profile)
    return profile


@router.get("/api/profile", response_model=ProfileOut)
def get_profile(db: Session = Depends(get_db), current_user: IdentityUser = Depends(get_current_user)):
    return _profile_for(db, current_user)


@router.patch("/api/profile", response_model=ProfileOut)
def update_profile(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: IdentityUser = Depends(get_current_user),
):
    profile = _profile_for(db, current_user)
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(profile, key, value)
    db.commit()
    db.refresh(profile)
    return profile
