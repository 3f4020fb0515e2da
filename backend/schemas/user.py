from pydantic import BaseModel, ConfigDict, EmailStr
from typing import Optional
from datetime import datetime

# Account as reported by the identity provider
class IdentityUser(BaseModel):
    id: str
    email: str
    name: Optional[str] = None

# Result of a sign-up / sign-in round trip
class IdentitySession(BaseModel):
    access_token: Optional[str] = None
    user: IdentityUser

# Schema for user registration requests
class UserCreate(BaseModel):
    email: EmailStr
    password: str
    full_name: str
    phone: Optional[str] = None

# Schema for user authentication credentials
class UserLogin(BaseModel):
    email: EmailStr
    password: str

class TokenVerify(BaseModel):
    token: Optional[str] = None

class AuthResponse(BaseModel):
    success: bool = True
    token: Optional[str] = None
    user: IdentityUser
    message: str
    merged_cart_items: int = 0
    merged_wishlist_items: int = 0

class VerifyResponse(BaseModel):
    valid: bool
    user: IdentityUser

# Storefront profile
class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    phone: Optional[str] = None
    created_at: Optional[datetime] = None

class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    phone: Optional[str] = None

# Admin user listing enriched with order statistics
class AdminUserOut(BaseModel):
    id: str
    email: str
    created_at: Optional[datetime] = None
    profile: ProfileOut
    order_count: int
    total_spent: float
