# backend/routes/admin.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from database import get_db
from models.order import Order
from models.users import UserProfile
from schemas.user import AdminUserOut, IdentityUser, ProfileOut
from utils.audit import write_log, client_ip
from utils.money import to_amount
from utils.security import require_admin

router = APIRouter(tags=["Admin"])


# User listing enriched with order statistics (Admin only)
@router.get("/api/admin/users")
def get_all_users(
    q: Optional[str] = Query(None, description="Search by e-mail or name"),
    db: Session = Depends(get_db),
    admin: IdentityUser = Depends(require_admin),
):
    query = db.query(UserProfile)
    if q:
        like = f"%{q.lower()}%"
        query = query.filter(func.lower(UserProfile.email).like(like) | func.lower(UserProfile.full_name).like(like))
    profiles = query.order_by(UserProfile.created_at.desc()).all()
    if not profiles:
        return {"users": []}

    # Aggregate order count and spend per account in one query
    stats = dict(
        (row.user_id, (row.order_count, row.total_cents))
        for row in db.query(
            Order.user_id,
            func.count(Order.id).label("order_count"),
            func.coalesce(func.sum(Order.total_cents), 0).label("total_cents"),
        )
        .filter(Order.user_id.in_([p.id for p in profiles]))
        .group_by(Order.user_id)
        .all()
    )

    users = []
    for profile in profiles:
        order_count, total_cents = stats.get(profile.id, (0, 0))
        users.append(AdminUserOut(
            id=profile.id,
            email=profile.email or "Email not available",
            created_at=profile.created_at,
            profile=ProfileOut.model_validate(profile),
            order_count=order_count,
            total_spent=to_amount(total_cents),
        ))
    return {"users": users}


# Delete a storefront account profile (Admin only)
@router.delete("/api/admin/users")
def delete_user(
    request: Request,
    id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    admin: IdentityUser = Depends(require_admin),
):
    if not id:
        raise HTTPException(status_code=400, detail="User ID is required")

    # Prevent self-deletion
    if id == admin.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot delete your own account")

    profile = db.query(UserProfile).filter(UserProfile.id == id).first()
    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    db.delete(profile)
    db.commit()
    write_log(db, user_id=admin.id, action="USER_DELETE", resource="users", status="SUCCESS",
              ip=client_ip(request), meta={"deleted_user_id": id})
    return {"success": True}
