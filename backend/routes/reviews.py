# backend/routes/reviews.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Query
from sqlalchemy.orm import Session

from database import get_db
from models.review import Review
from schemas.review import ReviewOut, ReviewCreate, ReviewUpdate
from schemas.user import IdentityUser
from utils.audit import write_log, client_ip
from utils.security import require_admin
from utils.updates import changed_fields

router = APIRouter(tags=["Reviews"])


def _ordered(query):
    # Manual ordering; display_order is set by the back office
    return query.order_by(Review.display_order.asc(), Review.id.asc())


# Public: active reviews only
@router.get("/api/reviews")
def list_reviews(db: Session = Depends(get_db)):
    reviews = _ordered(db.query(Review).filter(Review.is_active == True)).all()  # noqa: E712
    return {"reviews": [ReviewOut.model_validate(r) for r in reviews]}


@router.get("/api/admin/reviews")
def admin_list_reviews(db: Session = Depends(get_db), admin: IdentityUser = Depends(require_admin)):
    reviews = _ordered(db.query(Review)).all()
    return {"reviews": [ReviewOut.model_validate(r) for r in reviews]}


@router.post("/api/admin/reviews")
def admin_create_review(
    payload: ReviewCreate,
    request: Request,
    db: Session = Depends(get_db),
    admin: IdentityUser = Depends(require_admin),
):
    if not payload.customer_name or not payload.review_text:
        raise HTTPException(status_code=400, detail="Customer name and review text are required")

    review = Review(
        customer_name=payload.customer_name,
        customer_title=payload.customer_title or "",
        review_text=payload.review_text,
        rating=payload.rating,
        is_active=payload.is_active,
        display_order=payload.display_order,
    )
    db.add(review)
    db.commit()
    db.refresh(review)
    write_log(db, user_id=admin.id, action="REVIEW_CREATE", resource="reviews", status="SUCCESS",
              ip=client_ip(request), meta={"id": review.id})
    return {"review": ReviewOut.model_validate(review), "success": True}


@router.patch("/api/admin/reviews")
def admin_update_review(
    payload: ReviewUpdate,
    request: Request,
    db: Session = Depends(get_db),
    admin: IdentityUser = Depends(require_admin),
):
    if payload.id is None:
        raise HTTPException(status_code=400, detail="Review ID is required")
    review = db.query(Review).filter(Review.id == payload.id).first()
    if not review:
        raise HTTPException(status_code=404, detail="Review not found")

    for key, value in changed_fields(payload, nullable=("customer_title",)).items():
        setattr(review, key, value)
    db.commit()
    db.refresh(review)
    write_log(db, user_id=admin.id, action="REVIEW_UPDATE", resource="reviews", status="SUCCESS",
              ip=client_ip(request), meta={"id": review.id})
    return {"review": ReviewOut.model_validate(review), "success": True}


@router.delete("/api/admin/reviews")
def admin_delete_review(
    request: Request,
    id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    admin: IdentityUser = Depends(require_admin),
):
    if id is None:
        raise HTTPException(status_code=400, detail="Review ID is required")
    review = db.query(Review).filter(Review.id == id).first()
    if not review:
        raise HTTPException(status_code=404, detail="Review not found")

    db.delete(review)
    db.commit()
    write_log(db, user_id=admin.id, action="REVIEW_DELETE", resource="reviews", status="SUCCESS",
              ip=client_ip(request), meta={"id": id})
    return {"success": True}
