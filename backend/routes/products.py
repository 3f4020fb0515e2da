# backend/routes/products.py
import logging
from typing import Optional, List

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from models.product import Product, ProductCategory
from schemas.product import ProductOut, ProductCreate, ProductUpdate
from schemas.user import IdentityUser
from utils.audit import write_log, client_ip
from utils.money import to_cents
from utils.security import require_admin
from utils.updates import changed_fields

router = APIRouter(tags=["Products"])
logger = logging.getLogger(__name__)


def _norm_slug(slug: str) -> str:
    s = slug.strip().lower()
    if not s:
        raise HTTPException(status_code=400, detail="Slug is required")
    return s


# Optional catalogue fields that may be cleared with an explicit null
NULLABLE_FIELDS = (
    "unit", "description", "long_description", "image", "images",
    "features", "specifications", "benefits",
)


def _slug_taken(db: Session, slug: str, exclude_id: Optional[int] = None) -> bool:
    query = db.query(Product.id).filter(Product.slug == slug)
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    return query.first() is not None


def _commit_product(db: Session, product: Product):
    slug, product_id = product.slug, product.id
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        # Only a concurrent insert of the same slug is a conflict
        if _slug_taken(db, slug, exclude_id=product_id):
            raise HTTPException(status_code=409, detail="Product slug already exists")
        raise


# =========================
# STOREFRONT
# =========================
@router.get("/api/products", response_model=List[ProductOut])
def list_products(
    category: Optional[ProductCategory] = Query(None, description="Filter by category"),
    db: Session = Depends(get_db),
):
    query = db.query(Product).filter(Product.is_active == True)  # noqa: E712
    if category:
        query = query.filter(Product.category == category.value)
    return query.order_by(Product.sort_order.asc(), Product.id.asc()).all()


@router.get("/api/products/{slug}", response_model=ProductOut)
def get_product(slug: str, db: Session = Depends(get_db)):
    product = db.query(Product).filter(Product.slug == slug.lower(), Product.is_active == True).first()  # noqa: E712
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


# =========================
# BACK OFFICE
# =========================
@router.get("/api/admin/products")
def admin_list_products(
    db: Session = Depends(get_db),
    admin: IdentityUser = Depends(require_admin),
):
    products = db.query(Product).order_by(Product.sort_order.asc(), Product.id.asc()).all()
    return {"products": [ProductOut.model_validate(p) for p in products]}


@router.post("/api/admin/products")
def admin_create_product(
    payload: ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    admin: IdentityUser = Depends(require_admin),
):
    data = payload.model_dump(exclude={"price", "currency"})
    data["slug"] = _norm_slug(payload.slug)
    data["category"] = payload.category.value
    if _slug_taken(db, data["slug"]):
        raise HTTPException(status_code=409, detail="Product slug already exists")
    product = Product(
        **data,
        price_cents=to_cents(payload.price),
        currency=(payload.currency or settings.CURRENCY).upper(),
    )
    db.add(product)
    _commit_product(db, product)
    db.refresh(product)

    write_log(db, user_id=admin.id, action="PRODUCT_CREATE", resource="products", status="SUCCESS",
              ip=client_ip(request), meta={"id": product.id, "slug": product.slug})
    return {"product": ProductOut.model_validate(product)}


@router.patch("/api/admin/products")
def admin_update_product(
    payload: ProductUpdate,
    request: Request,
    db: Session = Depends(get_db),
    admin: IdentityUser = Depends(require_admin),
):
    if payload.id is None:
        raise HTTPException(status_code=400, detail="Product ID is required")
    product = db.query(Product).filter(Product.id == payload.id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    data = changed_fields(payload, nullable=NULLABLE_FIELDS)
    if "price" in data:
        product.price_cents = to_cents(data.pop("price"))
    if "slug" in data:
        data["slug"] = _norm_slug(data["slug"])
        if _slug_taken(db, data["slug"], exclude_id=product.id):
            raise HTTPException(status_code=409, detail="Product slug already exists")
    if "category" in data:
        data["category"] = data["category"].value
    if "currency" in data:
        data["currency"] = data["currency"].upper()
    for key, value in data.items():
        setattr(product, key, value)
    _commit_product(db, product)
    db.refresh(product)

    write_log(db, user_id=admin.id, action="PRODUCT_UPDATE", resource="products", status="SUCCESS",
              ip=client_ip(request), meta={"id": product.id, "fields": sorted(payload.model_fields_set - {"id"})})
    return {"product": ProductOut.model_validate(product)}


@router.delete("/api/admin/products")
def admin_delete_product(
    request: Request,
    id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    admin: IdentityUser = Depends(require_admin),
):
    if id is None:
        raise HTTPException(status_code=400, detail="Product ID is required")
    product = db.query(Product).filter(Product.id == id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    # Order lines keep their own name/price copies, so history survives
    db.delete(product)
    db.commit()

    write_log(db, user_id=admin.id, action="PRODUCT_DELETE", resource="products", status="SUCCESS",
              ip=client_ip(request), meta={"id": id})
    return {"success": True}
