"""Seed the catalogue, BBQ packages, reviews and the first admin account.

Usage: python populate_db.py [admin-email]
"""
import os
import sys

# Add 'backend' folder to Python path
sys.path.append(os.path.abspath(os.path.dirname(__file__)))

from database import SessionLocal, init_db
from models.booking import BBQPackage
from models.product import Product
from models.review import Review
from models.users import Admin

# Configuration
DEFAULT_ADMIN_EMAIL = "admin@example.com"

PRODUCTS = [
    {
        "slug": "premium-oak-firewood", "name": "Premium Oak Firewood", "category": "firewood",
        "price_cents": 4500, "unit": "per cord",
        "description": "Kiln-dried oak, split and ready to burn.",
        "features": ["Kiln dried", "Low moisture", "Long burn time"],
        "specifications": {"Moisture": "< 20%", "Length": "16 in"},
        "sort_order": 1,
    },
    {
        "slug": "coconut-shell-charcoal", "name": "Coconut Shell Charcoal", "category": "charcoal",
        "price_cents": 2500, "unit": "per 10 kg bag",
        "description": "High-heat charcoal made from coconut shells.",
        "features": ["High heat", "Low smoke", "Sustainable"],
        "specifications": {"Weight": "10 kg"},
        "sort_order": 2,
    },
    {
        "slug": "mixed-hardwood-bundle", "name": "Mixed Hardwood Bundle", "category": "bundles",
        "price_cents": 3500, "unit": "per bundle",
        "description": "A mix of seasoned hardwoods for fireplaces and fire pits.",
        "features": ["Seasoned", "Mixed species"],
        "specifications": {"Volume": "0.5 m3"},
        "sort_order": 3,
    },
]

PACKAGES = [
    {"name": "Backyard Grill Kit", "description": "Charcoal grill, tools and starter charcoal.",
     "price_cents": 15000, "features": ["Grill", "Tongs", "5 kg charcoal"], "display_order": 1},
    {"name": "Party Smoker Package", "description": "Offset smoker for large gatherings.",
     "price_cents": 35000, "features": ["Offset smoker", "Thermometer", "Wood chunks"], "display_order": 2},
]

REVIEWS = [
    {"customer_name": "Nimal P.", "customer_title": "Home cook",
     "review_text": "The oak burns clean and long. Delivery was on time.", "rating": 5, "display_order": 1},
    {"customer_name": "Sarah K.", "customer_title": "Restaurant owner",
     "review_text": "Consistent charcoal quality every order.", "rating": 5, "display_order": 2},
]
# End Configuration


def load_all_data(admin_email: str = DEFAULT_ADMIN_EMAIL):
    """Insert seed rows that are not present yet; safe to run repeatedly."""
    init_db()
    session = SessionLocal()
    try:
        for data in PRODUCTS:
            if not session.query(Product).filter(Product.slug == data["slug"]).first():
                session.add(Product(**data))

        for data in PACKAGES:
            if not session.query(BBQPackage).filter(BBQPackage.name == data["name"]).first():
                session.add(BBQPackage(**data))

        for data in REVIEWS:
            if not session.query(Review).filter(Review.customer_name == data["customer_name"]).first():
                session.add(Review(**data))

        # The account itself is created with the identity provider; this row
        # only grants it back-office access.
        email = admin_email.strip().lower()
        if not session.query(Admin).filter(Admin.email == email).first():
            session.add(Admin(email=email, is_active=True))

        session.commit()
        print(f"Seed complete: {len(PRODUCTS)} products, {len(PACKAGES)} packages, {len(REVIEWS)} reviews, admin {email}")
    finally:
        session.close()


if __name__ == "__main__":
    load_all_data(sys.argv[1] if len(sys.argv) > 1 else DEFAULT_ADMIN_EMAIL)
