# storefront/backend/seed.py
from decimal import Decimal

from sqlalchemy.orm import Session

from storefront.backend.database import SessionLocal
from storefront.backend.models import CategoryModel, ProductModel
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

CATALOG = {
    ("Indoor Plants", "indoor-plants"): [
        ("Boston Fern", "boston-fern", "349.00", 25),
        ("Snake Plant", "snake-plant", "299.00", 40),
    ],
    ("Succulents", "succulents"): [
        ("Echeveria", "echeveria", "149.00", 60),
        ("Jade Plant", "jade-plant", "199.00", 30),
    ],
    ("Outdoor Plants", "outdoor-plants"): [
        ("Hibiscus", "hibiscus", "249.00", 15),
    ],
}


def seed(db: Session | None = None) -> bool:
    """Fill an empty database with a small demo catalog. Returns False if data exists."""
    own_session = db is None
    db = db or SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.query(CategoryModel).first():
            return False

        indoor = None
        for sort_order, ((name, slug), products) in enumerate(CATALOG.items()):
            category = CategoryModel(
                name=name,
                slug=slug,
                sort_order=sort_order,
                parent_id=indoor.id if slug == "succulents" else None,
            )
            db.add(category)
            db.flush()
            if slug == "indoor-plants":
                indoor = category

            for product_name, product_slug, price, inventory in products:
                db.add(
                    ProductModel(
                        name=product_name,
                        slug=product_slug,
                        price=Decimal(price),
                        inventory=inventory,
                        category_id=category.id,
                        images=[f"/images/{product_slug}.jpg"],
                    )
                )
        db.commit()
        logger.info(f"Seeded {len(CATALOG)} categories")
        return True
    finally:
        if own_session:
            db.close()
