# storefront/data/seed.py
from decimal import Decimal

from storefront.data.database import SessionLocal, init_models
from storefront.data.models import ProductModel, UserModel
from storefront.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

PRODUCTS = [
    {"name": "Mechanical Keyboard", "slug": "mechanical-keyboard", "price": Decimal("89.99"), "inventory": 25},
    {"name": "Wireless Mouse", "slug": "wireless-mouse", "price": Decimal("24.50"), "inventory": 60},
    {"name": "27in Monitor", "slug": "27in-monitor", "price": Decimal("249.00"), "inventory": 8},
]


def seed():
    init_models()
    db = SessionLocal()
    try:
        # only seed an empty database
        if db.query(ProductModel).first():
            logger.info("Database already seeded")
            return

        for p in PRODUCTS:
            db.add(ProductModel(description=f"{p['name']} demo product", **p))
        db.add(UserModel(name="Admin", email="admin@example.com", role="admin"))
        db.commit()
        logger.info(f"Seeded {len(PRODUCTS)} products and an admin user")
    finally:
        db.close()


if __name__ == "__main__":
    setup_logging()
    seed()
