from sqlalchemy import select
from sqlalchemy.orm import Session
from storefront.data.models.product import ProductModel

class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: str) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def get_by_slug(self, slug: str) -> ProductModel | None:
        return self.db.execute(
            select(ProductModel).where(ProductModel.slug == slug)
        ).scalar_one_or_none()

    def list_products(self, limit: int = 50, offset: int = 0) -> list[ProductModel]:
        return list(
            self.db.execute(
                select(ProductModel)
                .order_by(ProductModel.created_at.desc())
                .offset(offset)
                .limit(limit)
            ).scalars()
        )
