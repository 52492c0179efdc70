from sqlalchemy.orm import Session
from storefront.domain.errors import ProductNotFoundError
from storefront.domain.schemas import ProductOut
from storefront.repos.product_repo import ProductRepo


class ProductService:
    """Read-only catalog access, products are managed elsewhere."""

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    def list_products(self, limit: int = 50, offset: int = 0) -> list[ProductOut]:
        return [ProductOut.model_validate(p) for p in self.repo.list_products(limit, offset)]

    def get_by_slug(self, slug: str) -> ProductOut:
        product = self.repo.get_by_slug(slug)
        if not product:
            raise ProductNotFoundError(slug)
        return ProductOut.model_validate(product)
