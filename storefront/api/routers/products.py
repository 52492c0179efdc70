from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from storefront.data.database import get_db
from storefront.domain.errors import ProductNotFoundError
from storefront.domain.schemas import ProductOut
from storefront.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["products"])

@router.get("", response_model=list[ProductOut])
def list_products(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    return ProductService(db).list_products(limit, offset)

@router.get("/{slug}", response_model=ProductOut)
def get_product(slug: str, db: Session = Depends(get_db)):
    try:
        return ProductService(db).get_by_slug(slug)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
