# storefront/api/routers/orders.py
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.api.deps import get_user_id
from storefront.data.database import get_db
from storefront.domain.errors import AuthenticationRequiredError, NotFoundError
from storefront.domain.schemas import OrderOut, OrderPageOut
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("", response_model=OrderPageOut)
def list_orders(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    user_id: str | None = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """
    Order history of the signed-in user, newest first.
    """
    try:
        return OrderService(db).list_user_orders(user_id, page, page_size)
    except AuthenticationRequiredError as e:
        raise HTTPException(status_code=401, detail=str(e))


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: str,
    user_id: str | None = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """
    Order detail, only for its owner.
    """
    try:
        return OrderService(db).get_order(order_id, user_id)
    except AuthenticationRequiredError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
