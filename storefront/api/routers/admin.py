# storefront/api/routers/admin.py
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.api.deps import get_user_id
from storefront.data.database import get_db
from storefront.domain.errors import (
    AuthenticationRequiredError,
    ConcurrencyConflictError,
    NotFoundError,
)
from storefront.domain.order_status import OrderStatus
from storefront.domain.schemas import ActivityPageOut, OrderOut, OrderPageOut, OrderStatusUpdate
from storefront.services.admin_service import AdminService

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/orders", response_model=OrderPageOut)
def list_orders(
    status: OrderStatus | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    admin_id: str | None = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    try:
        return AdminService(db).list_orders(
            admin_id,
            status=status.value if status else None,
            page=page,
            page_size=page_size,
        )
    except AuthenticationRequiredError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))


@router.get("/orders/{order_id}", response_model=OrderOut)
def get_order(
    order_id: str,
    admin_id: str | None = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    try:
        return AdminService(db).get_order(admin_id, order_id)
    except AuthenticationRequiredError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.patch("/orders/{order_id}/status", response_model=OrderOut)
def update_order_status(
    order_id: str,
    payload: OrderStatusUpdate,
    admin_id: str | None = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    try:
        return AdminService(db).update_order_status(
            admin_id,
            order_id,
            payload.status.value,
            expected_version=payload.expected_version,
        )
    except AuthenticationRequiredError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConcurrencyConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/activity", response_model=ActivityPageOut)
def list_activity(
    user_id: str | None = Query(None),
    action: str | None = Query(None),
    entity_type: str | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    admin_id: str | None = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """
    Audit trail of admin actions, newest first.
    """
    try:
        return AdminService(db).list_activity(
            admin_id,
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            page=page,
            page_size=page_size,
        )
    except AuthenticationRequiredError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
