# storefront/api/routers/checkout.py
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from storefront.api.deps import get_identity, get_lock_service, get_payment_gateway
from storefront.data.database import get_db
from storefront.domain.errors import (
    AuthenticationRequiredError,
    CartEmptyError,
    ConcurrencyConflictError,
)
from storefront.domain.identity import CartIdentity
from storefront.domain.schemas import CheckoutOut
from storefront.services.checkout_service import CheckoutService
from storefront.services.lock_service import LockService
from storefront.services.payment_gateway import PaymentGateway
from storefront.utils.settings import CART_COOKIE_NAME
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/checkout", tags=["checkout"])


@router.post("", response_model=CheckoutOut, status_code=201)
def checkout(
    response: Response,
    identity: CartIdentity = Depends(get_identity),
    db: Session = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    lock_service: LockService = Depends(get_lock_service),
):
    """
    Creates the order from the current cart and returns the hosted payment
    page URL the client should redirect to.
    """
    svc = CheckoutService(db, gateway=gateway, lock_service=lock_service)
    try:
        result = svc.process_checkout(identity)
    except CartEmptyError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AuthenticationRequiredError as e:
        #client redirects to sign-in on 401
        raise HTTPException(status_code=401, detail=str(e))
    except ConcurrencyConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception:
        logger.error("Checkout failed", exc_info=True)
        raise HTTPException(status_code=502, detail="Checkout failed, please try again")

    response.delete_cookie(CART_COOKIE_NAME)
    return {"order": result.order, "session_url": result.session_url}
