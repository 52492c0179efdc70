#storefront/api/routers/carts.py
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from storefront.api.deps import get_identity
from storefront.data.database import get_db
from storefront.domain.errors import NotFoundError
from storefront.domain.identity import CartIdentity
from storefront.domain.schemas import CartOut, CartSizeOut, ItemIn, QuantityIn
from storefront.services.cart_service import CartService
from storefront.utils.settings import CART_COOKIE_NAME, COOKIE_SECURE

router = APIRouter(prefix="/cart", tags=["cart"])


def set_cart_cookie(response: Response, cart_id: str):
    response.set_cookie(
        CART_COOKIE_NAME,
        cart_id,
        httponly=True,
        secure=COOKIE_SECURE,
        samesite="lax",
    )


@router.get("", response_model=CartOut | None)
def get_cart(identity: CartIdentity = Depends(get_identity), db: Session = Depends(get_db)):
    return CartService(db).get_cart(identity)


@router.get("/size", response_model=CartSizeOut)
def get_cart_size(identity: CartIdentity = Depends(get_identity), db: Session = Depends(get_db)):
    return {"size": CartService(db).get_cart_size(identity)}


@router.post("/items", response_model=CartOut)
def add_item(
    payload: ItemIn,
    response: Response,
    identity: CartIdentity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    try:
        cart, created = CartService(db).add(identity, payload.product_id, payload.quantity)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if created:
        set_cart_cookie(response, cart["id"])
    return cart


@router.post("/items/{item_id}/increment", response_model=CartOut)
def increment_item(item_id: str, identity: CartIdentity = Depends(get_identity), db: Session = Depends(get_db)):
    try:
        return CartService(db).increment(identity, item_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/items/{item_id}/decrement", response_model=CartOut)
def decrement_item(item_id: str, identity: CartIdentity = Depends(get_identity), db: Session = Depends(get_db)):
    try:
        return CartService(db).decrement(identity, item_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/items/{item_id}", response_model=CartOut)
def set_item_quantity(
    item_id: str,
    payload: QuantityIn,
    identity: CartIdentity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    try:
        return CartService(db).set_quantity(identity, item_id, payload.quantity)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/items/{item_id}", response_model=CartOut)
def remove_item(item_id: str, identity: CartIdentity = Depends(get_identity), db: Session = Depends(get_db)):
    try:
        return CartService(db).remove(identity, item_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
