# storefront/backend/routers/cart.py
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from storefront.backend.database import get_db
from storefront.backend.routers.deps import get_owner
from storefront.backend.services.cart_service import ServerCartService
from storefront.domain.schemas import CartItem, CartItemIn, CartItemUpdate, CartOut

router = APIRouter(prefix="/api/cart", tags=["cart"])


def get_service(db: Session):
    return ServerCartService(db)


@router.get("", response_model=CartOut)
def get_cart(owner: str = Depends(get_owner), db: Session = Depends(get_db)):
    return CartOut(items=get_service(db).get_items(owner))


@router.post("/items", response_model=CartItem)
def add_item(
    payload: CartItemIn,
    owner: str = Depends(get_owner),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.add_product(owner, payload.product_id, payload.quantity)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.put("/items/{product_id}", response_model=CartItem)
def update_item(
    product_id: int,
    payload: CartItemUpdate,
    owner: str = Depends(get_owner),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.update_quantity(owner, product_id, payload.quantity)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/items/{product_id}", status_code=204)
def remove_item(
    product_id: int,
    owner: str = Depends(get_owner),
    db: Session = Depends(get_db),
):
    get_service(db).remove_product(owner, product_id)
    return Response(status_code=204)


@router.delete("", status_code=204)
def clear_cart(owner: str = Depends(get_owner), db: Session = Depends(get_db)):
    get_service(db).clear(owner)
    return Response(status_code=204)
