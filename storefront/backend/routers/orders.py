# storefront/backend/routers/orders.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storefront.backend.database import get_db
from storefront.backend.routers.deps import get_owner, log_admin_call
from storefront.backend.services.order_service import ServerOrderService
from storefront.domain.schemas import Order, OrderListOut, OrderStatusUpdate

router = APIRouter(prefix="/api/orders", tags=["orders"])


def get_service(db: Session):
    return ServerOrderService(db)


@router.post("", response_model=Order, status_code=201)
def create_order(owner: str = Depends(get_owner), db: Session = Depends(get_db)):
    """
    Turns the caller's cart into an order and empties the cart.
    """
    svc = get_service(db)
    try:
        return svc.create_order_from_cart(owner)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("", response_model=OrderListOut)
def list_orders(owner: str = Depends(get_owner), db: Session = Depends(get_db)):
    return OrderListOut(items=get_service(db).list_orders(owner))


@router.get("/{order_id}", response_model=Order)
def get_order(order_id: int, owner: str = Depends(get_owner), db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.get_order(order_id, owner)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))


@router.put("/{order_id}/status", response_model=Order, dependencies=[Depends(log_admin_call)])
def update_order_status(order_id: int, payload: OrderStatusUpdate, db: Session = Depends(get_db)):
    return get_service(db).update_status(order_id, payload.status)
