# storefront/backend/routers/categories.py
from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from storefront.backend.database import get_db
from storefront.backend.events import broker
from storefront.backend.services.category_service import ServerCategoryService
from storefront.domain.schemas import Category, CategoryIn, CategoryListOut, CategoryUpdate

router = APIRouter(prefix="/api/categories", tags=["categories"])


def get_service(db: Session):
    return ServerCategoryService(db, broker)


@router.get("", response_model=CategoryListOut)
def list_categories(
    status: str | None = Query(None, pattern="^(active|all)$"),
    db: Session = Depends(get_db),
):
    return CategoryListOut(items=get_service(db).list(active_only=status == "active"))


@router.get("/{category_id}", response_model=Category)
def get_category(category_id: int, db: Session = Depends(get_db)):
    return get_service(db).get(category_id)


@router.post("", response_model=Category, status_code=201)
def create_category(payload: CategoryIn, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.create(payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.put("/{category_id}", response_model=Category)
def update_category(category_id: int, payload: CategoryUpdate, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.update(category_id, payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{category_id}", status_code=204)
def delete_category(category_id: int, db: Session = Depends(get_db)):
    get_service(db).delete(category_id)
    return Response(status_code=204)
