# storefront/backend/routers/products.py
from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile
from sqlalchemy.orm import Session

from storefront.backend.database import get_db
from storefront.backend.services.product_service import ServerProductService
from storefront.domain.schemas import (
    BulkUploadResult,
    Product,
    ProductIn,
    ProductListOut,
    ProductUpdate,
)

router = APIRouter(prefix="/api/products", tags=["products"])


def get_service(db: Session):
    return ServerProductService(db)


@router.get("", response_model=ProductListOut)
def list_products(
    category_id: int | None = Query(None),
    search: str | None = Query(None),
    limit: int | None = Query(None, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    return get_service(db).list(category_id, search, limit, offset)


# fixed paths go before /{product_id}
@router.get("/export")
def export_products(db: Session = Depends(get_db)):
    return Response(
        content=get_service(db).export_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=products.csv"},
    )


@router.get("/by-ids", response_model=ProductListOut)
def products_by_ids(ids: str = Query(""), db: Session = Depends(get_db)):
    try:
        parsed = [int(i) for i in ids.split(",") if i.strip()]
    except ValueError:
        raise HTTPException(status_code=400, detail="ids must be a comma separated list of integers")
    return get_service(db).by_ids(parsed)


@router.post("/bulk-upload", response_model=BulkUploadResult)
async def bulk_upload(file: UploadFile = File(...), db: Session = Depends(get_db)):
    raw = await file.read()
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="CSV file must be UTF-8 encoded")
    return get_service(db).bulk_upload(file.filename or "", text)


@router.get("/{product_id}", response_model=Product)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return get_service(db).get(product_id)


@router.post("", response_model=Product, status_code=201)
def create_product(payload: ProductIn, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.create(payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.put("/{product_id}", response_model=Product)
def update_product(product_id: int, payload: ProductUpdate, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.update(product_id, payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{product_id}", status_code=204)
def delete_product(product_id: int, db: Session = Depends(get_db)):
    get_service(db).delete(product_id)
    return Response(status_code=204)
