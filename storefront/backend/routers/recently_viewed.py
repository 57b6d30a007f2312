from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from storefront.backend.database import get_db
from storefront.backend.repos.product_repo import ProductRepo
from storefront.backend.repos.recently_viewed_repo import RecentlyViewedRepo
from storefront.backend.routers.deps import get_owner
from storefront.domain.schemas import Product, ProductListOut, RecentlyViewedIn
from storefront.exceptions import NotFoundError
from storefront.utils.settings import RECENTLY_VIEWED_LIMIT

router = APIRouter(prefix="/api/recently-viewed", tags=["recently-viewed"])


@router.get("", response_model=ProductListOut)
def recently_viewed(owner: str = Depends(get_owner), db: Session = Depends(get_db)):
    ids = RecentlyViewedRepo(db).product_ids(owner, RECENTLY_VIEWED_LIMIT)
    products = ProductRepo(db).get_many(ids)
    return ProductListOut(items=[Product.model_validate(p) for p in products], total=len(products))


@router.post("", status_code=204)
def record_view(
    payload: RecentlyViewedIn,
    owner: str = Depends(get_owner),
    db: Session = Depends(get_db),
):
    if not ProductRepo(db).get_product(payload.product_id):
        raise NotFoundError("Product", payload.product_id)
    RecentlyViewedRepo(db).record(owner, payload.product_id)
    return Response(status_code=204)
