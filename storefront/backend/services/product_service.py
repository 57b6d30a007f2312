# storefront/backend/services/product_service.py
from typing import Dict, List

from sqlalchemy.orm import Session

from storefront.backend.models.product import ProductModel
from storefront.backend.repos.category_repo import CategoryRepo
from storefront.backend.repos.product_repo import ProductRepo
from storefront.domain.csv_format import export_products_csv, parse_products_csv
from storefront.domain.schemas import (
    BulkUploadResult,
    Product,
    ProductIn,
    ProductListOut,
    ProductUpdate,
)
from storefront.exceptions import ConflictError, NotFoundError
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

NULLABLE_FIELDS = ("description", "category_id")


class ServerProductService:
    def __init__(self, db: Session):
        self.repo = ProductRepo(db)
        self.categories = CategoryRepo(db)

    def _get(self, product_id: int) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFoundError("Product", product_id)
        return product

    def _check_category(self, category_id: int | None) -> None:
        if category_id is not None and not self.categories.get_category(category_id):
            raise ValueError(f"Category {category_id} does not exist")

    def list(
        self,
        category_id: int | None = None,
        search: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> ProductListOut:
        products, total = self.repo.list_products(category_id, search, limit, offset)
        return ProductListOut(items=[Product.model_validate(p) for p in products], total=total)

    def get(self, product_id: int) -> Product:
        return Product.model_validate(self._get(product_id))

    def by_ids(self, ids: List[int]) -> ProductListOut:
        products = self.repo.get_many(ids)
        return ProductListOut(items=[Product.model_validate(p) for p in products], total=len(products))

    def create(self, payload: ProductIn) -> Product:
        if self.repo.get_by_slug(payload.slug):
            raise ConflictError(f"Product slug '{payload.slug}' already exists")
        self._check_category(payload.category_id)

        created = self.repo.save(ProductModel(**payload.model_dump()))
        logger.info(f"Product {created.id} created")
        return Product.model_validate(created)

    def update(self, product_id: int, payload: ProductUpdate) -> Product:
        product = self._get(product_id)
        changes = {
            field: value
            for field, value in payload.model_dump(exclude_unset=True).items()
            if value is not None or field in NULLABLE_FIELDS
        }

        if "slug" in changes:
            other = self.repo.get_by_slug(changes["slug"])
            if other and other.id != product_id:
                raise ConflictError(f"Product slug '{changes['slug']}' already exists")
        if "category_id" in changes:
            self._check_category(changes["category_id"])

        for field, value in changes.items():
            setattr(product, field, value)
        return Product.model_validate(self.repo.save(product))

    def delete(self, product_id: int) -> None:
        self.repo.delete(self._get(product_id))
        logger.info(f"Product {product_id} deleted")

    def export_csv(self) -> str:
        products, _ = self.repo.list_products()
        return export_products_csv(Product.model_validate(p) for p in products)

    def bulk_upload(self, filename: str, text: str) -> BulkUploadResult:
        """
        Import the well-formed rows of a CSV and report the others.

        A row whose slug already exists, in the database or earlier in the
        same file, updates that product instead of creating a duplicate.
        """
        parsed = parse_products_csv(filename, text)
        # rows of this upload are not flushed yet, so get_by_slug cannot see them
        pending: Dict[str, ProductModel] = {}

        for record in parsed.records:
            existing = pending.get(record.slug) or self.repo.get_by_slug(record.slug)
            if existing:
                existing.name = record.name
                existing.price = record.price
                if "description" in parsed.header:
                    existing.description = record.description
                    existing.inventory = record.inventory
                self.repo.save(existing, commit=False)
            else:
                existing = self.repo.save(ProductModel(**record.model_dump()), commit=False)
            pending[record.slug] = existing
        self.repo.commit()

        logger.info(
            f"Bulk upload {filename}: {len(parsed.records)} imported, "
            f"{parsed.malformed_count} malformed"
        )
        return BulkUploadResult(imported=len(parsed.records), errors=parsed.errors)
