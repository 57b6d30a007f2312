# storefront/services/product_service.py
from typing import List

from storefront.domain.csv_format import CsvImport, parse_products_csv
from storefront.domain.schemas import BulkUploadResult, Product, ProductIn, ProductListOut, ProductUpdate
from storefront.exceptions import StorefrontError
from storefront.services.api_client import ProductsApi, RecentlyViewedApi
from storefront.services.storage import RECENTLY_VIEWED_KEY, LocalStorage
from storefront.utils.logging import get_logger
from storefront.utils.settings import RECENTLY_VIEWED_LIMIT

logger = get_logger(__name__)


class ProductService:
    def __init__(
        self,
        products_api: ProductsApi,
        recently_viewed_api: RecentlyViewedApi,
        storage: LocalStorage,
        recently_viewed_limit: int = RECENTLY_VIEWED_LIMIT,
    ):
        self.api = products_api
        self.recently_viewed_api = recently_viewed_api
        self.storage = storage
        self.recently_viewed_limit = recently_viewed_limit

    def list(self, **filters) -> ProductListOut:
        return self.api.list(**filters)

    def get(self, product_id: int) -> Product:
        return self.api.get(product_id)

    def create(self, payload: ProductIn) -> Product:
        product = self.api.create(payload)
        logger.info(f"Product {product.id} created ({product.slug})")
        return product

    def update(self, product_id: int, payload: ProductUpdate) -> Product:
        return self.api.update(product_id, payload)

    def delete(self, product_id: int) -> None:
        self.api.delete(product_id)
        logger.info(f"Product {product_id} deleted")

    def import_csv(self, filename: str, text: str) -> CsvImport:
        """
        Parse a CSV locally and create one product per row.

        All or nothing on the parse step: if a single row is malformed,
        nothing is sent and the caller gets the row errors back.
        """
        parsed = parse_products_csv(filename, text)

        if not parsed.is_valid:
            logger.warning(f"CSV {filename}: {parsed.malformed_count} malformed row(s), nothing imported")
            return parsed

        for record in parsed.records:
            self.api.create(record)

        logger.info(f"CSV {filename}: imported {len(parsed.records)} product(s)")
        return parsed

    def bulk_upload(self, filename: str, content: bytes | str) -> BulkUploadResult:
        return self.api.bulk_upload(filename, content)

    def export_csv(self) -> str:
        return self.api.export_csv()

    def _local_recent_ids(self) -> List[str]:
        return [str(i) for i in self.storage.get(RECENTLY_VIEWED_KEY, []) or []]

    def record_view(self, product_id: int) -> None:
        try:
            self.recently_viewed_api.record(product_id)
        except StorefrontError as e:
            logger.warning(f"Recording view remotely failed, keeping it locally: {e}")
            ids = [str(product_id)] + [i for i in self._local_recent_ids() if i != str(product_id)]
            self.storage.set(RECENTLY_VIEWED_KEY, ids[: self.recently_viewed_limit])

    def recently_viewed(self) -> List[Product]:
        try:
            return self.recently_viewed_api.fetch()
        except StorefrontError as e:
            logger.warning(f"Recently viewed unavailable remotely, using local ids: {e}")
            ids = self._local_recent_ids()
            if not ids:
                return []
            try:
                return self.api.by_ids(int(i) for i in ids)
            except StorefrontError as e:
                logger.warning(f"Could not resolve recently viewed products: {e}")
                return []
