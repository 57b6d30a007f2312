"""
Unit Tests: client-side ProductService
"""

import pytest

from storefront.exceptions import NetworkError
from storefront.services.product_service import ProductService
from storefront.services.storage import RECENTLY_VIEWED_KEY
from tests.conftest import make_product


@pytest.fixture
def service(products_api, recently_viewed_api, storage):
    return ProductService(products_api, recently_viewed_api, storage, recently_viewed_limit=3)


class TestImportCsv:
    def test_all_rows_created(self, service, products_api):
        result = service.import_csv("plants.csv", "name,slug,price\nRose,rose,199\nTulip,tulip,149")

        assert result.is_valid
        assert [c.args[0].slug for c in products_api.create.call_args_list] == ["rose", "tulip"]

    def test_one_bad_row_blocks_the_import(self, service, products_api):
        result = service.import_csv(
            "plants.csv", "name,slug,price\nRose,rose,199\nTulip,tulip,149\nLily,lily,"
        )

        assert result.malformed_count == 1
        products_api.create.assert_not_called()


class TestRecentlyViewed:
    def test_remote_record(self, service, recently_viewed_api, storage):
        service.record_view(7)

        recently_viewed_api.record.assert_called_once_with(7)
        assert storage.get(RECENTLY_VIEWED_KEY) is None

    def test_local_fallback_is_deduplicated_and_capped(self, service, recently_viewed_api, storage):
        recently_viewed_api.record.side_effect = NetworkError("http://api", "down")

        for product_id in (1, 2, 3, 1, 4):
            service.record_view(product_id)

        assert storage.get(RECENTLY_VIEWED_KEY) == ["4", "1", "3"]

    def test_fetch_falls_back_to_local_ids(self, service, recently_viewed_api, products_api, storage):
        storage.set(RECENTLY_VIEWED_KEY, ["2", "1"])
        recently_viewed_api.fetch.side_effect = NetworkError("http://api", "down")
        products_api.by_ids.return_value = [make_product(2, "Palm"), make_product(1, "Fern")]

        products = service.recently_viewed()

        assert [p.id for p in products] == [2, 1]
        assert list(products_api.by_ids.call_args.args[0]) == [2, 1]

    def test_nothing_available(self, service, recently_viewed_api, products_api):
        recently_viewed_api.fetch.side_effect = NetworkError("http://api", "down")

        assert service.recently_viewed() == []
        products_api.by_ids.assert_not_called()
