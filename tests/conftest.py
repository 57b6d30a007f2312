"""
Pytest configuration and shared fixtures.

Client services are tested against MagicMock resource clients and an
in-memory storage; the dev backend runs on an in-memory SQLite database
through FastAPI's TestClient.
"""

import os
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# importing storefront.backend.main builds its module-level app on this URL
os.environ.setdefault("DATABASE_URL", "sqlite://")

from storefront.backend import models  # noqa: F401
from storefront.backend.database import Base, get_db
from storefront.backend.main import create_app
from storefront.domain.schemas import CartItem, Category, Product
from storefront.services.api_client import (
    CartApi,
    CategoriesApi,
    OrdersApi,
    ProductsApi,
    RecentlyViewedApi,
)
from storefront.services.storage import MemoryStorage


def make_category(id, name, parent_id=None, **extra) -> Category:
    return Category(
        id=id,
        name=name,
        slug=extra.pop("slug", name.lower().replace(" ", "-")),
        parent_id=parent_id,
        **extra,
    )


def make_product(id=1, name="Fern", price="12.50", **extra) -> Product:
    return Product(
        id=id,
        name=name,
        slug=extra.pop("slug", name.lower()),
        price=Decimal(price),
        **extra,
    )


def make_cart_item(id=1, name="Fern", price="12.50", quantity=1) -> CartItem:
    return CartItem(id=id, name=name, price=Decimal(price), quantity=quantity)


# ============================================================================
# Client fixtures
# ============================================================================

@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def cart_api():
    api = MagicMock(spec=CartApi)
    api.fetch_items.return_value = []
    return api


@pytest.fixture
def categories_api():
    return MagicMock(spec=CategoriesApi)


@pytest.fixture
def products_api():
    return MagicMock(spec=ProductsApi)


@pytest.fixture
def recently_viewed_api():
    return MagicMock(spec=RecentlyViewedApi)


@pytest.fixture
def orders_api():
    return MagicMock(spec=OrdersApi)


@pytest.fixture
def sample_categories():
    """
    Indoor
      Succulents
        Echeveria
    Outdoor (inactive)
    """
    return [
        make_category(1, "Indoor", description="Plants for the house", sort_order=0),
        make_category(2, "Succulents", parent_id=1, sort_order=0),
        make_category(3, "Echeveria", parent_id=2, sort_order=0),
        make_category(4, "Outdoor", is_active=False, sort_order=1),
    ]


# ============================================================================
# Dev backend fixtures
# ============================================================================

@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db_session):
    app = create_app(create_tables=False)

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
