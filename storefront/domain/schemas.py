# storefront/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from storefront.exceptions import ResponseSchemaError

M = TypeVar("M", bound=BaseModel)


class CartItem(BaseModel):
    """Line item of the cart (client state and GET /api/cart)."""

    id: int
    name: str
    price: Decimal = Field(..., ge=0)
    image: Optional[str] = None
    quantity: int = Field(..., ge=1)

    model_config = ConfigDict(from_attributes=True)


class CartOut(BaseModel):
    items: List[CartItem]


class CartItemIn(BaseModel):
    product_id: int = Field(..., gt=0)
    quantity: int = Field(1, gt=0)


class CartItemUpdate(BaseModel):
    quantity: int = Field(..., ge=1)


class Category(BaseModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    parent_id: Optional[int] = None
    is_active: bool = True
    sort_order: int = 0
    product_count: int = 0

    model_config = ConfigDict(from_attributes=True)


class CategoryNode(Category):
    """Category placed in the tree: depth from its root plus its children."""

    level: int = 0
    children: List["CategoryNode"] = Field(default_factory=list)


class CategoryListOut(BaseModel):
    items: List[Category]


class CategoryIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    parent_id: Optional[int] = None
    is_active: bool = True
    sort_order: int = Field(0, ge=0)


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    slug: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    parent_id: Optional[int] = None
    is_active: Optional[bool] = None
    sort_order: Optional[int] = Field(None, ge=0)


class Product(BaseModel):
    id: int
    name: str
    slug: str
    price: Decimal = Field(..., ge=0)
    description: Optional[str] = None
    category_id: Optional[int] = None
    inventory: int = 0
    images: List[str] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)

    @property
    def image(self) -> Optional[str]:
        return self.images[0] if self.images else None


class ProductListOut(BaseModel):
    items: List[Product]
    total: int


class ProductIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    slug: str = Field(..., min_length=1, max_length=200)
    price: Decimal = Field(..., ge=0)
    description: Optional[str] = None
    category_id: Optional[int] = None
    inventory: int = Field(0, ge=0)
    images: List[str] = Field(default_factory=list)


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    slug: Optional[str] = Field(None, min_length=1, max_length=200)
    price: Optional[Decimal] = Field(None, ge=0)
    description: Optional[str] = None
    category_id: Optional[int] = None
    inventory: Optional[int] = Field(None, ge=0)
    images: Optional[List[str]] = None


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class OrderItem(BaseModel):
    product_id: int
    name: str
    quantity: int
    price: Decimal

    model_config = ConfigDict(from_attributes=True)


class Order(BaseModel):
    id: int
    owner: str
    status: OrderStatus
    total: Decimal
    items: List[OrderItem]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderListOut(BaseModel):
    items: List[Order]


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class User(BaseModel):
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str = "user"
    image_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class RoleUpdate(BaseModel):
    role: str = Field(..., min_length=1)
    source: str = "manual"


class RoleSync(BaseModel):
    clerk_id: str
    email: Optional[str] = None
    role: str = "customer"
    source: str = "clerk"


class RecentlyViewedIn(BaseModel):
    product_id: int = Field(..., gt=0)


class CsvRowError(BaseModel):
    line: int
    errors: List[str]


class BulkUploadResult(BaseModel):
    imported: int
    errors: List[CsvRowError] = Field(default_factory=list)


class CategoryEvent(BaseModel):
    """Payload pushed on the SSE channel when a category changes."""

    type: str
    category_id: Optional[int] = None


def parse_response(model: Type[M], payload, resource: str) -> M:
    """
    Validate a decoded JSON body against ``model``.

    There is exactly one accepted shape per endpoint; anything else
    raises ResponseSchemaError instead of being guessed at.
    """
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise ResponseSchemaError(resource, e.errors(include_url=False)) from e
