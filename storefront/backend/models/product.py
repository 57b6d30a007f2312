from sqlalchemy import JSON, Column, ForeignKey, Integer, Numeric, String, Text

from storefront.backend.database import Base


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    slug = Column(String(200), nullable=False, unique=True)
    price = Column(Numeric(10, 2), nullable=False)
    description = Column(Text, nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)

    inventory = Column(Integer, nullable=False, default=0)
    images = Column(JSON, nullable=False, default=list)
