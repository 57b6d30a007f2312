from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Text, UniqueConstraint

from storefront.backend.database import Base


class CategoryModel(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    slug = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    parent_id = Column(Integer, ForeignKey("categories.id"), nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)
    sort_order = Column(Integer, nullable=False, default=0)

    # NULL parents compare distinct in SQL, root slugs are checked in ServerCategoryService
    __table_args__ = (UniqueConstraint("parent_id", "slug", name="u_category_sibling_slug"),)
