from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint

from storefront.backend.database import Base


class RecentlyViewedModel(Base):
    __tablename__ = "recently_viewed"

    id = Column(Integer, primary_key=True)
    owner = Column(String, nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    viewed_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (UniqueConstraint("owner", "product_id", name="u_recent_owner_product"),)
