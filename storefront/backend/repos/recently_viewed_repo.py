from datetime import datetime, timezone
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.backend.models.recently_viewed import RecentlyViewedModel


class RecentlyViewedRepo:
    def __init__(self, db: Session):
        self.db = db

    def record(self, owner: str, product_id: int) -> None:
        stmt = select(RecentlyViewedModel).where(
            RecentlyViewedModel.owner == owner,
            RecentlyViewedModel.product_id == product_id,
        )
        entry = self.db.execute(stmt).scalars().first()
        if entry:
            entry.viewed_at = datetime.now(timezone.utc)
        else:
            self.db.add(RecentlyViewedModel(owner=owner, product_id=product_id))
        self.db.commit()

    def product_ids(self, owner: str, limit: int) -> List[int]:
        stmt = (
            select(RecentlyViewedModel.product_id)
            .where(RecentlyViewedModel.owner == owner)
            .order_by(RecentlyViewedModel.viewed_at.desc(), RecentlyViewedModel.id.desc())
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all())
