from typing import List, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from storefront.data.models.activity_log import ActivityLogModel


class ActivityRepo:
    def __init__(self, db: Session):
        self.db = db

    def add(self, entry: ActivityLogModel) -> ActivityLogModel:
        self.db.add(entry)
        self.db.commit()
        return entry

    def list(
        self,
        user_id: str | None = None,
        action: str | None = None,
        entity_type: str | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> Tuple[List[ActivityLogModel], int]:
        """Returns (entries, total_count), newest first."""
        filters = []
        if user_id is not None:
            filters.append(ActivityLogModel.user_id == user_id)
        if action is not None:
            filters.append(ActivityLogModel.action == action)
        if entity_type is not None:
            filters.append(ActivityLogModel.entity_type == entity_type)

        total = self.db.execute(
            select(func.count(ActivityLogModel.id)).where(*filters)
        ).scalar_one()
        entries = self.db.execute(
            select(ActivityLogModel)
            .where(*filters)
            .order_by(ActivityLogModel.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        ).scalars().all()
        return list(entries), total
