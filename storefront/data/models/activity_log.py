import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, ForeignKey, String, DateTime, JSON

from storefront.data.database import Base


class ActivityLogModel(Base):
    __tablename__ = "activity_logs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    action = Column(String(50), nullable=False)  # update_order_status, ...
    entity_type = Column(String(20), nullable=False)
    entity_id = Column(String(36), nullable=False)
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
