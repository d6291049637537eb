from sqlalchemy import Column, UUID, String, JSON, DateTime
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase
from datetime import datetime, timezone
import uuid

class Base(AsyncAttrs, DeclarativeBase):
    pass

class ListingLog(Base):
    __tablename__ = "ListingLogs"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(String(64), nullable=False)
    action = Column(String(255), nullable=False)
    entity_id = Column(String(64))
    details = Column(JSON)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc).replace(tzinfo=None))
