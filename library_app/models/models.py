from sqlalchemy import Column, String, DateTime, JSON
from datetime import datetime, timezone
from library_app.core.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class EntityCollection(Base):
    """One row per collection; ``records`` holds the whole ordered list."""
    __tablename__ = "entity_collections"
    name = Column(String, primary_key=True)
    records = Column(JSON, nullable=False, default=list)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)
