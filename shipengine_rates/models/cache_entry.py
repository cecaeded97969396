from sqlalchemy import Column, String, Float, JSON
from shipengine_rates.models.base import Base

class CacheEntry(Base):
    __tablename__ = "cache_entries"

    key = Column(String, primary_key=True)
    value = Column(JSON, nullable=True)
    # epoch seconds, NULL keeps the entry until it is deleted
    expires_at = Column(Float, nullable=True)
