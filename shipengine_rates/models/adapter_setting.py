from sqlalchemy import Column, String, DateTime, JSON
from datetime import datetime
from shipengine_rates.models.base import Base

class AdapterSetting(Base):
    __tablename__ = "adapter_settings"

    adapter_id = Column(String, primary_key=True)
    data = Column(JSON, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
