from sqlalchemy import Column, String, DateTime, Text
from dashboard_api.core.database import Base
from datetime import datetime


class AppSettings(Base):
    """Legacy per-user settings row; still read when user_secrets has no n8n key."""
    __tablename__ = "app_settings"

    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, nullable=False, unique=True, index=True)
    n8n_api_key = Column(Text, nullable=True)
    n8n_base_url = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
