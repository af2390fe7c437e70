from sqlalchemy import Column, String, DateTime, Text, Boolean, UniqueConstraint
from dashboard_api.core.database import Base
from datetime import datetime


class UserSecret(Base):
    __tablename__ = "user_secrets"
    __table_args__ = (
        UniqueConstraint("user_id", "secret_name", name="uq_user_secrets_user_id_secret_name"),
    )

    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)  # Supabase auth user id
    secret_name = Column(String, nullable=False)
    secret_value = Column(Text, nullable=False)  # Fernet token when is_encrypted
    is_encrypted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
