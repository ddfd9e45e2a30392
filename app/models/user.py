import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.orm import relationship

from app.db.base import Base


class User(Base):
    __tablename__ = "users"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(256), nullable=False)
    # lower-cased copy used for lookups; email is case-insensitive
    normalized_email = Column(String(256), unique=True, index=True, nullable=False)
    password_hash = Column(String(150), nullable=False)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)
    email_confirmed = Column(Boolean, default=False, nullable=False)

    # Campos para autenticação de dois fatores (código enviado por email)
    two_factor_enabled = Column(Boolean, default=False, nullable=False)
    two_factor_secret = Column(String(128), nullable=True)  # base32 TOTP secret

    # refresh_token e refresh_token_expiry_time são sempre gravados juntos
    refresh_token = Column(String(256), nullable=True)
    refresh_token_expiry_time = Column(DateTime(timezone=True), nullable=True)

    last_login_date = Column(DateTime(timezone=True), nullable=True)
    created_date = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    tokens = relationship("UserToken", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', confirmed={self.email_confirmed})>"
