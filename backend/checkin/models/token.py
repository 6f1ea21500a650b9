# backend/checkin/models/token.py
from sqlalchemy import Integer, String, Column, ForeignKey, DateTime, Boolean
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class AccessToken(Base):
    __tablename__ = "access_tokens"
    id = Column(Integer, primary_key=True)
    subject_id = Column(Integer, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False, index=True)
    token = Column(String(64), nullable=False, unique=True, index=True)
    expires_at = Column(DateTime, nullable=False)
    used = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    subject = relationship("Subject", back_populates="tokens")
