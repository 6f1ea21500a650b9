# backend/checkin/models/user.py
from sqlalchemy import Integer, String, Column, DateTime
from sqlalchemy.orm import relationship
from werkzeug.security import generate_password_hash, check_password_hash

from .base import Base, utcnow


class User(Base):
    """Administrator account; owns subjects."""

    __tablename__ = "users"
    id = Column(Integer, primary_key=True)
    email = Column(String(254), nullable=False, unique=True, index=True)
    name = Column(String(120), nullable=False)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    subjects = relationship(
        "Subject", back_populates="admin", cascade="all, delete-orphan", passive_deletes=True
    )

    def set_password(self, raw: str) -> None:
        self.password_hash = generate_password_hash(raw)

    def check_password(self, raw: str) -> bool:
        return check_password_hash(self.password_hash or "", raw or "")
