# backend/checkin/models/subject.py
from sqlalchemy import Integer, String, Column, ForeignKey, DateTime, Text
from sqlalchemy.orm import relationship

from .base import Base, utcnow

SUBJECT_KINDS = ("customer", "child")


class Subject(Base):
    """Person a check-in link is issued for (customer or child)."""

    __tablename__ = "subjects"
    id = Column(Integer, primary_key=True)
    admin_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    kind = Column(String(16), nullable=False)  # customer|child
    name = Column(String(120), nullable=False)
    phone = Column(String(32), nullable=True)
    email = Column(String(254), nullable=True)
    notes = Column(Text, default="")
    status = Column(String(16), nullable=False, default="pending")  # pending|verified
    created_at = Column(DateTime, nullable=False, default=utcnow)

    admin = relationship("User", back_populates="subjects")

    # 削除時は子レコードもまとめて削除
    tokens = relationship(
        "AccessToken", back_populates="subject", cascade="all, delete-orphan", passive_deletes=True
    )
    captures = relationship(
        "Capture",
        back_populates="subject",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Capture.created_at.desc()",
    )
    geofences = relationship(
        "Geofence",
        back_populates="subject",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Geofence.id",
    )
    alerts = relationship(
        "Alert", back_populates="subject", cascade="all, delete-orphan", passive_deletes=True
    )
    schedules = relationship(
        "Schedule", back_populates="subject", cascade="all, delete-orphan", passive_deletes=True
    )
