# backend/checkin/models/alert.py
from sqlalchemy import Integer, String, Column, ForeignKey, DateTime, Boolean, Text
from sqlalchemy.orm import relationship

from .base import Base, utcnow

CAPTURE_COMPLETED = "capture_completed"
GEOFENCE_VIOLATED = "geofence_violated"


class Alert(Base):
    __tablename__ = "alerts"
    id = Column(Integer, primary_key=True)
    subject_id = Column(Integer, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False, index=True)
    kind = Column(String(32), nullable=False)
    message = Column(Text, nullable=False)
    capture_id = Column(Integer, ForeignKey("captures.id", ondelete="SET NULL"), nullable=True)
    read = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    subject = relationship("Subject", back_populates="alerts")
    capture = relationship("Capture")
