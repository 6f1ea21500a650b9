# backend/checkin/models/geofence.py
from sqlalchemy import Integer, String, Column, ForeignKey, DateTime, Float, Boolean
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class Geofence(Base):
    __tablename__ = "geofences"
    id = Column(Integer, primary_key=True)
    subject_id = Column(Integer, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(120), nullable=False)
    center_lat = Column(Float, nullable=False)
    center_lng = Column(Float, nullable=False)
    radius_m = Column(Float, nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    subject = relationship("Subject", back_populates="geofences")
