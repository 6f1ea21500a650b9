# backend/checkin/models/capture.py
from sqlalchemy import Integer, String, Column, ForeignKey, DateTime, Float, Text, JSON
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class Capture(Base):
    __tablename__ = "captures"
    id = Column(Integer, primary_key=True)
    subject_id = Column(Integer, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False, index=True)
    photo = Column(Text, nullable=False)  # data URI (image/jpeg|png|webp)
    latitude = Column(Float, nullable=False)  # EPSG:4326
    longitude = Column(Float, nullable=False)
    address = Column(String, nullable=True)  # reverse geocoded, best effort
    ip = Column(String(64), nullable=True)
    user_agent = Column(String(512), nullable=True)
    device_metadata = Column(JSON, nullable=True)
    consented_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    subject = relationship("Subject", back_populates="captures")
