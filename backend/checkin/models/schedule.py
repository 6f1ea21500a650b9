# backend/checkin/models/schedule.py
from sqlalchemy import Integer, String, Column, ForeignKey, DateTime, Boolean, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import Base, utcnow

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class Schedule(Base):
    """Planned weekly check-in time for a child."""

    __tablename__ = "schedules"
    __table_args__ = (UniqueConstraint("subject_id", "weekday", "time", name="uq_schedule_slot"),)

    id = Column(Integer, primary_key=True)
    subject_id = Column(Integer, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False, index=True)
    weekday = Column(String(16), nullable=False)  # monday..sunday
    time = Column(String(5), nullable=False)  # HH:mm
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    subject = relationship("Subject", back_populates="schedules")

    @property
    def sort_key(self):
        return WEEKDAYS.index(self.weekday), self.time
