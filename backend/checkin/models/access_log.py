# backend/checkin/models/access_log.py
from sqlalchemy import Integer, String, Column, ForeignKey, DateTime, Text

from .base import Base, utcnow


class AccessLog(Base):
    __tablename__ = "access_logs"
    id = Column(Integer, primary_key=True)
    action = Column(String(64), nullable=False, index=True)
    details = Column(Text, default="")
    ip = Column(String(64), nullable=True)
    user_agent = Column(String(512), nullable=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
