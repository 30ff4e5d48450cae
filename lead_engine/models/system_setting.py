"""
SystemSetting model — platform-wide key/value switches.
"""
from sqlalchemy import Column, Text, DateTime
from sqlalchemy.sql import func

from lead_engine.database import Base


class SystemSetting(Base):
    __tablename__ = 'system_settings'

    key = Column(Text, primary_key=True)
    value = Column(Text, nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
