"""
Lead model — CRM-owned lead record. Read-only for the scoring engine.
"""
from sqlalchemy import Column, Integer, Float, Text, Boolean, DateTime
from sqlalchemy.sql import func

from lead_engine.database import Base


class Lead(Base):
    __tablename__ = 'leads'

    id = Column(Text, primary_key=True)
    pipeline_status = Column(Text, nullable=False, default='new_lead', index=True)
    industry = Column(Text, nullable=True)
    has_website = Column(Boolean, default=False)
    google_rating = Column(Float, nullable=True)        # 0-5
    google_review_count = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
