"""
Activity model — the CRM's generic activity log (calls, emails, SMS, notes).

Polymorphic: related_to_type says which table related_to_id points at.
"""
from sqlalchemy import Column, Integer, Text, DateTime
from sqlalchemy.sql import func

from lead_engine.database import Base


class Activity(Base):
    __tablename__ = 'activities'

    id = Column(Integer, primary_key=True, autoincrement=True)
    related_to_type = Column(Text, nullable=False, default='lead')
    related_to_id = Column(Text, nullable=False, index=True)
    type = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
