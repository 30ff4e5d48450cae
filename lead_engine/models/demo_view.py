"""
DemoView model — one row each time a lead opens their personalized demo.
"""
from sqlalchemy import Column, Integer, Text, DateTime
from sqlalchemy.sql import func

from lead_engine.database import Base


class DemoView(Base):
    __tablename__ = 'demo_views'

    id = Column(Integer, primary_key=True, autoincrement=True)
    lead_id = Column(Text, nullable=False, index=True)
    progress_percent = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
