"""
EmailEvent model — tracked opens/replies on outbound email.
"""
from sqlalchemy import Column, Integer, Text, DateTime
from sqlalchemy.sql import func

from lead_engine.database import Base


class EmailEvent(Base):
    __tablename__ = 'email_events'

    id = Column(Integer, primary_key=True, autoincrement=True)
    lead_id = Column(Text, nullable=False, index=True)
    event_type = Column(Text, nullable=False)  # open / reply / click / bounce
    created_at = Column(DateTime(timezone=True), server_default=func.now())
