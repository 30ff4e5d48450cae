"""
LeadScore model — one row per lead, overwritten on every scoring run.
"""
from sqlalchemy import Column, Integer, Text, DateTime, JSON
from sqlalchemy.sql import func

from lead_engine.database import Base


class LeadScore(Base):
    __tablename__ = 'lead_scores'

    id = Column(Integer, primary_key=True, autoincrement=True)
    lead_id = Column(Text, nullable=False, unique=True)
    overall_score = Column(Integer, nullable=False, default=0)      # 0-100
    engagement_score = Column(Integer, nullable=False, default=0)
    urgency_score = Column(Integer, nullable=False, default=0)
    fit_score = Column(Integer, nullable=False, default=0)
    score_factors = Column(JSON, default=dict)                      # {engagement, urgency, fit}
    last_calculated = Column(DateTime(timezone=True), server_default=func.now())

    def to_dict(self):
        return {
            'lead_id': self.lead_id,
            'overall_score': self.overall_score,
            'engagement_score': self.engagement_score,
            'urgency_score': self.urgency_score,
            'fit_score': self.fit_score,
            'score_factors': self.score_factors or {},
            'last_calculated': self.last_calculated.isoformat() if self.last_calculated else None,
        }
