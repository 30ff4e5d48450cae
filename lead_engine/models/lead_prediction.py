"""
LeadPrediction model — one row per lead, overwritten on every forecast run.
"""
from sqlalchemy import Column, Integer, Float, Text, Date, DateTime, JSON
from sqlalchemy.sql import func

from lead_engine.database import Base


class LeadPrediction(Base):
    __tablename__ = 'lead_predictions'

    id = Column(Integer, primary_key=True, autoincrement=True)
    lead_id = Column(Text, nullable=False, unique=True)
    predicted_close_probability = Column(Float, nullable=False)   # 0.05-0.95
    predicted_close_date = Column(Date, nullable=True)
    predicted_deal_value = Column(Float, nullable=True)
    predicted_time_to_close_days = Column(Integer, nullable=True)
    prediction_factors = Column(JSON, default=dict)
    last_updated = Column(DateTime(timezone=True), server_default=func.now())

    def to_dict(self):
        return {
            'lead_id': self.lead_id,
            'predicted_close_probability': self.predicted_close_probability,
            'predicted_close_date': self.predicted_close_date.isoformat() if self.predicted_close_date else None,
            'predicted_deal_value': self.predicted_deal_value,
            'predicted_time_to_close_days': self.predicted_time_to_close_days,
            'prediction_factors': self.prediction_factors or {},
            'last_updated': self.last_updated.isoformat() if self.last_updated else None,
        }
