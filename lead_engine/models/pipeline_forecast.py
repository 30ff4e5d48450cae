"""
PipelineForecast model — append-only snapshot, one row per forecast run.

Rows are never updated so forecast accuracy can be audited against actuals.
"""
from sqlalchemy import Column, Integer, Float, Text, Date, DateTime, JSON
from sqlalchemy.sql import func

from lead_engine.database import Base


class PipelineForecast(Base):
    __tablename__ = 'pipeline_forecasts'

    id = Column(Integer, primary_key=True, autoincrement=True)
    forecast_date = Column(Date, nullable=False, index=True)
    forecast_period = Column(Text, nullable=False, default='month')
    predicted_revenue = Column(Float, default=0.0)
    confidence_interval_low = Column(Float, default=0.0)
    confidence_interval_high = Column(Float, default=0.0)
    predicted_closes = Column(Integer, default=0)
    predicted_close_rate = Column(Float, default=0.0)
    factors = Column(JSON, default=dict)           # {total_leads, hot_leads, warm_leads, cold_leads}
    generated_at = Column(DateTime(timezone=True), server_default=func.now())

    def to_dict(self):
        return {
            'id': self.id,
            'forecast_date': self.forecast_date.isoformat() if self.forecast_date else None,
            'forecast_period': self.forecast_period,
            'predicted_revenue': self.predicted_revenue,
            'confidence_interval_low': self.confidence_interval_low,
            'confidence_interval_high': self.confidence_interval_high,
            'predicted_closes': self.predicted_closes,
            'predicted_close_rate': self.predicted_close_rate,
            'factors': self.factors or {},
            'generated_at': self.generated_at.isoformat() if self.generated_at else None,
        }
