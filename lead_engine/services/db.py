"""
Postgres persistence helpers — called from the pipeline manager.

Scores and predictions are upserted by lead_id with INSERT ... ON CONFLICT,
one commit per row: a failed row is rolled back, logged and skipped so the
rest of the batch still lands. Two overlapping runs writing the same new lead
both succeed and the later write wins.
Pipeline forecasts are insert-only snapshots.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.dialects import postgresql, sqlite

from lead_engine.database import get_session
from lead_engine.models.lead_score import LeadScore
from lead_engine.models.lead_prediction import LeadPrediction
from lead_engine.models.pipeline_forecast import PipelineForecast
from lead_engine.pipeline.base import LeadScoreResult, LeadPredictionResult, PipelineForecastResult

logger = logging.getLogger('services.db')

# Dialects with INSERT ... ON CONFLICT DO UPDATE
_DIALECT_INSERTS = {
    'postgresql': postgresql.insert,
    'sqlite': sqlite.insert,
}


def upsert_by_lead_id(model, values: Dict[str, Any], dialect_name: str):
    """INSERT for one lead's row that overwrites every other column on a lead_id clash."""
    stmt = _DIALECT_INSERTS[dialect_name](model).values(**values)
    return stmt.on_conflict_do_update(
        index_elements=['lead_id'],
        set_={name: stmt.excluded[name] for name in values if name != 'lead_id'},
    )


def _upsert_rows(model, rows: List[Dict[str, Any]], label: str) -> Tuple[int, List[str]]:
    session = get_session()
    saved = 0
    errors = []
    try:
        dialect_name = session.get_bind().dialect.name
        for values in rows:
            try:
                session.execute(upsert_by_lead_id(model, values, dialect_name))
                session.commit()
                saved += 1
            except Exception as e:
                session.rollback()
                logger.error("Failed to upsert %s for lead %s", label, values['lead_id'], exc_info=True)
                errors.append(f"{values['lead_id']}: {e}")
    finally:
        session.close()

    return saved, errors


def persist_lead_scores(
    results: List[LeadScoreResult],
    calculated_at: Optional[datetime] = None,
) -> Tuple[int, List[str]]:
    """
    Upsert one lead_scores row per result.

    Returns (saved_count, errors). Each error string names the lead it came from.
    """
    if not results:
        return 0, []

    calculated_at = calculated_at or datetime.now(timezone.utc)
    rows = [
        {
            'lead_id': result.lead_id,
            'overall_score': result.overall_score,
            'engagement_score': result.engagement_score,
            'urgency_score': result.urgency_score,
            'fit_score': result.fit_score,
            'score_factors': result.score_factors,
            'last_calculated': calculated_at,
        }
        for result in results
    ]
    return _upsert_rows(LeadScore, rows, 'score')


def persist_lead_predictions(
    predictions: List[LeadPredictionResult],
    updated_at: Optional[datetime] = None,
) -> Tuple[int, List[str]]:
    """Upsert one lead_predictions row per prediction. Returns (saved_count, errors)."""
    if not predictions:
        return 0, []

    updated_at = updated_at or datetime.now(timezone.utc)
    rows = [
        {
            'lead_id': prediction.lead_id,
            'predicted_close_probability': prediction.probability,
            'predicted_close_date': prediction.close_date,
            'predicted_deal_value': prediction.deal_value,
            'predicted_time_to_close_days': prediction.close_days,
            'prediction_factors': prediction.factors,
            'last_updated': updated_at,
        }
        for prediction in predictions
    ]
    return _upsert_rows(LeadPrediction, rows, 'prediction')


def insert_pipeline_forecast(
    forecast: PipelineForecastResult,
    generated_at: Optional[datetime] = None,
) -> Optional[int]:
    """
    Append a pipeline_forecasts snapshot. Never updates an existing row.

    Returns the new row id, or None if the insert failed (logged, not raised:
    the per-lead predictions are already saved by then).
    """
    session = get_session()
    try:
        row = PipelineForecast(
            forecast_date=forecast.forecast_date,
            forecast_period=forecast.forecast_period,
            predicted_revenue=forecast.predicted_revenue,
            confidence_interval_low=forecast.confidence_interval_low,
            confidence_interval_high=forecast.confidence_interval_high,
            predicted_closes=forecast.predicted_closes,
            predicted_close_rate=forecast.predicted_close_rate,
            factors=forecast.factors,
            generated_at=generated_at or datetime.now(timezone.utc),
        )
        session.add(row)
        session.commit()
        return row.id
    except Exception:
        session.rollback()
        logger.error("Failed to insert pipeline forecast for %s", forecast.forecast_date, exc_info=True)
        return None
    finally:
        session.close()


# ── Read helpers (HTTP surface) ──────────────────────────────────────────────

def get_lead_score(lead_id: str) -> Optional[dict]:
    session = get_session()
    try:
        row = session.query(LeadScore).filter_by(lead_id=lead_id).first()
        return row.to_dict() if row else None
    finally:
        session.close()


def get_lead_prediction(lead_id: str) -> Optional[dict]:
    session = get_session()
    try:
        row = session.query(LeadPrediction).filter_by(lead_id=lead_id).first()
        return row.to_dict() if row else None
    finally:
        session.close()


def list_pipeline_forecasts(limit: int = 20) -> List[dict]:
    """Most recent forecast snapshots first."""
    session = get_session()
    try:
        rows = session.query(PipelineForecast).order_by(
            PipelineForecast.generated_at.desc(), PipelineForecast.id.desc(),
        ).limit(limit).all()
        return [row.to_dict() for row in rows]
    finally:
        session.close()
