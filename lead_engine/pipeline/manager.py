"""
Pipeline Manager — batch orchestration for scoring and forecasting.

Two entry points, both idempotent and safe to re-run:

  run_lead_scoring():  SIGNALS → SCORE → upsert lead_scores
  run_forecast():      SIGNALS + persisted scores → PREDICT → upsert
                       lead_predictions → AGGREGATE → insert pipeline_forecasts

Fetching happens up front; a fetch failure aborts the run before anything is
written. Row-level write failures are logged and counted, never fatal.
The *_job() wrappers are what RQ workers execute; scripts/run_batch.py calls
the runners inline for cron.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from lead_engine.config import FORECAST_LOOKBACK_DAYS, JOB_TIMEOUT
from lead_engine.database import get_session
from lead_engine.pipeline.base import RunSummary
from lead_engine.pipeline.signals import aggregate_signals, fetch_lead_scores
from lead_engine.pipeline.scoring import score_batch, is_hot
from lead_engine.pipeline.forecasting import predict_batch, aggregate
from lead_engine.services.db import (
    persist_lead_scores, persist_lead_predictions, insert_pipeline_forecast,
)
from lead_engine.services.settings import is_scoring_enabled

logger = logging.getLogger('pipeline.manager')


# ── Lazy RQ queue (avoids import-time Redis connection) ──────────────────────

_queue = None

def _get_queue():
    global _queue
    if _queue is None:
        from lead_engine.extensions import redis_client
        from rq import Queue
        _queue = Queue('lead_engine', connection=redis_client)
    return _queue


# ── Public API ────────────────────────────────────────────────────────────────

def launch_scoring(lead_ids: Optional[List[str]] = None):
    """Enqueue a scoring batch. None scores every active lead."""
    job = _get_queue().enqueue(scoring_job, lead_ids, job_timeout=JOB_TIMEOUT)
    logger.info("Enqueued scoring job %s (%s)", job.id,
                'all active leads' if lead_ids is None else f'{len(lead_ids)} leads')
    return job


def launch_forecast():
    """Enqueue a forecast batch over every active lead."""
    job = _get_queue().enqueue(forecast_job, job_timeout=JOB_TIMEOUT)
    logger.info("Enqueued forecast job %s", job.id)
    return job


def get_job_status(job_id: str) -> Optional[dict]:
    """Status + result of an enqueued batch, or None if RQ no longer knows it."""
    from rq.job import Job
    from rq.exceptions import NoSuchJobError
    try:
        job = Job.fetch(job_id, connection=_get_queue().connection)
    except NoSuchJobError:
        return None
    return {
        'job_id': job.id,
        'status': job.get_status(),
        'result': job.return_value(),
        'enqueued_at': job.enqueued_at.isoformat() if job.enqueued_at else None,
        'ended_at': job.ended_at.isoformat() if job.ended_at else None,
    }


# ── Job wrappers (executed by RQ workers) ────────────────────────────────────

def scoring_job(lead_ids: Optional[List[str]] = None) -> dict:
    """Resolve the enable flag once, then score."""
    return run_lead_scoring(lead_ids, scoring_enabled=is_scoring_enabled()).to_dict()


def forecast_job() -> dict:
    return run_forecast().to_dict()


# ── Batch runners ────────────────────────────────────────────────────────────

def run_lead_scoring(
    lead_ids: Optional[List[str]] = None,
    *,
    scoring_enabled: bool = True,
    now: Optional[datetime] = None,
) -> RunSummary:
    """
    Score a set of leads (or every active lead) and upsert lead_scores.

    Args:
        lead_ids:        leads to score; None means all non-terminal leads.
        scoring_enabled: global switch, resolved by the caller. False is a
                         successful no-op, not an error.
        now:             reference instant for day counts and last_calculated.

    Raises:
        SignalFetchError if the record store can't be read.
    """
    if not scoring_enabled:
        logger.info("Lead scoring is disabled — skipping run")
        return RunSummary(job='score', skipped=True, message='Lead scoring is disabled')

    now = now or datetime.now(timezone.utc)
    logger.info("Starting lead score calculation")

    session = get_session()
    try:
        bundles = aggregate_signals(session, lead_ids, now=now)
    finally:
        session.close()

    if not bundles:
        logger.info("No active leads to score")
        return RunSummary(job='score', message='No active leads to score')

    results = score_batch(bundles)
    saved, errors = persist_lead_scores(results, calculated_at=now)

    hot = [r for r in results if is_hot(r)]
    if hot:
        logger.info("%d leads crossed the hot threshold", len(hot))

    summary = RunSummary(
        job='score',
        processed=len(results),
        failed=len(errors),
        hot_leads=len(hot),
        message=f"Calculated scores for {saved} leads",
        errors=errors,
    )
    logger.info("Scoring run done — processed=%d, saved=%d, failed=%d, hot=%d",
                summary.processed, saved, summary.failed, summary.hot_leads,
                extra={'job': 'score', 'processed': summary.processed, 'failed': summary.failed})
    return summary


def run_forecast(
    lead_ids: Optional[List[str]] = None,
    *,
    now: Optional[datetime] = None,
    lookback_days: Optional[int] = FORECAST_LOOKBACK_DAYS,
) -> RunSummary:
    """
    Predict every active lead, upsert lead_predictions, append a pipeline
    forecast snapshot.

    Interactions older than `lookback_days` are ignored (None = no window).
    Leads without a persisted score are still predicted, just undampened.

    Raises:
        SignalFetchError if the record store can't be read.
    """
    now = now or datetime.now(timezone.utc)
    today = now.date()
    since = now - timedelta(days=lookback_days) if lookback_days else None
    logger.info("Starting forecast generation")

    session = get_session()
    try:
        bundles = aggregate_signals(session, lead_ids, now=now, since=since)
        scores = fetch_lead_scores(session, [b.lead_id for b in bundles])
    finally:
        session.close()

    if not bundles:
        logger.info("No active leads found")
        return RunSummary(job='forecast', message='No active leads')

    predictions = predict_batch(bundles, scores, today=today)
    saved, errors = persist_lead_predictions(predictions, updated_at=now)
    logger.info("Generated predictions for %d leads (%d scored, %d unscored)",
                saved, len(scores), len(bundles) - len(scores))

    forecast = aggregate(predictions, total_leads=len(bundles), today=today)
    forecast_id = insert_pipeline_forecast(forecast, generated_at=now)

    meta = dict(forecast.factors)
    meta['forecast_id'] = forecast_id
    meta['confidence_interval'] = [forecast.confidence_interval_low, forecast.confidence_interval_high]

    summary = RunSummary(
        job='forecast',
        processed=len(predictions),
        failed=len(errors),
        predicted_revenue=forecast.predicted_revenue,
        predicted_closes=forecast.predicted_closes,
        message=f"Generated predictions for {saved} leads",
        errors=errors,
        meta=meta,
    )
    if forecast_id is None:
        summary.errors.append('pipeline forecast snapshot was not saved')

    logger.info("Forecast run done — processed=%d, failed=%d, revenue=%.2f, closes=%d",
                summary.processed, summary.failed, summary.predicted_revenue, summary.predicted_closes,
                extra={'job': 'forecast', 'processed': summary.processed, 'failed': summary.failed})
    return summary


def run_all(lead_ids: Optional[List[str]] = None, *, scoring_enabled: bool = True) -> List[RunSummary]:
    """Score, then forecast against the fresh scores."""
    now = datetime.now(timezone.utc)
    return [
        run_lead_scoring(lead_ids, scoring_enabled=scoring_enabled, now=now),
        run_forecast(now=now),
    ]
