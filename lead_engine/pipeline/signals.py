"""
Signal Aggregator — leads + interaction history → FeatureBundles.

Pure ETL boundary, no scoring arithmetic. Fetching is set-oriented: one query
per source for the whole lead batch, partitioned in memory by lead id.
build_feature_bundle() works on plain dicts so the scoring formulas can be
tested against literal data without a database.
"""
import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, List, Any, Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError

from lead_engine.config import (
    TERMINAL_STATUSES, TARGET_INDUSTRIES,
    OUTBOUND_ACTIVITY_TYPES, INBOUND_ACTIVITY_TYPES,
    REPLY_ACTIVITY_TYPES, COMMUNICATION_ACTIVITY_TYPES,
)
from lead_engine.models.lead import Lead
from lead_engine.models.demo_view import DemoView
from lead_engine.models.email_event import EmailEvent
from lead_engine.models.activity import Activity
from lead_engine.models.lead_score import LeadScore
from lead_engine.pipeline.base import FeatureBundle

logger = logging.getLogger('pipeline.signals')

SECONDS_PER_DAY = 86400


class SignalFetchError(RuntimeError):
    """The record store could not be read. Fatal for the whole run."""


# ── Coercion helpers (malformed optional fields fall back to zero/false) ─────

def normalize_industry(industry: Any) -> str:
    if not industry or not isinstance(industry, str):
        return ''
    return industry.strip().lower()


def _as_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def _as_rating(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_utc(ts: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if ts is None:
        return None
    if isinstance(ts, str):
        ts = datetime.fromisoformat(ts.replace('Z', '+00:00'))
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def _whole_days(now: datetime, ts: Optional[datetime]) -> int:
    """Floor of elapsed days; clock-skewed future timestamps count as 0."""
    ts = _as_utc(ts)
    if ts is None:
        return 0
    elapsed = (now - ts).total_seconds()
    return max(0, int(elapsed // SECONDS_PER_DAY))


# ── Pure assembly ────────────────────────────────────────────────────────────

def build_feature_bundle(
    lead: Dict[str, Any],
    demo_views: List[Dict[str, Any]],
    email_events: List[Dict[str, Any]],
    activities: List[Dict[str, Any]],
    now: datetime,
) -> FeatureBundle:
    """Assemble one lead's FeatureBundle from its already-partitioned rows."""
    now = _as_utc(now)

    demo_view_count = len(demo_views)
    email_open_count = sum(1 for e in email_events if e.get('event_type') == 'open')
    email_reply_count = sum(1 for e in email_events if e.get('event_type') == 'reply')
    has_replied = email_reply_count > 0 or any(
        a.get('type') in REPLY_ACTIVITY_TYPES for a in activities
    )

    touch_times = [
        _as_utc(row['created_at'])
        for row in (*demo_views, *email_events, *activities)
        if row.get('created_at') is not None
    ]
    last_interaction = max(touch_times) if touch_times else lead.get('created_at')

    outbound = sum(1 for a in activities if a.get('type') in OUTBOUND_ACTIVITY_TYPES)
    inbound = sum(1 for a in activities if a.get('type') in INBOUND_ACTIVITY_TYPES)

    industry = normalize_industry(lead.get('industry'))

    return FeatureBundle(
        lead_id=lead['id'],
        pipeline_status=lead.get('pipeline_status') or 'new_lead',
        industry=industry,
        demo_view_count=demo_view_count,
        email_open_count=email_open_count,
        email_reply_count=email_reply_count,
        has_replied=has_replied,
        days_since_last_interaction=_whole_days(now, last_interaction),
        days_in_current_status=_whole_days(now, lead.get('updated_at')),
        follow_ups_ignored_count=max(0, outbound - inbound),
        industry_match=industry in TARGET_INDUSTRIES,
        has_website=bool(lead.get('has_website')),
        has_reviews=_as_int(lead.get('google_review_count')) > 0,
        google_rating=_as_rating(lead.get('google_rating')),
    )


def _partition(rows: Iterable[Dict[str, Any]], key: str) -> Dict[str, List[Dict[str, Any]]]:
    grouped = defaultdict(list)
    for row in rows:
        grouped[row[key]].append(row)
    return grouped


# ── Store access ─────────────────────────────────────────────────────────────

def fetch_signals(session, lead_ids: Optional[List[str]] = None, since: Optional[datetime] = None):
    """
    Load active leads and all of their interactions in four queries.

    Args:
        lead_ids: restrict to these leads; None means every non-terminal lead.
        since:    only count interactions created at or after this instant.

    Returns:
        (leads, demo_views_by_lead, email_events_by_lead, activities_by_lead)

    Raises:
        SignalFetchError if the store is unreachable or a query fails.
    """
    try:
        lead_query = session.query(
            Lead.id, Lead.pipeline_status, Lead.industry,
            Lead.created_at, Lead.updated_at, Lead.has_website,
            Lead.google_rating, Lead.google_review_count,
        ).filter(Lead.pipeline_status.not_in(TERMINAL_STATUSES))
        if lead_ids is not None:
            lead_query = lead_query.filter(Lead.id.in_(lead_ids))
        leads = [row._asdict() for row in lead_query.all()]

        if not leads:
            return [], {}, {}, {}

        ids = [lead['id'] for lead in leads]

        demo_query = session.query(DemoView.lead_id, DemoView.created_at).filter(DemoView.lead_id.in_(ids))
        email_query = session.query(
            EmailEvent.lead_id, EmailEvent.event_type, EmailEvent.created_at,
        ).filter(EmailEvent.lead_id.in_(ids))
        activity_query = session.query(
            Activity.related_to_id, Activity.type, Activity.created_at,
        ).filter(
            Activity.related_to_type == 'lead',
            Activity.related_to_id.in_(ids),
            Activity.type.in_(COMMUNICATION_ACTIVITY_TYPES),
        )
        if since is not None:
            demo_query = demo_query.filter(DemoView.created_at >= since)
            email_query = email_query.filter(EmailEvent.created_at >= since)
            activity_query = activity_query.filter(Activity.created_at >= since)

        demo_views = [row._asdict() for row in demo_query.all()]
        email_events = [row._asdict() for row in email_query.all()]
        activities = [row._asdict() for row in activity_query.all()]
    except SQLAlchemyError as e:
        raise SignalFetchError(f"Failed to fetch lead signals: {e}") from e

    logger.info("Fetched %d leads, %d demo views, %d email events, %d activities",
                len(leads), len(demo_views), len(email_events), len(activities))

    return (
        leads,
        _partition(demo_views, 'lead_id'),
        _partition(email_events, 'lead_id'),
        _partition(activities, 'related_to_id'),
    )


def fetch_lead_scores(session, lead_ids: List[str]) -> Dict[str, LeadScore]:
    """Persisted LeadScore rows for the batch, keyed by lead id. One query."""
    if not lead_ids:
        return {}
    try:
        rows = session.query(LeadScore).filter(LeadScore.lead_id.in_(lead_ids)).all()
    except SQLAlchemyError as e:
        raise SignalFetchError(f"Failed to fetch lead scores: {e}") from e
    return {row.lead_id: row for row in rows}


def aggregate_signals(
    session,
    lead_ids: Optional[List[str]] = None,
    now: Optional[datetime] = None,
    since: Optional[datetime] = None,
) -> List[FeatureBundle]:
    """One FeatureBundle per active lead in the batch."""
    if lead_ids is not None and not lead_ids:
        return []

    now = now or datetime.now(timezone.utc)
    leads, demo_by_lead, email_by_lead, activity_by_lead = fetch_signals(session, lead_ids, since)

    bundles = [
        build_feature_bundle(
            lead,
            demo_by_lead.get(lead['id'], []),
            email_by_lead.get(lead['id'], []),
            activity_by_lead.get(lead['id'], []),
            now,
        )
        for lead in leads
    ]
    logger.info("Built %d feature bundles", len(bundles))
    return bundles
