"""
Lead Scorer — Engagement, Urgency and Fit sub-scores + weighted Overall score.

Every function here is pure: FeatureBundle in, integers out. Every step is
total for any bundle because each sub-score is clamped and every optional
field already has a zero/false default.

All scores are integers 0-100. Overall >= 80 marks a "hot" lead.
"""
import logging
from typing import Dict, List, Any, Optional, Tuple

from lead_engine.config import HOT_SCORE_THRESHOLD
from lead_engine.pipeline.base import FeatureBundle, LeadScoreResult, clamp, round_half_up

logger = logging.getLogger('pipeline.scoring')


# ── Hand-tuned weights ───────────────────────────────────────────────────────

ENGAGEMENT = {
    'demo_view_points': 20,
    'demo_view_cap': 40,
    'email_open_points': 10,
    'email_open_cap': 30,
    'reply_points': 30,
    'decay_per_day': 5,
    'decay_cap': 20,
}

# (status, minimum days in status, points)
STALLED_STATUS_RULES = [
    ('demo_sent', 3, 30),
    ('contact_attempted', 7, 40),
    ('demo_engaged', 2, 25),
]
IGNORED_FOLLOW_UPS_MIN = 2
IGNORED_FOLLOW_UPS_POINTS = 20
READY_TO_BUY_POINTS = 50

FIT = {
    'industry_match': 30,
    'has_website': 20,
    'has_reviews': 20,
    'rating_excellent': 30,   # >= 4 stars
    'rating_good': 15,        # >= 3 stars
}

OVERALL_WEIGHTS = {
    'engagement': 0.4,
    'urgency': 0.4,
    'fit': 0.2,
}
SYNERGY_FLOOR = 70     # every sub-score must exceed this for the bonus
SYNERGY_BONUS = 10


# ── Sub-scores ───────────────────────────────────────────────────────────────

def calculate_engagement_score(
    demo_views: int,
    email_opens: int,
    has_replied: bool,
    days_since_last_interaction: int,
) -> Tuple[int, Dict[str, Any]]:
    """Demo views + email opens + reply, minus a recency decay."""
    cfg = ENGAGEMENT
    demo_views = max(0, demo_views or 0)
    email_opens = max(0, email_opens or 0)
    days = max(0, days_since_last_interaction or 0)

    score = min(demo_views * cfg['demo_view_points'], cfg['demo_view_cap'])
    score += min(email_opens * cfg['email_open_points'], cfg['email_open_cap'])
    if has_replied:
        score += cfg['reply_points']

    decay = min(days * cfg['decay_per_day'], cfg['decay_cap'])
    score = max(0, score - decay)

    return clamp(score, 0, 100), {
        'demo_views': demo_views,
        'email_opens': email_opens,
        'replies': 1 if has_replied else 0,
        'days_since_interaction': days,
    }


def calculate_urgency_score(
    pipeline_status: str,
    days_in_status: int,
    follow_ups_ignored: int,
) -> Tuple[int, Dict[str, Any]]:
    """
    Status-conditioned urgency. Rules are additive and may co-fire;
    the total is clamped to 100.
    """
    days_in_status = max(0, days_in_status or 0)
    follow_ups_ignored = max(0, follow_ups_ignored or 0)

    score = 0
    for status, min_days, points in STALLED_STATUS_RULES:
        if pipeline_status == status and days_in_status >= min_days:
            score += points

    if follow_ups_ignored >= IGNORED_FOLLOW_UPS_MIN:
        score += IGNORED_FOLLOW_UPS_POINTS

    if pipeline_status == 'ready_to_buy':
        score += READY_TO_BUY_POINTS

    return clamp(score, 0, 100), {
        'days_in_status': days_in_status,
        'follow_ups_ignored': follow_ups_ignored,
        'status_type': pipeline_status,
    }


def calculate_fit_score(
    industry_match: bool,
    has_website: bool,
    has_reviews: bool,
    review_rating: Optional[float],
) -> Tuple[int, Dict[str, Any]]:
    """Static firmographic fit."""
    score = 0
    if industry_match:
        score += FIT['industry_match']
    if has_website:
        score += FIT['has_website']
    if has_reviews:
        score += FIT['has_reviews']

    rating = review_rating or 0
    if rating >= 4:
        score += FIT['rating_excellent']
    elif rating >= 3:
        score += FIT['rating_good']

    return clamp(score, 0, 100), {
        'industry_match': bool(industry_match),
        'has_website': bool(has_website),
        'has_reviews': bool(has_reviews),
        'review_rating': review_rating,
    }


def calculate_overall_score(engagement: int, urgency: int, fit: int) -> int:
    """Weighted blend with a +10 bonus when every axis is strong."""
    weighted = (
        engagement * OVERALL_WEIGHTS['engagement']
        + urgency * OVERALL_WEIGHTS['urgency']
        + fit * OVERALL_WEIGHTS['fit']
    )
    overall = round_half_up(weighted)
    if engagement > SYNERGY_FLOOR and urgency > SYNERGY_FLOOR and fit > SYNERGY_FLOOR:
        overall += SYNERGY_BONUS
    return clamp(overall, 0, 100)


# ── Public API ───────────────────────────────────────────────────────────────

def score(bundle: FeatureBundle) -> LeadScoreResult:
    """Score one lead. Deterministic; persisting the result is the caller's job."""
    engagement, engagement_factors = calculate_engagement_score(
        bundle.demo_view_count,
        bundle.email_open_count,
        bundle.has_replied,
        bundle.days_since_last_interaction,
    )
    urgency, urgency_factors = calculate_urgency_score(
        bundle.pipeline_status,
        bundle.days_in_current_status,
        bundle.follow_ups_ignored_count,
    )
    fit, fit_factors = calculate_fit_score(
        bundle.industry_match,
        bundle.has_website,
        bundle.has_reviews,
        bundle.google_rating,
    )

    return LeadScoreResult(
        lead_id=bundle.lead_id,
        engagement_score=engagement,
        urgency_score=urgency,
        fit_score=fit,
        overall_score=calculate_overall_score(engagement, urgency, fit),
        score_factors={
            'engagement': engagement_factors,
            'urgency': urgency_factors,
            'fit': fit_factors,
        },
    )


def score_batch(bundles: List[FeatureBundle]) -> List[LeadScoreResult]:
    """Score every non-terminal bundle. Won/lost leads never get a score."""
    results = []
    for bundle in bundles:
        if bundle.is_terminal:
            logger.debug("Skipping terminal lead %s (%s)", bundle.lead_id, bundle.pipeline_status)
            continue
        results.append(score(bundle))
    return results


def is_hot(result: LeadScoreResult) -> bool:
    return result.overall_score >= HOT_SCORE_THRESHOLD
