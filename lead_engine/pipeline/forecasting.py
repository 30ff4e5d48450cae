"""
Forecast Engine — per-lead close probability, time-to-close and deal value,
rolled up into a pipeline-level revenue forecast.

The probability is a multiplicative chain, not a sum:

    p  = industry prior
    p += demo-view bonus
    p += email bonus
    p *= score dampener         (only when the lead has a persisted score)
    p *= recency decay
    p += stage-progress bonus
    p  = clamp(p, 0.05, 0.95)

A lead without a score skips the dampener entirely; it is not treated as a
score of 0 (which would halve p) or of 100.
"""
import logging
import os
from datetime import date, timedelta
from typing import Dict, List, Any, Optional, Tuple

import yaml

from lead_engine.config import (
    STAGE_PROGRESS, FORECAST_PERIOD,
    MIN_CLOSE_PROBABILITY, MAX_CLOSE_PROBABILITY,
    HOT_PROBABILITY, WARM_PROBABILITY, LIKELY_CLOSE_PROBABILITY,
    CONFIDENCE_BAND,
)
from lead_engine.pipeline.base import (
    FeatureBundle, LeadPredictionResult, PipelineForecastResult,
    clamp, round_half_up,
)
from lead_engine.pipeline.signals import normalize_industry

logger = logging.getLogger('pipeline.forecasting')


# ── Forecast config (YAML with hardcoded fallback) ───────────────────────────

_forecast_config = None


def _default_config():
    """Hardcoded fallback if YAML is missing."""
    return {
        'version': 'default',
        'industries': {
            'restaurant':  {'close_rate': 0.32, 'avg_deal_value': 2400, 'avg_days_to_close': 18},
            'hvac':        {'close_rate': 0.28, 'avg_deal_value': 3600, 'avg_days_to_close': 21},
            'plumbing':    {'close_rate': 0.30, 'avg_deal_value': 3000, 'avg_days_to_close': 19},
            'legal':       {'close_rate': 0.22, 'avg_deal_value': 6000, 'avg_days_to_close': 35},
            'medical':     {'close_rate': 0.25, 'avg_deal_value': 4800, 'avg_days_to_close': 28},
            'dental':      {'close_rate': 0.27, 'avg_deal_value': 4200, 'avg_days_to_close': 25},
            'automotive':  {'close_rate': 0.29, 'avg_deal_value': 3000, 'avg_days_to_close': 20},
            'real_estate': {'close_rate': 0.24, 'avg_deal_value': 4800, 'avg_days_to_close': 30},
            'insurance':   {'close_rate': 0.26, 'avg_deal_value': 3600, 'avg_days_to_close': 24},
        },
        'default': {'close_rate': 0.25, 'avg_deal_value': 3000, 'avg_days_to_close': 22},
    }


def load_forecast_config():
    """Load forecast config from YAML, with in-memory cache and hardcoded fallback."""
    global _forecast_config
    if _forecast_config is not None:
        return _forecast_config

    config_path = os.path.join(os.path.dirname(__file__), 'forecast_config.yaml')
    try:
        with open(config_path, 'r') as f:
            loaded = yaml.safe_load(f)
        if not isinstance(loaded, dict):
            raise ValueError("forecast config must be a mapping")
        _forecast_config = loaded
        logger.info("Config loaded from YAML (version=%s)", _forecast_config.get('version', '?'))
    except Exception as e:
        logger.warning("YAML config not found (%s), using defaults", e)
        _forecast_config = _default_config()

    return _forecast_config


def get_industry_prior(industry: Any) -> Dict[str, float]:
    """Prior row for an industry. Unknown or blank industries get the default row."""
    cfg = load_forecast_config()
    fallback = _default_config()['default']
    default_row = {**fallback, **(cfg.get('default') or {})}

    row = (cfg.get('industries') or {}).get(normalize_industry(industry))
    if not row:
        return dict(default_row, matched=False)
    return dict({**default_row, **row}, matched=True)


# ── Probability chain coefficients ───────────────────────────────────────────

DEMO_VIEW_BONUS = 0.15
DEMO_VIEW_BONUS_CAP = 0.40
EMAIL_OPEN_BONUS = 0.05
EMAIL_OPEN_BONUS_CAP = 0.15
REPLY_BONUS = 0.20
SCORE_DAMPENER_FLOOR = 0.5        # score 0 → ×0.5, score 100 → ×1.0
DECAY_PER_DAY = 0.02
DECAY_FLOOR = 0.5
STAGE_BONUS_WEIGHT = 0.15

MIN_DAYS_TO_CLOSE = 3
ENGAGED_SCORE = 70
ENGAGED_SPEEDUP = 0.7             # engaged leads close faster


def get_stage_progress(pipeline_status: str) -> float:
    return STAGE_PROGRESS.get(pipeline_status, 0.0)


def calculate_close_probability(
    bundle: FeatureBundle,
    prior: Dict[str, float],
    lead_score: Optional[Any] = None,
) -> Tuple[float, Dict[str, Any]]:
    """Run the multiplicative chain for one lead. Returns (probability, factors)."""
    factors: Dict[str, Any] = {
        'industry': bundle.industry or 'unknown',
        'industry_close_rate': prior['close_rate'],
        'industry_prior_matched': prior.get('matched', False),
    }

    probability = prior['close_rate']

    demo_views = max(0, bundle.demo_view_count or 0)
    demo_bonus = min(demo_views * DEMO_VIEW_BONUS, DEMO_VIEW_BONUS_CAP)
    probability += demo_bonus
    factors['demo_views'] = demo_views
    factors['demo_view_bonus'] = demo_bonus

    opens = max(0, bundle.email_open_count or 0)
    replies = max(0, bundle.email_reply_count or 0)
    email_bonus = min(opens * EMAIL_OPEN_BONUS, EMAIL_OPEN_BONUS_CAP)
    if replies > 0:
        email_bonus += REPLY_BONUS
    probability += email_bonus
    factors['email_opens'] = opens
    factors['email_replies'] = replies
    factors['email_bonus'] = email_bonus

    if lead_score is not None:
        overall = clamp(lead_score.overall_score or 0, 0, 100)
        multiplier = SCORE_DAMPENER_FLOOR + (overall / 100) * (1 - SCORE_DAMPENER_FLOOR)
        probability *= multiplier
        factors['lead_score'] = overall
        factors['score_multiplier'] = multiplier

    days = max(0, bundle.days_since_last_interaction or 0)
    decay = max(DECAY_FLOOR, 1 - days * DECAY_PER_DAY)
    probability *= decay
    factors['days_since_last_interaction'] = days
    factors['decay_factor'] = decay

    stage_progress = get_stage_progress(bundle.pipeline_status)
    probability += stage_progress * STAGE_BONUS_WEIGHT
    factors['pipeline_status'] = bundle.pipeline_status
    factors['stage_progress'] = stage_progress

    return clamp(probability, MIN_CLOSE_PROBABILITY, MAX_CLOSE_PROBABILITY), factors


def calculate_time_to_close(
    avg_days_to_close: float,
    stage_progress: float,
    engagement_score: Optional[int] = None,
) -> int:
    """Remaining share of the industry's sales cycle, never under 3 days."""
    days = avg_days_to_close * (1 - stage_progress)
    if engagement_score is not None and engagement_score > ENGAGED_SCORE:
        days *= ENGAGED_SPEEDUP
    return max(MIN_DAYS_TO_CLOSE, round_half_up(days))


def probability_bucket(probability: float) -> str:
    """hot ≥ 0.70, warm [0.40, 0.70), cold < 0.40."""
    if probability >= HOT_PROBABILITY:
        return 'hot'
    if probability >= WARM_PROBABILITY:
        return 'warm'
    return 'cold'


# ── Public API ───────────────────────────────────────────────────────────────

def predict(
    bundle: FeatureBundle,
    lead_score: Optional[Any] = None,
    today: Optional[date] = None,
) -> LeadPredictionResult:
    """
    Predict close probability, close date and deal value for one lead.

    Args:
        bundle:     the lead's FeatureBundle (carries industry + pipeline status).
        lead_score: anything with overall_score / engagement_score (a persisted
                    LeadScore row or a LeadScoreResult), or None if unscored.
        today:      anchor for predicted_close_date.
    """
    today = today or date.today()
    prior = get_industry_prior(bundle.industry)

    probability, factors = calculate_close_probability(bundle, prior, lead_score)

    engagement = lead_score.engagement_score if lead_score is not None else None
    close_days = calculate_time_to_close(
        prior['avg_days_to_close'],
        factors['stage_progress'],
        engagement,
    )
    # Flat industry average; no company-size adjustment yet
    deal_value = float(prior['avg_deal_value'])

    factors['predicted_days_to_close'] = close_days
    factors['predicted_deal_value'] = deal_value
    factors['bucket'] = probability_bucket(probability)

    return LeadPredictionResult(
        lead_id=bundle.lead_id,
        probability=probability,
        close_days=close_days,
        close_date=today + timedelta(days=close_days),
        deal_value=deal_value,
        factors=factors,
    )


def predict_batch(
    bundles: List[FeatureBundle],
    scores_by_lead: Optional[Dict[str, Any]] = None,
    today: Optional[date] = None,
) -> List[LeadPredictionResult]:
    """Predict every non-terminal bundle, pairing each with its score if one exists."""
    scores_by_lead = scores_by_lead or {}
    predictions = []
    for bundle in bundles:
        if bundle.is_terminal:
            continue
        predictions.append(predict(bundle, scores_by_lead.get(bundle.lead_id), today))
    return predictions


def aggregate(
    predictions: List[LeadPredictionResult],
    total_leads: Optional[int] = None,
    today: Optional[date] = None,
) -> PipelineForecastResult:
    """
    Roll predictions up into one pipeline forecast.

    Revenue counts only warm-or-better leads (p ≥ 0.40), weighted by p.
    Closes count leads with p ≥ 0.50. The ±30% band is a fixed heuristic,
    not derived from variance.
    """
    today = today or date.today()
    total = len(predictions) if total_leads is None else total_leads

    revenue = 0.0
    closes = 0
    buckets = {'hot': 0, 'warm': 0, 'cold': 0}

    for prediction in predictions:
        p = prediction.probability
        buckets[probability_bucket(p)] += 1
        if p >= WARM_PROBABILITY:
            revenue += prediction.deal_value * p
            if p >= LIKELY_CLOSE_PROBABILITY:
                closes += 1

    low, high = CONFIDENCE_BAND
    return PipelineForecastResult(
        forecast_date=today,
        forecast_period=FORECAST_PERIOD,
        predicted_revenue=round(revenue, 2),
        confidence_interval_low=round(revenue * low, 2),
        confidence_interval_high=round(revenue * high, 2),
        predicted_closes=closes,
        predicted_close_rate=(closes / total) if total > 0 else 0.0,
        factors={
            'total_leads': total,
            'hot_leads': buckets['hot'],
            'warm_leads': buckets['warm'],
            'cold_leads': buckets['cold'],
        },
    )
