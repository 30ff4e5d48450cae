"""
Shared pipeline types.

The Signal Aggregator produces FeatureBundles; the Lead Scorer and Forecast
Engine consume them and return plain result dataclasses. Nothing in here
touches the database — persistence is the manager's job.
"""
import math
from dataclasses import dataclass, field, asdict
from datetime import date
from typing import Dict, List, Any, Optional

from lead_engine.config import TERMINAL_STATUSES


@dataclass
class FeatureBundle:
    """Per-lead engagement signals + firmographics, built fresh every run."""
    lead_id: str
    pipeline_status: str = 'new_lead'
    industry: str = ''                    # normalized: stripped + lowercase
    demo_view_count: int = 0
    email_open_count: int = 0
    email_reply_count: int = 0
    has_replied: bool = False             # email reply OR reply activity
    days_since_last_interaction: int = 0
    days_in_current_status: int = 0
    follow_ups_ignored_count: int = 0
    industry_match: bool = False
    has_website: bool = False
    has_reviews: bool = False
    google_rating: Optional[float] = None

    @property
    def is_terminal(self) -> bool:
        return self.pipeline_status in TERMINAL_STATUSES


@dataclass
class LeadScoreResult:
    """Output of the Lead Scorer for one lead."""
    lead_id: str
    engagement_score: int
    urgency_score: int
    fit_score: int
    overall_score: int
    score_factors: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class LeadPredictionResult:
    """Output of the Forecast Engine for one lead."""
    lead_id: str
    probability: float
    close_days: int
    close_date: date
    deal_value: float
    factors: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PipelineForecastResult:
    """Pipeline-level roll-up of a batch of predictions."""
    forecast_date: date
    forecast_period: str
    predicted_revenue: float
    confidence_interval_low: float
    confidence_interval_high: float
    predicted_closes: int
    predicted_close_rate: float
    factors: Dict[str, int] = field(default_factory=dict)


@dataclass
class RunSummary:
    """Uniform output from every batch run. Logged by the caller, never persisted."""
    job: str
    processed: int = 0
    failed: int = 0
    skipped: bool = False
    message: str = ''
    hot_leads: int = 0
    predicted_revenue: float = 0.0
    predicted_closes: int = 0
    errors: List[str] = field(default_factory=list)
    meta: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        # A summary only exists for runs that completed; fetch failures raise instead
        data = asdict(self)
        data['success'] = True
        data['errors'] = self.errors[-20:]  # Keep last 20 errors
        return data


# ── Numeric helpers ──────────────────────────────────────────────────────────

def clamp(value, low, high):
    """Pin value into [low, high]."""
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))
