"""
Centralized configuration — env vars, pipeline statuses, scoring thresholds.
"""
import os


# ── Logging ──────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FORMAT = os.getenv('LOG_FORMAT', 'text')

# ── Redis / RQ ────────────────────────────────────────────────────────────────
REDIS_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')
JOB_TIMEOUT = int(os.getenv('JOB_TIMEOUT', '1800'))

# ── PostgreSQL ────────────────────────────────────────────────────────────────
DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///local.db')

# ── Feature flags ─────────────────────────────────────────────────────────────
# Fallback when the system_settings row is missing.
LEAD_SCORING_ENABLED = os.getenv('LEAD_SCORING_ENABLED', 'true').lower() not in ('false', '0', 'no')
SCORING_ENABLED_SETTING_KEY = 'lead_scoring_enabled'

# ── Forecast window ───────────────────────────────────────────────────────────
FORECAST_LOOKBACK_DAYS = int(os.getenv('FORECAST_LOOKBACK_DAYS', '90'))
FORECAST_PERIOD = 'month'

# ── Pipeline status definitions ───────────────────────────────────────────────
TERMINAL_STATUSES = ('customer_won', 'lost_closed')

# Fraction of the sales cycle completed at each status
STAGE_PROGRESS = {
    'new_lead': 0.0,
    'contact_attempted': 0.15,
    'demo_created': 0.30,
    'demo_sent': 0.45,
    'demo_engaged': 0.60,
    'ready_to_buy': 0.80,
    'customer_won': 1.0,
    'lost_closed': 1.0,
}

# ── Fit scoring ───────────────────────────────────────────────────────────────
TARGET_INDUSTRIES = frozenset({
    'home-improvement',
    'hvac',
    'plumbing',
    'electrical',
    'roofing',
    'landscaping',
})

# ── Activity types (activities.type) ──────────────────────────────────────────
OUTBOUND_ACTIVITY_TYPES = frozenset({'email', 'sms', 'call'})
INBOUND_ACTIVITY_TYPES = frozenset({'email-reply', 'sms-reply', 'call-answered'})
REPLY_ACTIVITY_TYPES = frozenset({'email-reply', 'sms-reply'})
COMMUNICATION_ACTIVITY_TYPES = OUTBOUND_ACTIVITY_TYPES | INBOUND_ACTIVITY_TYPES

# ── Thresholds shared by per-lead and pipeline views ──────────────────────────
HOT_SCORE_THRESHOLD = 80

MIN_CLOSE_PROBABILITY = 0.05
MAX_CLOSE_PROBABILITY = 0.95

HOT_PROBABILITY = 0.70
WARM_PROBABILITY = 0.40       # also the revenue inclusion cutoff
LIKELY_CLOSE_PROBABILITY = 0.50

CONFIDENCE_BAND = (0.7, 1.3)
