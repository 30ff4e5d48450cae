"""
Feature-flag lookup — resolves the global "lead scoring enabled" switch.

Resolved once by the caller at the start of a batch and passed into the
scoring runner as an explicit argument. The runner never reads it itself.
"""
import logging

from lead_engine.config import LEAD_SCORING_ENABLED, SCORING_ENABLED_SETTING_KEY
from lead_engine.database import get_session
from lead_engine.models.system_setting import SystemSetting

logger = logging.getLogger('services.settings')


def is_scoring_enabled() -> bool:
    """
    Read system_settings.lead_scoring_enabled.

    Only the literal string 'false' disables scoring. A missing row or an
    unreadable table falls back to the LEAD_SCORING_ENABLED env default.
    """
    session = get_session()
    try:
        row = session.query(SystemSetting.value).filter_by(key=SCORING_ENABLED_SETTING_KEY).first()
    except Exception:
        logger.warning("Could not read %s — using env default (%s)",
                       SCORING_ENABLED_SETTING_KEY, LEAD_SCORING_ENABLED, exc_info=True)
        return LEAD_SCORING_ENABLED
    finally:
        session.close()

    if row is None or row.value is None:
        return LEAD_SCORING_ENABLED
    return row.value.strip().lower() != 'false'
