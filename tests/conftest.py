"""Shared test fixtures."""
from datetime import datetime, timezone, timedelta

import pytest
from unittest.mock import patch
from sqlalchemy.orm import sessionmaker

from lead_engine.database import Base, make_engine
from lead_engine.pipeline.base import FeatureBundle


NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    """Fixed reference instant so day counts are deterministic."""
    return NOW


@pytest.fixture
def db_engine():
    """In-memory SQLite engine with schema created. One shared connection."""
    engine = make_engine('sqlite://')
    import lead_engine.models.lead
    import lead_engine.models.demo_view
    import lead_engine.models.email_event
    import lead_engine.models.activity
    import lead_engine.models.system_setting
    import lead_engine.models.lead_score
    import lead_engine.models.lead_prediction
    import lead_engine.models.pipeline_forecast
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    """SQLAlchemy session bound to in-memory SQLite. Rolls back after each test."""
    Session = sessionmaker(bind=db_engine)
    session = Session()
    yield session
    session.rollback()
    session.close()


@pytest.fixture(autouse=True)
def patch_get_session(db_engine):
    """
    Route every get_session() call to the in-memory engine.

    Modules do `from lead_engine.database import get_session`, so the local
    bindings have to be patched too. Each call gets a fresh session so
    close() inside production code never touches the test's own session.
    """
    TestSession = sessionmaker(bind=db_engine)
    factory = lambda: TestSession()
    with patch('lead_engine.database.get_session', side_effect=factory), \
         patch('lead_engine.services.db.get_session', side_effect=factory), \
         patch('lead_engine.services.settings.get_session', side_effect=factory), \
         patch('lead_engine.pipeline.manager.get_session', side_effect=factory):
        yield TestSession


@pytest.fixture
def app():
    """Flask test app."""
    from lead_engine import create_app
    app = create_app()
    app.config['TESTING'] = True
    yield app


@pytest.fixture
def client(app):
    """Flask test client."""
    with app.test_client() as c:
        yield c


@pytest.fixture
def make_bundle():
    """Factory fixture — a FeatureBundle with every signal zeroed unless overridden."""
    def _make(**overrides):
        defaults = dict(
            lead_id='lead-001',
            pipeline_status='new_lead',
            industry='',
            demo_view_count=0,
            email_open_count=0,
            email_reply_count=0,
            has_replied=False,
            days_since_last_interaction=0,
            days_in_current_status=0,
            follow_ups_ignored_count=0,
            industry_match=False,
            has_website=False,
            has_reviews=False,
            google_rating=None,
        )
        defaults.update(overrides)
        return FeatureBundle(**defaults)
    return _make


@pytest.fixture
def make_lead(db_session):
    """Factory fixture — inserts and commits a CRM lead row."""
    from lead_engine.models.lead import Lead

    def _make(lead_id='lead-001', **overrides):
        defaults = dict(
            id=lead_id,
            pipeline_status='new_lead',
            industry=None,
            has_website=False,
            google_rating=None,
            google_review_count=None,
            created_at=NOW - timedelta(days=10),
            updated_at=NOW - timedelta(days=10),
        )
        defaults.update(overrides)
        lead = Lead(**defaults)
        db_session.add(lead)
        db_session.commit()
        return lead
    return _make
