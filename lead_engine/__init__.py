"""
Flask application factory.

Creates and configures the app and registers the engine blueprint.
"""
import importlib

from flask import Flask


def create_app():
    """Create and configure the Flask application."""
    from lead_engine.logging_config import configure_logging

    app = Flask(__name__)

    configure_logging(app)

    from lead_engine.routes.engine import bp as engine_bp
    app.register_blueprint(engine_bp)

    # Import models so Base.metadata knows about them (required for SQLAlchemy).
    # Schema is managed by Alembic; nothing calls create_all() here.
    for module in (
        'lead_engine.models.lead',
        'lead_engine.models.demo_view',
        'lead_engine.models.email_event',
        'lead_engine.models.activity',
        'lead_engine.models.system_setting',
        'lead_engine.models.lead_score',
        'lead_engine.models.lead_prediction',
        'lead_engine.models.pipeline_forecast',
    ):
        importlib.import_module(module)

    return app
