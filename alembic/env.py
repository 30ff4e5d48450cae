"""
Alembic environment — reuses the app's engine URL and model metadata.

Only the engine's own tables are managed here; leads, demo_views,
email_events, activities and system_settings belong to the CRM.
"""
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from lead_engine.database import Base, url
import lead_engine.models.lead_score
import lead_engine.models.lead_prediction
import lead_engine.models.pipeline_forecast

config = context.config
config.set_main_option('sqlalchemy.url', url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

OWNED_TABLES = {'lead_scores', 'lead_predictions', 'pipeline_forecasts'}


def include_object(obj, name, type_, reflected, compare_to):
    if type_ == 'table':
        return name in OWNED_TABLES
    return True


def run_migrations_offline() -> None:
    context.configure(
        url=url,
        target_metadata=target_metadata,
        include_object=include_object,
        literal_binds=True,
        dialect_opts={'paramstyle': 'named'},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix='sqlalchemy.',
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            include_object=include_object,
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
