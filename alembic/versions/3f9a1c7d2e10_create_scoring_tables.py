"""Create lead_scores, lead_predictions, pipeline_forecasts

Revision ID: 3f9a1c7d2e10
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9a1c7d2e10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'lead_scores',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('lead_id', sa.Text(), nullable=False),
        sa.Column('overall_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('engagement_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('urgency_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('fit_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('score_factors', sa.JSON(), nullable=True),
        sa.Column('last_calculated', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('lead_id', name='uq_lead_scores_lead_id'),
    )

    op.create_table(
        'lead_predictions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('lead_id', sa.Text(), nullable=False),
        sa.Column('predicted_close_probability', sa.Float(), nullable=False),
        sa.Column('predicted_close_date', sa.Date(), nullable=True),
        sa.Column('predicted_deal_value', sa.Float(), nullable=True),
        sa.Column('predicted_time_to_close_days', sa.Integer(), nullable=True),
        sa.Column('prediction_factors', sa.JSON(), nullable=True),
        sa.Column('last_updated', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('lead_id', name='uq_lead_predictions_lead_id'),
        sa.CheckConstraint(
            'predicted_close_probability >= 0.05 AND predicted_close_probability <= 0.95',
            name='ck_lead_predictions_probability_range',
        ),
    )

    op.create_table(
        'pipeline_forecasts',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('forecast_date', sa.Date(), nullable=False),
        sa.Column('forecast_period', sa.Text(), nullable=False, server_default='month'),
        sa.Column('predicted_revenue', sa.Float(), server_default='0.0'),
        sa.Column('confidence_interval_low', sa.Float(), server_default='0.0'),
        sa.Column('confidence_interval_high', sa.Float(), server_default='0.0'),
        sa.Column('predicted_closes', sa.Integer(), server_default='0'),
        sa.Column('predicted_close_rate', sa.Float(), server_default='0.0'),
        sa.Column('factors', sa.JSON(), nullable=True),
        sa.Column('generated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_pipeline_forecasts_forecast_date', 'pipeline_forecasts', ['forecast_date'])


def downgrade() -> None:
    op.drop_index('ix_pipeline_forecasts_forecast_date', table_name='pipeline_forecasts')
    op.drop_table('pipeline_forecasts')
    op.drop_table('lead_predictions')
    op.drop_table('lead_scores')
