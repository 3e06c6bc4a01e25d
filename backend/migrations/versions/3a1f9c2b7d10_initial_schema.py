"""Initial schema: users, sessions, weight tracking, businesses

Revision ID: 3a1f9c2b7d10
Revises:
Create Date: 2026-10-17 12:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3a1f9c2b7d10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'sessions',
        sa.Column('sid', sa.String(), primary_key=True),
        sa.Column('sess', postgresql.JSONB(), nullable=False),
        sa.Column('expire', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('IDX_session_expire', 'sessions', ['expire'])

    op.create_table(
        'users',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('email', sa.String(), nullable=True, unique=True),
        sa.Column('first_name', sa.String(), nullable=True),
        sa.Column('last_name', sa.String(), nullable=True),
        sa.Column('profile_image_url', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        'weight_entries',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.String(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('weight', sa.Numeric(5, 2), nullable=False),
        sa.Column('unit', sa.String(3), nullable=False, server_default='lbs'),
        sa.Column('entry_type', sa.String(10), nullable=False, server_default='manual'),
        sa.Column('photo_path', sa.String(255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('recorded_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("unit in ('lbs','kg')", name='ck_weight_entries_unit'),
        sa.CheckConstraint("entry_type in ('manual','photo')", name='ck_weight_entries_entry_type'),
    )
    op.create_index('idx_weight_entries_user_recorded', 'weight_entries', ['user_id', 'recorded_at'])

    op.create_table(
        'activity_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.String(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('action', sa.String(50), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('metadata', postgresql.JSONB(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('idx_activity_logs_user_time', 'activity_logs', ['user_id', 'created_at'])

    op.create_table(
        'business_profiles',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.String(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('business_name', sa.String(), nullable=False),
        sa.Column('category', sa.String(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('location', sa.String(), nullable=True),
        sa.Column('contact_email', sa.String(), nullable=True),
        sa.Column('contact_phone', sa.String(), nullable=True),
        sa.Column('website', sa.String(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('idx_business_profiles_user', 'business_profiles', ['user_id'])
    op.create_index('idx_business_profiles_category', 'business_profiles', ['category'])

    op.create_table(
        'customer_preferences',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.String(), sa.ForeignKey('users.id'), nullable=False, unique=True),
        sa.Column('preferred_categories', postgresql.ARRAY(sa.String()), nullable=True),
        sa.Column('budget_range', sa.String(), nullable=True),
        sa.Column('location', sa.String(), nullable=True),
        sa.Column('dietary_restrictions', postgresql.ARRAY(sa.String()), nullable=True),
        sa.Column('interests', postgresql.ARRAY(sa.String()), nullable=True),
        sa.Column('preferred_distance', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        'business_reviews',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column(
            'business_id', sa.Integer(),
            sa.ForeignKey('business_profiles.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column('customer_id', sa.String(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('review_text', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint('rating >= 1 and rating <= 5', name='ck_business_reviews_rating'),
    )
    op.create_index('idx_business_reviews_business', 'business_reviews', ['business_id'])
    op.create_index('idx_business_reviews_customer', 'business_reviews', ['customer_id'])

    op.create_table(
        'recommendations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.String(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column(
            'business_id', sa.Integer(),
            sa.ForeignKey('business_profiles.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column('recommendation_type', sa.String(50), nullable=False),
        sa.Column('score', sa.Numeric(5, 2), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('is_viewed', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('idx_recommendations_user_score', 'recommendations', ['user_id', 'score'])


def downgrade() -> None:
    op.drop_index('idx_recommendations_user_score', table_name='recommendations')
    op.drop_table('recommendations')
    op.drop_index('idx_business_reviews_customer', table_name='business_reviews')
    op.drop_index('idx_business_reviews_business', table_name='business_reviews')
    op.drop_table('business_reviews')
    op.drop_table('customer_preferences')
    op.drop_index('idx_business_profiles_category', table_name='business_profiles')
    op.drop_index('idx_business_profiles_user', table_name='business_profiles')
    op.drop_table('business_profiles')
    op.drop_index('idx_activity_logs_user_time', table_name='activity_logs')
    op.drop_table('activity_logs')
    op.drop_index('idx_weight_entries_user_recorded', table_name='weight_entries')
    op.drop_table('weight_entries')
    op.drop_table('users')
    op.drop_index('IDX_session_expire', table_name='sessions')
    op.drop_table('sessions')
