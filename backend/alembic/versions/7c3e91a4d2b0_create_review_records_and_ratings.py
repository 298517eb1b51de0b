"""create_review_records_and_ratings

Revision ID: 7c3e91a4d2b0
Revises:
Create Date: 2026-10-19 10:12:41.204518

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '7c3e91a4d2b0'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'review_records',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('artifact_id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('professor_id', sa.Integer(), nullable=True),
        sa.Column('saved_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_review_records_artifact_id'), 'review_records', ['artifact_id'], unique=False)
    # Serves the most-recent-status lookup
    op.create_index('ix_review_records_artifact_saved', 'review_records', ['artifact_id', 'saved_at'], unique=False)

    op.create_table(
        'ratings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('review_id', sa.Integer(), nullable=False),
        sa.Column('rating_value', sa.Integer(), nullable=False),
        sa.Column('rated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('rating_value BETWEEN 1 AND 5', name='ck_ratings_value_range'),
        sa.ForeignKeyConstraint(['review_id'], ['review_records.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'review_id', name='uq_ratings_user_review')
    )
    op.create_index(op.f('ix_ratings_review_id'), 'ratings', ['review_id'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f('ix_ratings_review_id'), table_name='ratings')
    op.drop_table('ratings')
    op.drop_index('ix_review_records_artifact_saved', table_name='review_records')
    op.drop_index(op.f('ix_review_records_artifact_id'), table_name='review_records')
    op.drop_table('review_records')
