"""Create creators and scraping_jobs tables

Revision ID: 3f1c9a7d2e05
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7d2e05'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('creators',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('username', sa.Text(), nullable=False),
        sa.Column('full_name', sa.Text(), nullable=True),
        sa.Column('profile_url', sa.Text(), nullable=True),
        sa.Column('pk', sa.Text(), nullable=True),
        sa.Column('follower_count', sa.Integer(), nullable=True),
        sa.Column('following_count', sa.Integer(), nullable=True),
        sa.Column('media_count', sa.Integer(), nullable=True),
        sa.Column('is_verified', sa.Boolean(), nullable=True),
        sa.Column('is_business', sa.Boolean(), nullable=True),
        sa.Column('is_private', sa.Boolean(), nullable=True),
        sa.Column('category', sa.Text(), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('external_url', sa.Text(), nullable=True),
        sa.Column('profile_pic_url', sa.Text(), nullable=True),
        sa.Column('profile_pic_local', sa.Text(), nullable=True),
        sa.Column('bio_hashtags', sa.Text(), nullable=True),
        sa.Column('bio_mentions', sa.Text(), nullable=True),
        sa.Column('engagement_rate', sa.Float(), nullable=True),
        sa.Column('source_keyword', sa.Text(), nullable=True),
        sa.Column('search_score', sa.Float(), nullable=True),
        sa.Column('profile_type', sa.Text(), nullable=True),
        sa.Column('scraped_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_updated', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username'),
    )
    op.create_index('ix_creators_pk', 'creators', ['pk'])
    op.create_index('ix_creators_follower_count', 'creators', ['follower_count'])

    op.create_table('scraping_jobs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('search_query', sa.Text(), nullable=False),
        sa.Column('status', sa.Text(), nullable=False),
        sa.Column('total_found', sa.Integer(), nullable=True),
        sa.Column('total_saved', sa.Integer(), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('started_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('scraping_jobs')
    op.drop_index('ix_creators_follower_count', 'creators')
    op.drop_index('ix_creators_pk', 'creators')
    op.drop_table('creators')
