"""videos and viewer progress tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19
"""
from __future__ import annotations
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '20261019_0001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'videos',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('video_id', sa.String(length=64), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('url', sa.String(length=1024), nullable=False, server_default=''),
        sa.Column('duration', sa.Float(), nullable=True),
        sa.Column(
            'status', sa.String(length=32), nullable=False,
            server_default='draft'
        ),
        sa.Column('json_data', sa.JSON(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column(
            'created_at', sa.DateTime(),
            server_default=sa.text('CURRENT_TIMESTAMP')
        ),
        sa.Column(
            'updated_at', sa.DateTime(),
            server_default=sa.text('CURRENT_TIMESTAMP')
        ),
    )
    op.create_index('ix_videos_video_id', 'videos', ['video_id'], unique=True)

    op.create_table(
        'viewer_progress',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('video_id', sa.String(length=64), nullable=False),
        sa.Column('suspend_data', sa.Text(), nullable=False, server_default=''),
        sa.Column(
            'lesson_status', sa.String(length=32), nullable=False,
            server_default='not attempted'
        ),
        sa.Column('score_raw', sa.Integer(), nullable=False, server_default='0'),
        sa.Column(
            'created_at', sa.DateTime(),
            server_default=sa.text('CURRENT_TIMESTAMP')
        ),
        sa.Column(
            'updated_at', sa.DateTime(),
            server_default=sa.text('CURRENT_TIMESTAMP')
        ),
        sa.UniqueConstraint(
            'user_id', 'video_id', name='uq_viewer_progress_user_video'
        ),
    )
    op.create_index('ix_viewer_progress_user_id', 'viewer_progress', ['user_id'])
    op.create_index('ix_viewer_progress_video_id', 'viewer_progress', ['video_id'])


def downgrade() -> None:
    op.drop_index('ix_viewer_progress_video_id', table_name='viewer_progress')
    op.drop_index('ix_viewer_progress_user_id', table_name='viewer_progress')
    op.drop_table('viewer_progress')
    op.drop_index('ix_videos_video_id', table_name='videos')
    op.drop_table('videos')
