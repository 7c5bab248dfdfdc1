"""Initial schema: users, categories, videos, engagement, comments, playlists.

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("auth_id", sa.String(200), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("image_url", sa.Text),
        sa.Column("banner_url", sa.Text),
        *_timestamps(),
        sa.UniqueConstraint("auth_id", name="uq_users_auth_id"),
        comment="Local mirror of identity-provider accounts",
    )

    op.create_table(
        "categories",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text),
        *_timestamps(),
        sa.UniqueConstraint("name", name="uq_categories_name"),
    )

    op.create_table(
        "videos",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("description", sa.Text),
        sa.Column("status", sa.String(30), server_default="waiting"),
        sa.Column("playback_id", sa.String(200)),
        sa.Column("thumbnail_url", sa.Text),
        sa.Column("preview_url", sa.Text),
        sa.Column("duration", sa.Integer, server_default="0"),
        sa.Column("visibility", sa.String(20), server_default="private", nullable=False),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("category_id", UUID(as_uuid=True), sa.ForeignKey("categories.id", ondelete="SET NULL")),
        *_timestamps(),
        sa.CheckConstraint("visibility IN ('private', 'public')", name="ck_videos_visibility"),
    )

    op.create_table(
        "video_views",
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("video_id", UUID(as_uuid=True), sa.ForeignKey("videos.id", ondelete="CASCADE"), primary_key=True),
        *_timestamps(),
    )

    op.create_table(
        "video_reactions",
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("video_id", UUID(as_uuid=True), sa.ForeignKey("videos.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("type", sa.String(20), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("type IN ('like', 'dislike')", name="ck_video_reactions_type"),
    )

    op.create_table(
        "subscriptions",
        sa.Column("viewer_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("creator_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        *_timestamps(),
    )

    op.create_table(
        "comments",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("parent_id", UUID(as_uuid=True), sa.ForeignKey("comments.id", ondelete="CASCADE")),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("video_id", UUID(as_uuid=True), sa.ForeignKey("videos.id", ondelete="CASCADE"), nullable=False),
        sa.Column("value", sa.Text, nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "comment_reactions",
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column(
            "comment_id", UUID(as_uuid=True), sa.ForeignKey("comments.id", ondelete="CASCADE"), primary_key=True
        ),
        sa.Column("type", sa.String(20), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("type IN ('like', 'dislike')", name="ck_comment_reactions_type"),
    )

    op.create_table(
        "playlists",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "playlist_videos",
        sa.Column(
            "playlist_id", UUID(as_uuid=True), sa.ForeignKey("playlists.id", ondelete="CASCADE"), primary_key=True
        ),
        sa.Column("video_id", UUID(as_uuid=True), sa.ForeignKey("videos.id", ondelete="CASCADE"), primary_key=True),
        *_timestamps(),
    )

    # Keyset indexes: each listing's (sort key, tiebreaker) pair
    op.create_index("idx_videos_updated_id", "videos", ["updated_at", "id"])
    op.create_index("idx_videos_user_updated_id", "videos", ["user_id", "updated_at", "id"])
    op.create_index("idx_videos_category_updated_id", "videos", ["category_id", "updated_at", "id"])
    op.create_index("idx_video_views_video_id", "video_views", ["video_id"])
    op.create_index("idx_video_views_user_updated", "video_views", ["user_id", "updated_at", "video_id"])
    op.create_index("idx_video_reactions_video_id", "video_reactions", ["video_id"])
    op.create_index("idx_video_reactions_user_updated", "video_reactions", ["user_id", "updated_at", "video_id"])
    op.create_index("idx_subscriptions_creator_id", "subscriptions", ["creator_id"])
    op.create_index("idx_subscriptions_viewer_updated", "subscriptions", ["viewer_id", "updated_at", "creator_id"])
    op.create_index("idx_comments_video_parent_updated", "comments", ["video_id", "parent_id", "updated_at", "id"])
    op.create_index("idx_comment_reactions_comment_id", "comment_reactions", ["comment_id"])
    op.create_index("idx_playlists_user_updated_id", "playlists", ["user_id", "updated_at", "id"])
    op.create_index("idx_playlist_videos_playlist_updated", "playlist_videos", ["playlist_id", "updated_at", "video_id"])


def downgrade() -> None:
    op.drop_table("playlist_videos")
    op.drop_table("playlists")
    op.drop_table("comment_reactions")
    op.drop_table("comments")
    op.drop_table("subscriptions")
    op.drop_table("video_reactions")
    op.drop_table("video_views")
    op.drop_table("videos")
    op.drop_table("categories")
    op.drop_table("users")
