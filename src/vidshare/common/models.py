"""SQLAlchemy ORM models and Pydantic schemas."""

import uuid
from datetime import UTC, datetime

from pydantic import BaseModel, Field
from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

VISIBILITY_PRIVATE = "private"
VISIBILITY_PUBLIC = "public"
REACTION_LIKE = "like"
REACTION_DISLIKE = "dislike"
STATUS_WAITING = "waiting"
DRAFT_TITLE = "Untitled"


def utcnow() -> datetime:
    return datetime.now(UTC)


def _created_at() -> Mapped[datetime]:
    return mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)


def _updated_at() -> Mapped[datetime]:
    return mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False
    )


# ── SQLAlchemy ORM ──────────────────────────────────────────────────────


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    auth_id: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    image_url: Mapped[str | None] = mapped_column(Text)
    banner_url: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    __table_args__ = ({"comment": "Local mirror of identity-provider accounts"},)

    videos: Mapped[list["Video"]] = relationship(back_populates="user", cascade="all, delete-orphan")


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()


class Video(Base):
    __tablename__ = "videos"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String(30), default=STATUS_WAITING)
    playback_id: Mapped[str | None] = mapped_column(String(200))
    thumbnail_url: Mapped[str | None] = mapped_column(Text)
    preview_url: Mapped[str | None] = mapped_column(Text)
    duration: Mapped[int] = mapped_column(Integer, default=0)
    visibility: Mapped[str] = mapped_column(String(20), default=VISIBILITY_PRIVATE, nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    category_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("categories.id", ondelete="SET NULL"))
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    user: Mapped[User] = relationship(back_populates="videos")


class VideoView(Base):
    __tablename__ = "video_views"

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    video_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("videos.id", ondelete="CASCADE"), primary_key=True)
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()


class VideoReaction(Base):
    __tablename__ = "video_reactions"

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    video_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("videos.id", ondelete="CASCADE"), primary_key=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()


class Subscription(Base):
    __tablename__ = "subscriptions"

    viewer_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    creator_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()


class Comment(Base):
    __tablename__ = "comments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    parent_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("comments.id", ondelete="CASCADE"))
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    video_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("videos.id", ondelete="CASCADE"), nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()


class CommentReaction(Base):
    __tablename__ = "comment_reactions"

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    comment_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("comments.id", ondelete="CASCADE"), primary_key=True
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()


class Playlist(Base):
    __tablename__ = "playlists"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()


class PlaylistVideo(Base):
    __tablename__ = "playlist_videos"

    playlist_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("playlists.id", ondelete="CASCADE"), primary_key=True
    )
    video_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("videos.id", ondelete="CASCADE"), primary_key=True)
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()


# ── Pydantic Schemas ────────────────────────────────────────────────────


class UserResponse(BaseModel):
    id: uuid.UUID
    name: str
    image_url: str | None = None
    banner_url: str | None = None

    model_config = {"from_attributes": True}


class CreatorResponse(UserResponse):
    subscriber_count: int = 0
    viewer_subscribed: bool = False


class CategoryResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: str | None = None

    model_config = {"from_attributes": True}


class VideoResponse(BaseModel):
    """A video row as returned by every video listing."""

    id: uuid.UUID
    title: str
    description: str | None
    status: str
    playback_id: str | None
    thumbnail_url: str | None
    preview_url: str | None
    duration: int
    visibility: str
    category_id: uuid.UUID | None
    created_at: datetime
    updated_at: datetime
    user: UserResponse
    view_count: int = 0
    like_count: int = 0
    dislike_count: int = 0

    model_config = {"from_attributes": True}


class StudioVideoResponse(VideoResponse):
    comment_count: int = 0


class VideoDetailResponse(VideoResponse):
    user: CreatorResponse  # type: ignore[assignment]
    viewer_reaction: str | None = None


class VideoUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    category_id: uuid.UUID | None = None
    visibility: str | None = Field(default=None, pattern=f"^({VISIBILITY_PRIVATE}|{VISIBILITY_PUBLIC})$")


class ReactionResponse(BaseModel):
    type: str | None
    like_count: int
    dislike_count: int


class SubscriptionResponse(BaseModel):
    viewer_id: uuid.UUID
    creator_id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    user: CreatorResponse | None = None

    model_config = {"from_attributes": True}


class SubscriptionRequest(BaseModel):
    user_id: uuid.UUID


class CommentResponse(BaseModel):
    id: uuid.UUID
    parent_id: uuid.UUID | None
    video_id: uuid.UUID
    value: str
    created_at: datetime
    updated_at: datetime
    user: UserResponse
    viewer_reaction: str | None = None
    reply_count: int = 0
    like_count: int = 0
    dislike_count: int = 0

    model_config = {"from_attributes": True}


class CommentCreateRequest(BaseModel):
    video_id: uuid.UUID
    parent_id: uuid.UUID | None = None
    value: str = Field(min_length=1)


class PlaylistResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: str | None
    user_id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    video_count: int = 0
    thumbnail_url: str | None = None

    model_config = {"from_attributes": True}


class PlaylistMembershipResponse(PlaylistResponse):
    contains_video: bool = False


class PlaylistCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = None


class PlaylistVideoResponse(BaseModel):
    playlist_id: uuid.UUID
    video_id: uuid.UUID

    model_config = {"from_attributes": True}


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class MessageResponse(BaseModel):
    message: str
