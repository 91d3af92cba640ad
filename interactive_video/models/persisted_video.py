"""SQLAlchemy ORM models for persisted videos and viewer progress.

Separate from the Pydantic models in interaction.py, which validate element
lists and API payloads. A video's element list and settings live together in
one JSON column; progress rows hold the suspend-data document per viewer.
"""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column, declarative_base
from sqlalchemy import DateTime, Float, Integer, JSON, String, Text, UniqueConstraint

Base = declarative_base()


class VideoRecord(Base):
    __tablename__ = "videos"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    video_id: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    title: Mapped[str] = mapped_column(String(200))
    url: Mapped[str] = mapped_column(String(1024), default="")
    duration: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    status: Mapped[str] = mapped_column(String(32), default="draft")
    json_data: Mapped[dict] = mapped_column(JSON, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    @property
    def elements(self) -> list:
        return list((self.json_data or {}).get("elements", []))

    @property
    def settings(self) -> dict:
        return dict((self.json_data or {}).get("settings", {}))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "videoId": self.video_id,
            "title": self.title,
            "url": self.url,
            "duration": self.duration,
            "status": self.status,
            "description": self.description,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
            "elements": self.elements,
            "settings": self.settings,
        }


class ProgressRecord(Base):
    """Suspend data, lesson status and raw score for one viewer of one video."""

    __tablename__ = "viewer_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "video_id", name="uq_viewer_progress_user_video"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(128), index=True)
    video_id: Mapped[str] = mapped_column(String(64), index=True)
    suspend_data: Mapped[str] = mapped_column(Text, default="")
    lesson_status: Mapped[str] = mapped_column(String(32), default="not attempted")
    score_raw: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def to_document(self) -> dict:
        return {
            "suspendData": self.suspend_data or "",
            "lessonStatus": self.lesson_status,
            "scoreRaw": self.score_raw,
        }

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "videoId": self.video_id,
            **self.to_document(),
            "updatedAt": self.updated_at.isoformat(),
        }
