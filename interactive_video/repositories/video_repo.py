"""Repository layer for video persistence.

Keeps SQLAlchemy session usage out of the routers. The element list and
settings of a video are stored together in ``json_data`` and always replaced
as a whole.
"""
from __future__ import annotations
from typing import Any, Dict, List, Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from ..models.persisted_video import VideoRecord


class VideoNotFoundError(Exception):
    """Raised when a video record could not be located."""


class VideoConflictError(Exception):
    """Raised when attempting to create a video with an existing video_id."""


class VideoRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    # CREATE -----------------------------------------------------------------
    async def create(
        self,
        video_id: str,
        title: str,
        url: str = "",
        duration: Optional[float] = None,
        description: Optional[str] = None,
        elements: Optional[List[Dict[str, Any]]] = None,
        settings: Optional[Dict[str, Any]] = None,
    ) -> VideoRecord:
        existing = await self.session.execute(
            select(VideoRecord).where(VideoRecord.video_id == video_id)
        )
        if existing.scalar_one_or_none():
            raise VideoConflictError("videoId already exists")

        record = VideoRecord(
            video_id=video_id,
            title=title,
            url=url,
            duration=duration,
            description=description,
            json_data={"elements": elements or [], "settings": settings or {}},
        )
        self.session.add(record)
        await self.session.commit()
        await self.session.refresh(record)
        return record

    # READ -------------------------------------------------------------------
    async def list(self) -> Sequence[VideoRecord]:
        result = await self.session.execute(
            select(VideoRecord).order_by(VideoRecord.id)
        )
        return result.scalars().all()

    async def get_by_video_id(self, video_id: str) -> VideoRecord:
        result = await self.session.execute(
            select(VideoRecord).where(VideoRecord.video_id == video_id)
        )
        record = result.scalar_one_or_none()
        if not record:
            raise VideoNotFoundError
        return record

    # UPDATE -----------------------------------------------------------------
    async def update_record(
        self,
        video_id: str,
        title: Optional[str] = None,
        url: Optional[str] = None,
        duration: Optional[float] = None,
        description: Optional[str] = None,
        status: Optional[str] = None,
    ) -> VideoRecord:
        record = await self.get_by_video_id(video_id)
        if title is not None:
            record.title = title
        if url is not None:
            record.url = url
        if duration is not None:
            record.duration = duration
        if description is not None:
            record.description = description
        if status is not None:
            record.status = status
        await self.session.commit()
        await self.session.refresh(record)
        return record

    async def save_elements(
        self, video_id: str, elements: List[Dict[str, Any]]
    ) -> VideoRecord:
        record = await self.get_by_video_id(video_id)
        # a new dict so the JSON column registers the change
        record.json_data = {"elements": elements, "settings": record.settings}
        await self.session.commit()
        await self.session.refresh(record)
        return record

    async def save_settings(
        self, video_id: str, settings: Dict[str, Any]
    ) -> VideoRecord:
        record = await self.get_by_video_id(video_id)
        record.json_data = {"elements": record.elements, "settings": settings}
        await self.session.commit()
        await self.session.refresh(record)
        return record

    # DELETE -----------------------------------------------------------------
    async def delete_record(self, video_id: str) -> None:
        record = await self.get_by_video_id(video_id)
        await self.session.delete(record)
        await self.session.commit()
