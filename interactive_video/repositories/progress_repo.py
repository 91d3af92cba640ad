"""Repository for per-viewer progress documents."""
from __future__ import annotations
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from ..models.interaction import ProgressDocument
from ..models.persisted_video import ProgressRecord


class ProgressRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, user_id: str, video_id: str) -> Optional[ProgressRecord]:
        result = await self.session.execute(
            select(ProgressRecord).where(
                ProgressRecord.user_id == user_id,
                ProgressRecord.video_id == video_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_document(self, user_id: str, video_id: str) -> ProgressDocument:
        record = await self.get(user_id, video_id)
        if record is None:
            return ProgressDocument()
        return ProgressDocument.model_validate(record.to_document())

    async def upsert(
        self, user_id: str, video_id: str, document: ProgressDocument
    ) -> ProgressRecord:
        record = await self.get(user_id, video_id)
        if record is None:
            record = ProgressRecord(user_id=user_id, video_id=video_id)
            self.session.add(record)
        record.suspend_data = document.suspendData
        record.lesson_status = document.lessonStatus.value
        record.score_raw = document.scoreRaw
        await self.session.commit()
        await self.session.refresh(record)
        return record

    async def delete_for_video(self, video_id: str) -> None:
        result = await self.session.execute(
            select(ProgressRecord).where(ProgressRecord.video_id == video_id)
        )
        for record in result.scalars().all():
            await self.session.delete(record)
        await self.session.commit()
