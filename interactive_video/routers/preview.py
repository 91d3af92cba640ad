"""Preview router: one scheduler pass over a stored element list.

Lets the editor check what a viewer would see at a given time without a
playback session.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.config import get_session
from ..engine.scheduler import InteractionScheduler, evaluate
from ..models.interaction import PreviewRequest, PreviewResponse
from ..repositories.video_repo import VideoNotFoundError, VideoRepository
from ..utils.feature_flags import feature_required
from .videos import load_editor

router = APIRouter(
    prefix="/videos",
    tags=["Preview"],
    dependencies=[Depends(feature_required("preview_mode"))],
)


async def _get_repo(
    session: AsyncSession = Depends(get_session),
) -> VideoRepository:
    return VideoRepository(session)


@router.post("/{video_id}/preview", response_model=PreviewResponse)
async def preview_pass(
    video_id: str,
    payload: PreviewRequest,
    repo: VideoRepository = Depends(_get_repo),
):
    try:
        record = await repo.get_by_video_id(video_id)
    except VideoNotFoundError:
        raise HTTPException(status_code=404, detail="Video not found")

    editor = load_editor(record)
    result = evaluate(
        payload.currentTime, editor.elements, payload.completedIds, payload.activeIds
    )
    scheduler = InteractionScheduler(settings=editor.settings)
    return PreviewResponse(
        active=list(result.active),
        entered=[e.id for e in result.entered],
        exited=list(result.exited),
        pauseRequested=any(scheduler.should_pause(e) for e in result.entered),
    )
