"""Progress router: per-viewer suspend data and server-side responses.

The viewer is identified by the ``X-User-Id`` header; authentication is
handled in front of this service.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from ..db.config import get_session
from ..engine.errors import AlreadyResolved, ElementNotFound, InvalidOption
from ..models.interaction import ProgressDocument, RespondRequest, RespondResponse
from ..repositories.progress_repo import ProgressRepository
from ..repositories.video_repo import VideoNotFoundError, VideoRepository
from ..services.progress_service import resolve_response
from ..utils.feature_flags import feature_required
from .videos import load_editor

router = APIRouter(prefix="/progress", tags=["Progress"])
logger = logging.getLogger(__name__)

ANONYMOUS_USER = "anonymous"


async def _ensure_video(video_id: str, session: AsyncSession):
    try:
        return await VideoRepository(session).get_by_video_id(video_id)
    except VideoNotFoundError:
        raise HTTPException(status_code=404, detail="Video not found")


@router.get("/{video_id}", response_model=ProgressDocument)
async def get_progress(
    video_id: str,
    x_user_id: str = Header(ANONYMOUS_USER),
    session: AsyncSession = Depends(get_session),
):
    await _ensure_video(video_id, session)
    return await ProgressRepository(session).get_document(x_user_id, video_id)


@router.put("/{video_id}", response_model=ProgressDocument)
async def put_progress(
    video_id: str,
    payload: ProgressDocument,
    x_user_id: str = Header(ANONYMOUS_USER),
    session: AsyncSession = Depends(get_session),
):
    await _ensure_video(video_id, session)
    record = await ProgressRepository(session).upsert(x_user_id, video_id, payload)
    return record.to_document()


@router.post(
    "/{video_id}/responses",
    response_model=RespondResponse,
    dependencies=[Depends(feature_required("server_side_scoring"))],
)
async def post_response(
    video_id: str,
    payload: RespondRequest,
    x_user_id: str = Header(ANONYMOUS_USER),
    session: AsyncSession = Depends(get_session),
):
    """Resolve one element for the viewer and persist the new progress."""
    record = await _ensure_video(video_id, session)
    editor = load_editor(record)
    repo = ProgressRepository(session)
    document = await repo.get_document(x_user_id, video_id)

    try:
        resolved = resolve_response(editor.elements, editor.settings, document, payload)
    except ElementNotFound:
        raise HTTPException(status_code=404, detail="Element not found")
    except AlreadyResolved:
        raise HTTPException(status_code=409, detail="Element already resolved")
    except InvalidOption as e:
        raise HTTPException(status_code=422, detail=str(e))

    await repo.upsert(x_user_id, video_id, resolved.document)
    logger.info(
        "User %s resolved %s on %s (score %d)",
        x_user_id, payload.elementId, video_id, resolved.result.score,
    )
    return resolved.result
