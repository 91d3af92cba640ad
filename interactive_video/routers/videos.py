"""Videos router: CRUD for videos and the interactive elements on them.

Element operations load the stored list into an ``EditorState``, apply one
mutation and write the whole list back.
"""
from __future__ import annotations
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from ..db.config import get_session
from ..engine.editor import EditorState
from ..engine.errors import ElementNotFound
from ..models.interaction import (
    ElementCreate,
    ElementImportRequest,
    InteractionSettings,
    InteractiveElement,
)
from ..models.persisted_video import VideoRecord
from ..repositories.progress_repo import ProgressRepository
from ..repositories.video_repo import (
    VideoConflictError,
    VideoNotFoundError,
    VideoRepository,
)
from ..services.element_codecs import DecodeError, UnsupportedFormatError, get_codec
from ..services.style_templates import get_template
from ..utils.feature_flags import is_feature_enabled
from ..utils.validation import validate_element_list

router = APIRouter(prefix="/videos", tags=["Videos"])
logger = logging.getLogger(__name__)


class VideoCreate(BaseModel):
    videoId: str = Field(..., min_length=1, max_length=64)
    title: str = Field(..., min_length=1, max_length=200)
    url: str = Field(default="", max_length=1024)
    duration: Optional[float] = Field(None, gt=0)
    description: Optional[str] = Field(None, max_length=500)
    elements: List[InteractiveElement] = Field(default_factory=list)
    settings: InteractionSettings = Field(default_factory=InteractionSettings)


class VideoUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=200)
    url: Optional[str] = Field(None, max_length=1024)
    duration: Optional[float] = Field(None, gt=0)
    description: Optional[str] = Field(None, max_length=500)
    status: Optional[str] = Field(None, pattern=r"^(draft|published)$")


class VideoOut(BaseModel):
    id: int
    videoId: str
    title: str
    url: str
    duration: Optional[float]
    status: str
    description: Optional[str]
    createdAt: str
    updatedAt: str
    elements: List[Dict[str, Any]]
    settings: Dict[str, Any]


# Helpers ------------------------------------------------------------------


async def _get_repo(
    session: AsyncSession = Depends(get_session),
) -> VideoRepository:
    return VideoRepository(session)


async def _get_record(video_id: str, repo: VideoRepository) -> VideoRecord:
    try:
        return await repo.get_by_video_id(video_id)
    except VideoNotFoundError:
        raise HTTPException(status_code=404, detail="Video not found")


def load_editor(record: VideoRecord) -> EditorState:
    """Editor state over a stored video's element list and settings."""
    return EditorState(
        record.elements,
        settings=InteractionSettings.model_validate(record.settings),
        video_id=record.video_id,
        title=record.title,
    )


def _dump_elements(editor: EditorState) -> List[Dict[str, Any]]:
    return [e.model_dump(mode="json") for e in editor.elements]


def _validation_detail(exc: ValidationError) -> List[str]:
    return [
        f"{'.'.join(str(part) for part in error['loc']) or 'element'}: {error['msg']}"
        for error in exc.errors()
    ]


# Videos -------------------------------------------------------------------


@router.post("", response_model=VideoOut, status_code=status.HTTP_201_CREATED)
async def create_video(
    payload: VideoCreate, repo: VideoRepository = Depends(_get_repo)
):
    try:
        record = await repo.create(
            video_id=payload.videoId,
            title=payload.title,
            url=payload.url,
            duration=payload.duration,
            description=payload.description,
            elements=[e.model_dump(mode="json") for e in payload.elements],
            settings=payload.settings.model_dump(mode="json"),
        )
    except VideoConflictError:
        raise HTTPException(status_code=409, detail="videoId already exists")
    logger.info("Created video %s with %d elements", payload.videoId, len(payload.elements))
    return record.to_dict()


@router.get("", response_model=List[VideoOut])
async def list_videos(repo: VideoRepository = Depends(_get_repo)):
    videos = await repo.list()
    return [v.to_dict() for v in videos]


@router.get("/{video_id}", response_model=VideoOut)
async def get_video(video_id: str, repo: VideoRepository = Depends(_get_repo)):
    record = await _get_record(video_id, repo)
    return record.to_dict()


@router.put("/{video_id}", response_model=VideoOut)
async def update_video(
    video_id: str,
    payload: VideoUpdate,
    repo: VideoRepository = Depends(_get_repo),
):
    try:
        record = await repo.update_record(
            video_id,
            title=payload.title,
            url=payload.url,
            duration=payload.duration,
            description=payload.description,
            status=payload.status,
        )
    except VideoNotFoundError:
        raise HTTPException(status_code=404, detail="Video not found")
    return record.to_dict()


@router.delete("/{video_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_video(
    video_id: str,
    repo: VideoRepository = Depends(_get_repo),
    session: AsyncSession = Depends(get_session),
):
    try:
        await repo.delete_record(video_id)
    except VideoNotFoundError:
        raise HTTPException(status_code=404, detail="Video not found")
    await ProgressRepository(session).delete_for_video(video_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Elements -----------------------------------------------------------------


@router.get("/{video_id}/elements", response_model=List[InteractiveElement])
async def list_elements(video_id: str, repo: VideoRepository = Depends(_get_repo)):
    record = await _get_record(video_id, repo)
    return list(load_editor(record).elements)


@router.post(
    "/{video_id}/elements",
    response_model=InteractiveElement,
    status_code=status.HTTP_201_CREATED,
)
async def add_element(
    video_id: str,
    payload: ElementCreate,
    repo: VideoRepository = Depends(_get_repo),
):
    record = await _get_record(video_id, repo)
    editor = load_editor(record)
    element = editor.add(payload.type, at_time=payload.timestamp)
    await repo.save_elements(video_id, _dump_elements(editor))
    return element


@router.put("/{video_id}/elements/{element_id}", response_model=InteractiveElement)
async def update_element(
    video_id: str,
    element_id: str,
    payload: InteractiveElement,
    repo: VideoRepository = Depends(_get_repo),
):
    if payload.id != element_id:
        raise HTTPException(status_code=400, detail="Element id does not match the path")
    record = await _get_record(video_id, repo)
    editor = load_editor(record)
    try:
        element = editor.update(payload)
    except ElementNotFound:
        raise HTTPException(status_code=404, detail="Element not found")
    await repo.save_elements(video_id, _dump_elements(editor))
    return element


@router.delete(
    "/{video_id}/elements/{element_id}", status_code=status.HTTP_204_NO_CONTENT
)
async def delete_element(
    video_id: str,
    element_id: str,
    repo: VideoRepository = Depends(_get_repo),
):
    record = await _get_record(video_id, repo)
    editor = load_editor(record)
    try:
        editor.delete(element_id)
    except ElementNotFound:
        raise HTTPException(status_code=404, detail="Element not found")
    await repo.save_elements(video_id, _dump_elements(editor))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{video_id}/elements/{element_id}/template/{template_id}",
    response_model=InteractiveElement,
)
async def apply_template(
    video_id: str,
    element_id: str,
    template_id: str,
    repo: VideoRepository = Depends(_get_repo),
):
    try:
        template = get_template(template_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Template not found")
    record = await _get_record(video_id, repo)
    editor = load_editor(record)
    try:
        element = editor.apply_template(template, element_id)
    except ElementNotFound:
        raise HTTPException(status_code=404, detail="Element not found")
    await repo.save_elements(video_id, _dump_elements(editor))
    return element


@router.post("/{video_id}/import")
async def import_elements(
    video_id: str,
    payload: ElementImportRequest,
    repo: VideoRepository = Depends(_get_repo),
):
    """Append elements decoded from a JSON or CSV payload under fresh ids."""
    if payload.format.lower() == "csv" and not is_feature_enabled("csv_import"):
        raise HTTPException(status_code=404, detail="Feature 'csv_import' is not available")
    try:
        codec = get_codec(payload.format)
    except UnsupportedFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))

    record = await _get_record(video_id, repo)
    editor = load_editor(record)
    try:
        decoded = codec.decode(payload.payload)
        created = editor.import_elements(decoded)
    except DecodeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=_validation_detail(e))

    await repo.save_elements(video_id, _dump_elements(editor))
    logger.info("Imported %d %s elements into %s", len(created), codec.name, video_id)
    return {
        "imported": len(created),
        "elements": [e.model_dump(mode="json") for e in created],
    }


@router.get("/{video_id}/validation")
async def validate_video(video_id: str, repo: VideoRepository = Depends(_get_repo)):
    record = await _get_record(video_id, repo)
    editor = load_editor(record)
    issues = validate_element_list(editor.elements, record.duration)
    return {
        "valid": not any(issue.level == "error" for issue in issues),
        "issues": [issue.to_dict() for issue in issues],
    }


# Settings -----------------------------------------------------------------


@router.get("/{video_id}/settings", response_model=InteractionSettings)
async def get_settings(video_id: str, repo: VideoRepository = Depends(_get_repo)):
    record = await _get_record(video_id, repo)
    return InteractionSettings.model_validate(record.settings)


@router.put("/{video_id}/settings", response_model=InteractionSettings)
async def update_settings(
    video_id: str,
    payload: InteractionSettings,
    repo: VideoRepository = Depends(_get_repo),
):
    try:
        await repo.save_settings(video_id, payload.model_dump(mode="json"))
    except VideoNotFoundError:
        raise HTTPException(status_code=404, detail="Video not found")
    return payload
