"""
Export Router

Downloads a video's element list as JSON or CSV, or the whole interactive
video as a SCORM 1.2 package.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response, StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from ..db.config import get_session
from ..repositories.video_repo import VideoNotFoundError, VideoRepository
from ..services.element_codecs import CODECS, UnsupportedFormatError, get_codec
from ..services.scorm_export import scorm_service
from ..utils.feature_flags import is_feature_enabled
from .videos import load_editor

router = APIRouter(tags=["Export"])
logger = logging.getLogger(__name__)


async def _get_record(video_id: str, session: AsyncSession):
    try:
        return await VideoRepository(session).get_by_video_id(video_id)
    except VideoNotFoundError:
        raise HTTPException(status_code=404, detail="Video not found")


def _require_scorm_export() -> None:
    if not is_feature_enabled("scorm_export"):
        raise HTTPException(status_code=404, detail="Feature 'scorm_export' is not available")


@router.get("/videos/{video_id}/export", summary="Export Interactive Video")
async def export_video(
    video_id: str,
    format: str = Query("json", description="json, csv or scorm"),
    session: AsyncSession = Depends(get_session),
):
    record = await _get_record(video_id, session)
    snapshot = load_editor(record).export_snapshot()

    if format.lower() == "scorm":
        _require_scorm_export()
        logger.info("Starting SCORM export for video: %s", video_id)
        try:
            zip_buffer = await scorm_service.generate_scorm_package(
                snapshot,
                video_url=record.url,
                description=record.description,
                duration=record.duration,
            )
        except ValueError as e:
            logger.error(f"SCORM export validation error: {str(e)}")
            raise HTTPException(status_code=400, detail=str(e))

        size = len(zip_buffer.getvalue())
        logger.info("SCORM export completed successfully. File size: %d bytes", size)
        return StreamingResponse(
            zip_buffer,
            media_type="application/zip",
            headers={
                "Content-Disposition": f"attachment; filename={video_id}_scorm_package.zip",
                "Content-Length": str(size),
            },
        )

    try:
        codec = get_codec(format)
    except UnsupportedFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))

    body = codec.encode(snapshot)
    return Response(
        content=body,
        media_type=codec.media_type,
        headers={
            "Content-Disposition": f"attachment; filename={video_id}_elements{codec.file_extension}",
        },
    )


@router.get("/videos/{video_id}/export/validate", summary="Check SCORM Export Readiness")
async def validate_export(video_id: str, session: AsyncSession = Depends(get_session)):
    _require_scorm_export()
    record = await _get_record(video_id, session)
    snapshot = load_editor(record).export_snapshot()
    return {
        **scorm_service.validate_for_export(snapshot, record.duration),
        "estimate": scorm_service.estimate_package_size(snapshot),
    }


@router.get("/export/formats", summary="Get Supported Export Formats")
async def get_export_formats():
    formats = [
        {
            "format": codec.name,
            "description": f"{codec.name.upper()} element list",
            "media_type": codec.media_type,
            "file_extension": codec.file_extension,
        }
        for codec in CODECS.values()
    ]
    if is_feature_enabled("scorm_export"):
        formats.append({
            "format": "scorm",
            "version": scorm_service.scorm_version,
            "description": "SCORM 1.2 package with an interactive player",
            "media_type": "application/zip",
            "file_extension": ".zip",
        })
    return {"formats": formats, "default": "json"}
