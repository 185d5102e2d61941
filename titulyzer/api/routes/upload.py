"""Upload endpoint: run an uploaded video through the analysis pipeline."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import JSONResponse

from titulyzer.api.dependencies import get_video_pipeline
from titulyzer.api.models import UploadFailureResponse, UploadResponse
from titulyzer.config import settings
from titulyzer.errors import AllProvidersFailedError, AudioExtractionError, SegmentationError
from titulyzer.pipeline import VideoPipeline

logger = logging.getLogger(__name__)

router = APIRouter()


def _failure(status_code: int, exc: Exception) -> JSONResponse:
    body = UploadFailureResponse(error=str(exc))
    return JSONResponse(status_code=status_code, content=body.model_dump())


@router.post(
    "/upload/video",
    response_model=UploadResponse,
    responses={
        422: {"model": UploadFailureResponse},
        500: {"model": UploadFailureResponse},
        503: {"model": UploadFailureResponse},
    },
)
async def upload_video(
    file: Annotated[UploadFile, File(...)],
    pipeline: Annotated[VideoPipeline, Depends(get_video_pipeline)],
) -> UploadResponse | JSONResponse:
    """Upload a video, transcribe it and generate a title, description, summary and tags.

    Pipeline failures come back as an ``UploadFailureResponse``:
    503 when every AI provider failed, 422 when ffmpeg could not read the
    media, 500 for anything else.
    """
    raw = await file.read()
    if len(raw) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size is {settings.max_upload_bytes // (1024 * 1024)} MB.",
        )
    if not raw:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    original_name = file.filename or "video.mp4"
    logger.info("Upload received: %s (%.2f MB)", original_name, len(raw) / (1024 * 1024))

    try:
        result = await pipeline.process_upload(raw, original_name)
    except AllProvidersFailedError as exc:
        logger.error("Content generation failed for %s: %s", original_name, exc)
        return _failure(503, exc)
    except (AudioExtractionError, SegmentationError) as exc:
        logger.error("Media processing failed for %s: %s", original_name, exc)
        return _failure(422, exc)
    except Exception as exc:
        logger.exception("Pipeline failed for %s", original_name)
        return _failure(500, exc)

    analysis = result.analysis
    return UploadResponse(
        filename=result.filename,
        original_name=result.original_name,
        transcription=result.transcription,
        title=analysis.title,
        description=analysis.description,
        summary=analysis.summary,
        tags=list(analysis.tags),
        ai_model=analysis.provider,
        duration=result.duration,
        file_size=result.file_size,
    )
