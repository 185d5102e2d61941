"""Pydantic request/response schemas for the Titulyzer API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from titulyzer.pipeline_config import Provider


class UploadResponse(BaseModel):
    """Response body for a successfully processed upload."""

    success: bool = True
    message: str = "Video processed, transcribed and analysed successfully"
    filename: str
    original_name: str
    transcription: str
    title: str
    description: str
    summary: str
    tags: list[str]
    ai_model: Provider
    duration: float | None = None
    file_size: int | None = None


class UploadFailureResponse(BaseModel):
    """Structured failure returned when the pipeline cannot finish."""

    success: bool = False
    message: str = "Failed to process the video"
    error: str


class AnalysisSummary(BaseModel):
    """An analysis as shown in history and search results."""

    id: str | None = None
    filename: str
    original_name: str | None = None
    title: str | None = None
    summary: str
    tags: list[str] = []
    ai_model: str
    duration: float | None = None
    file_size: int | None = None
    created_at: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> AnalysisSummary:
        return cls(
            id=str(row["id"]) if row.get("id") is not None else None,
            filename=row["filename"],
            original_name=row.get("original_name"),
            title=row.get("title"),
            summary=row.get("summary") or "",
            tags=row.get("tags") or [],
            ai_model=row.get("ai_model") or "",
            duration=row.get("duration"),
            file_size=row.get("file_size"),
            created_at=row.get("created_at"),
        )


class AnalysisDetail(AnalysisSummary):
    """Full analysis including description and transcript."""

    description: str | None = None
    transcription: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> AnalysisDetail:
        summary = AnalysisSummary.from_row(row)
        return cls(
            **summary.model_dump(),
            description=row.get("description"),
            transcription=row.get("transcription"),
        )
