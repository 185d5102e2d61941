"""Analysis history endpoints: list, search, tag filter, detail, delete, download."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, Response
from postgrest.exceptions import APIError

from titulyzer.api.models import AnalysisDetail, AnalysisSummary
from titulyzer.storage import (
    delete_by_filename,
    find_by_filename,
    find_by_tags,
    get_supabase_client,
    list_analyses,
    search_by_text,
)

router = APIRouter()


def _unavailable(exc: APIError) -> HTTPException:
    return HTTPException(status_code=503, detail=f"Storage unavailable: {exc.message}")


@router.get("/analyses", response_model=list[AnalysisSummary])
async def get_all_analyses() -> list[AnalysisSummary]:
    """List every analysis, newest first."""
    try:
        rows = list_analyses(get_supabase_client())
    except APIError as exc:
        raise _unavailable(exc) from exc
    return [AnalysisSummary.from_row(r) for r in rows]


@router.get("/analyses/search", response_model=list[AnalysisSummary])
async def search_analyses(q: str = "") -> list[AnalysisSummary]:
    """Search titles, summaries and transcripts (case-insensitive)."""
    if not q.strip():
        raise HTTPException(status_code=400, detail="Query parameter 'q' is required")
    try:
        rows = search_by_text(get_supabase_client(), q.strip())
    except APIError as exc:
        raise _unavailable(exc) from exc
    return [AnalysisSummary.from_row(r) for r in rows]


@router.get("/analyses/tags", response_model=list[AnalysisSummary])
async def analyses_by_tags(
    tags: Annotated[list[str] | None, Query()] = None,
) -> list[AnalysisSummary]:
    """Analyses sharing at least one of the given tags."""
    wanted = [t.strip() for t in tags or [] if t.strip()]
    if not wanted:
        raise HTTPException(status_code=400, detail="At least one tag is required")
    try:
        rows = find_by_tags(get_supabase_client(), wanted)
    except APIError as exc:
        raise _unavailable(exc) from exc
    return [AnalysisSummary.from_row(r) for r in rows]


@router.get("/analyses/{filename}", response_model=AnalysisDetail)
async def get_analysis(filename: str) -> AnalysisDetail:
    try:
        row = find_by_filename(get_supabase_client(), filename)
    except APIError as exc:
        raise _unavailable(exc) from exc
    if row is None:
        raise HTTPException(status_code=404, detail="Analysis not found")
    return AnalysisDetail.from_row(row)


@router.delete("/analyses/{filename}", status_code=204)
async def delete_analysis(filename: str) -> Response:
    try:
        deleted = delete_by_filename(get_supabase_client(), filename)
    except APIError as exc:
        raise _unavailable(exc) from exc
    if not deleted:
        raise HTTPException(status_code=404, detail="Analysis not found")
    return Response(status_code=204)


@router.get("/download/transcription/{filename}")
async def download_transcription(filename: str) -> Response:
    """Download the stored transcript of an analysis as a plain-text attachment."""
    try:
        row = find_by_filename(get_supabase_client(), filename)
    except APIError as exc:
        raise _unavailable(exc) from exc
    if row is None or not row.get("transcription"):
        raise HTTPException(status_code=404, detail="Transcription not found")

    attachment = f"{Path(filename).stem}.txt"
    return Response(
        content=str(row["transcription"]),
        media_type="text/plain; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{attachment}"'},
    )
