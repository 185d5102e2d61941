"""Supabase storage helpers for video analyses."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, cast

from supabase import Client, create_client

from titulyzer.config import settings

if TYPE_CHECKING:
    from titulyzer.generation.models import AnalysisResult

TABLE = "video_analyses"

# PostgREST uses these as filter-list delimiters inside or=(...)
_FILTER_DELIMITERS_RE = re.compile(r"[,()]")


def get_supabase_client() -> Client:
    """Create and return a Supabase client from the application settings."""
    return create_client(settings.supabase_url, settings.supabase_key)


def store_analysis(
    client: Client,
    filename: str,
    original_name: str,
    analysis: AnalysisResult,
    transcription: str,
    duration: float | None = None,
    file_size: int | None = None,
) -> dict[str, Any]:
    """Insert a finished analysis and return the stored row."""
    result = (
        client.table(TABLE)
        .insert(
            {
                "filename": filename,
                "original_name": original_name,
                "title": analysis.title,
                "description": analysis.description,
                "summary": analysis.summary,
                "tags": list(analysis.tags),
                "ai_model": analysis.provider.value,
                "transcription": transcription,
                "duration": duration,
                "file_size": file_size,
            }
        )
        .execute()
    )
    # Supabase .data is typed as JSON (broad union); cast to concrete type.
    rows = cast(list[dict[str, Any]], result.data)
    return rows[0]


def list_analyses(client: Client) -> list[dict[str, Any]]:
    """All analyses, newest first."""
    result = client.table(TABLE).select("*").order("created_at", desc=True).execute()
    return cast(list[dict[str, Any]], result.data)


def find_by_filename(client: Client, filename: str) -> dict[str, Any] | None:
    result = client.table(TABLE).select("*").eq("filename", filename).limit(1).execute()
    rows = cast(list[dict[str, Any]], result.data)
    return rows[0] if rows else None


def search_by_text(client: Client, query: str) -> list[dict[str, Any]]:
    """Case-insensitive substring match on title, summary and transcription."""
    term = _FILTER_DELIMITERS_RE.sub(" ", query).strip()
    pattern = f"%{term}%"
    result = (
        client.table(TABLE)
        .select("*")
        .or_(
            f"title.ilike.{pattern},summary.ilike.{pattern},transcription.ilike.{pattern}"
        )
        .order("created_at", desc=True)
        .execute()
    )
    return cast(list[dict[str, Any]], result.data)


def find_by_tags(client: Client, tags: list[str]) -> list[dict[str, Any]]:
    """Analyses sharing at least one of *tags*."""
    result = (
        client.table(TABLE)
        .select("*")
        .ov("tags", tags)
        .order("created_at", desc=True)
        .execute()
    )
    return cast(list[dict[str, Any]], result.data)


def delete_by_filename(client: Client, filename: str) -> bool:
    """Delete an analysis; return False if nothing matched."""
    result = client.table(TABLE).delete().eq("filename", filename).execute()
    return bool(result.data)
