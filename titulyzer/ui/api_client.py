"""HTTP client wrapper for the Titulyzer FastAPI backend."""

from __future__ import annotations

import os
import re

import httpx
import streamlit as st

API_URL = os.getenv("API_URL", "http://localhost:3030")

VIDEO_EXTENSION_RE = re.compile(r"\.(mp4|avi|mov|mkv|wmv|flv|webm)$", re.IGNORECASE)


def check_health() -> bool:
    """Return True if the API server responds to /health."""
    try:
        r = httpx.get(f"{API_URL}/health", timeout=5.0)
        return r.status_code == 200
    except httpx.ConnectError:
        return False


def upload_video(file_content: bytes, filename: str) -> dict:  # type: ignore[type-arg]
    """Upload a video and wait for transcription and analysis to finish."""
    try:
        r = httpx.post(
            f"{API_URL}/upload/video",
            files={"file": (filename, file_content)},
            timeout=600.0,
        )
    except httpx.HTTPError as e:
        st.error(f"Upload failed: {e}")
        return {}

    body = r.json() if r.headers.get("content-type", "").startswith("application/json") else {}
    if r.is_error:
        error = body.get("error") or body.get("detail") or r.text
        st.error(f"Upload failed: {error}")
        return {}
    return body  # type: ignore[no-any-return]


def get_analyses() -> list[dict]:  # type: ignore[type-arg]
    """Fetch the full analysis history."""
    try:
        r = httpx.get(f"{API_URL}/analyses", timeout=10.0)
        r.raise_for_status()
        return r.json()  # type: ignore[no-any-return]
    except httpx.HTTPError:
        return []


def get_analysis(filename: str) -> dict:  # type: ignore[type-arg]
    """Fetch one analysis by its stored filename."""
    try:
        r = httpx.get(f"{API_URL}/analyses/{filename}", timeout=10.0)
        r.raise_for_status()
        return r.json()  # type: ignore[no-any-return]
    except httpx.HTTPError:
        return {}


def search_by_text(text: str) -> list[dict]:  # type: ignore[type-arg]
    try:
        r = httpx.get(f"{API_URL}/analyses/search", params={"q": text}, timeout=10.0)
        r.raise_for_status()
        return r.json()  # type: ignore[no-any-return]
    except httpx.HTTPError:
        return []


def is_filename_query(query: str) -> bool:
    """A query looks like a filename if it has a video extension or is a single long token."""
    query = query.strip()
    return bool(VIDEO_EXTENSION_RE.search(query)) or (" " not in query and len(query) > 3)


def search_analyses(query: str) -> tuple[list[dict], str]:  # type: ignore[type-arg]
    """Search by filename or by content, picking the mode from the query's shape.

    Returns:
        ``(results, search_type)`` where search_type is ``"filename"`` or ``"content"``.
    """
    query = query.strip()
    if is_filename_query(query):
        analysis = get_analysis(query)
        return ([analysis] if analysis else []), "filename"
    return search_by_text(query), "content"


def transcription_download_url(filename: str) -> str:
    return f"{API_URL}/download/transcription/{filename}"
