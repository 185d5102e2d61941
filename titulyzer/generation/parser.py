"""Tolerant parsing of semi-structured LLM output into title/description/summary/tags.

Providers are asked for a bare JSON object but regularly wrap it in prose or
code fences, translate the keys, or decorate values with markdown. Parsing
never fails: when no JSON object can be recovered the text is mined
heuristically, and every field falls back to a fixed placeholder.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterator
from typing import Any

from titulyzer.generation.models import ParsedContent

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Untitled video"
DEFAULT_DESCRIPTION = "No description generated"
DEFAULT_SUMMARY = "Summary of the analysed video content"
FALLBACK_TITLE = "AI-generated title"
FALLBACK_SUMMARY = "Video content analysis with relevant insights and discussion."
DEFAULT_TAGS: tuple[str, ...] = ("video", "analysis", "content", "youtube", "entertainment")

MIN_SUMMARY_LENGTH = 10
MAX_TITLE_LENGTH = 100
MAX_SUMMARY_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 1000

# Canonical key first, then accepted translations
KEY_SYNONYMS: dict[str, tuple[str, ...]] = {
    "title": ("title", "título", "titulo"),
    "description": ("description", "descrição", "descricao"),
    "summary": ("summary", "resumo"),
    "tags": ("tags", "etiquetas"),
}

_QUOTE = "[\"“”]"

# Applied in order; later rules assume earlier ones already ran.
_CLEANUP_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    # **bold** -> bold
    (re.compile(r"\*\*([^*]+)\*\*"), r"\1"),
    # *italic* -> italic
    (re.compile(r"\*([^*]+)\*"), r"\1"),
    # `code` -> code
    (re.compile(r"`([^`]+)`"), r"\1"),
    # heading markers
    (re.compile(r"#{1,6}\s*"), ""),
    # leftover **** (and an opening quote) at the very start
    (re.compile(rf"\A\*{{2,4}}\s*{_QUOTE}?"), ""),
    # leftover **** (and a closing quote) at the very end
    (re.compile(rf"{_QUOTE}?\s*\*{{2,4}}\Z"), ""),
    # wrapping quotes
    (re.compile(rf"\A{_QUOTE}"), ""),
    (re.compile(rf"{_QUOTE}\Z"), ""),
    # label prefixes
    (re.compile(r"\A(?:Título:|Title:)\s*", re.IGNORECASE), ""),
    (re.compile(r"\A(?:Descrição:|Description:)\s*", re.IGNORECASE), ""),
    (re.compile(r"\A(?:Resumo:|Summary:)\s*", re.IGNORECASE), ""),
    # duplicated **Label:** "value" fragments echoed into the description
    (
        re.compile(r"\*\*(?:Título|Title|Descrição|Description|Resumo|Summary):\*\*[^\"]*\""),
        "",
    ),
    # literal backslash-n sequences
    (re.compile(r"\\n"), " "),
    # **Label:** headings after a line break
    (re.compile(r"\n\*\*[^:]+:\*\*"), "\n"),
    # leading / trailing newlines
    (re.compile(r"\A\n+"), ""),
    (re.compile(r"\n+\Z"), ""),
    # at most one blank line in a row
    (re.compile(r"\n{3,}"), "\n\n"),
)

_GREEDY_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)
_FENCED_OBJECT_RE = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL)
_TITLE_MARKER_RE = re.compile(r"título:?|title:?", re.IGNORECASE)


def clean_text(value: Any) -> str:
    """Strip markdown, label prefixes and stray quoting from a field value.

    Non-string values (other than numbers) clean to an empty string.
    """
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return ""
    text = str(value)
    for pattern, replacement in _CLEANUP_RULES:
        text = pattern.sub(replacement, text)
    return text.strip()


def _json_candidates(text: str) -> Iterator[str]:
    """Yield substrings of *text* that may hold a JSON object, most likely first."""
    greedy = _GREEDY_OBJECT_RE.search(text)
    if greedy:
        yield greedy.group(0)

    fenced = _FENCED_OBJECT_RE.search(text)
    if fenced:
        yield fenced.group(1)

    lines = text.split("\n")
    start: int | None = None
    for i, line in enumerate(lines):
        stripped = line.strip()
        if start is None and stripped.startswith("{"):
            start = i
        if start is not None and stripped.endswith("}"):
            yield "\n".join(lines[start : i + 1])
            return


def extract_json_object(text: str) -> dict[str, Any] | None:
    """Return the first candidate region of *text* that parses to a JSON object."""
    for candidate in _json_candidates(text):
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data
    return None


def _first_value(data: dict[str, Any], field: str) -> Any:
    for key in KEY_SYNONYMS[field]:
        value = data.get(key)
        if value:
            return value
    return None


def _normalize_tags(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return DEFAULT_TAGS
    tags = tuple(
        str(tag).strip()
        for tag in value
        if isinstance(tag, (str, int, float)) and not isinstance(tag, bool) and str(tag).strip()
    )
    return tags or DEFAULT_TAGS


def normalize_fields(data: dict[str, Any]) -> ParsedContent:
    """Map a parsed JSON object onto :class:`ParsedContent`, filling any gaps."""
    summary = clean_text(_first_value(data, "summary"))
    return ParsedContent(
        title=clean_text(_first_value(data, "title")) or DEFAULT_TITLE,
        description=clean_text(_first_value(data, "description")) or DEFAULT_DESCRIPTION,
        summary=summary if len(summary) > MIN_SUMMARY_LENGTH else DEFAULT_SUMMARY,
        tags=_normalize_tags(_first_value(data, "tags")),
    )


def extract_from_plain_text(text: str) -> ParsedContent:
    """Heuristically recover content fields from a response with no JSON."""
    lines = [line for line in text.split("\n") if line.strip()]

    title = FALLBACK_TITLE
    for line in lines:
        if "título" in line.lower() or "title" in line.lower() or "**" in line:
            title = _TITLE_MARKER_RE.sub("", line).strip() or title
            break

    first_lines = " ".join(lines[:3])
    if len(first_lines) > 20:
        generated_summary = first_lines[:150] + "..."
    else:
        generated_summary = FALLBACK_SUMMARY

    summary = clean_text(generated_summary)[:MAX_SUMMARY_LENGTH]
    return ParsedContent(
        title=clean_text(title)[:MAX_TITLE_LENGTH] or FALLBACK_TITLE,
        description=clean_text(text)[:MAX_DESCRIPTION_LENGTH] or DEFAULT_DESCRIPTION,
        summary=summary if len(summary) > MIN_SUMMARY_LENGTH else FALLBACK_SUMMARY,
        tags=DEFAULT_TAGS,
    )


def parse_ai_response(raw: str) -> ParsedContent:
    """Parse a raw provider response into guaranteed non-empty content fields."""
    data = extract_json_object(raw)
    if data is not None:
        return normalize_fields(data)

    logger.warning("No JSON object in provider response, falling back to plain-text extraction")
    return extract_from_plain_text(raw)
