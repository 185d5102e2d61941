"""Data models for generated video content."""

from __future__ import annotations

from dataclasses import dataclass

from titulyzer.pipeline_config import Provider


@dataclass(frozen=True)
class ParsedContent:
    """Content fields recovered from a raw provider response."""

    title: str
    description: str
    summary: str
    tags: tuple[str, ...]


@dataclass(frozen=True)
class AnalysisResult:
    """Normalized title/description/summary/tags plus the provider that produced them."""

    title: str
    description: str
    summary: str
    tags: tuple[str, ...]
    provider: Provider

    @classmethod
    def from_parsed(cls, parsed: ParsedContent, provider: Provider) -> AnalysisResult:
        return cls(
            title=parsed.title,
            description=parsed.description,
            summary=parsed.summary,
            tags=parsed.tags,
            provider=provider,
        )
