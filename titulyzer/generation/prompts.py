"""Prompt template for title/description/summary/tag generation."""

from __future__ import annotations

SYSTEM_PROMPT = (
    "You are an expert YouTube content creator. Write catchy titles and "
    "engaging descriptions based on the video transcript."
)

TRUNCATION_MARKER = "\n\n[Transcript truncated due to length]"

_PROMPT_TEMPLATE = """\
CRITICAL INSTRUCTION: Respond ONLY with valid JSON. Do not add any text before or after it, and no explanations.

Based on the video transcript below, create YouTube content.
{filename_line}
TRANSCRIPT:
"{transcript}"

RESPOND ONLY WITH THIS JSON (copy the exact structure):
{{
  "title": "Catchy, YouTube-optimised title (maximum 100 characters)",
  "description": "Detailed, engaging description with a call to action (200-500 words)",
  "summary": "Concise 1-2 sentence summary of the main content",
  "tags": ["keyword1", "keyword2", "keyword3", "keyword4", "keyword5"]
}}

MANDATORY RULES:
1. Use EXACTLY these keys: "title", "description", "summary", "tags"
2. ALL 4 fields are REQUIRED - do not leave any of them empty
3. "summary" must be one concise sentence about the main topic
4. "tags" must contain exactly 5 relevant keywords
5. Write all content in {language}
6. Return ONLY the JSON, with no markdown or any other text"""


def build_prompt(
    transcript: str,
    filename_hint: str | None = None,
    language: str = "Brazilian Portuguese",
) -> str:
    """Render the generation prompt for *transcript*.

    Args:
        transcript: Full video transcript.
        filename_hint: Original upload filename, included as extra context.
        language: Language the provider should write the content in.
    """
    filename_line = f"\nOriginal file name: {filename_hint}\n" if filename_hint else ""
    return _PROMPT_TEMPLATE.format(
        filename_line=filename_line,
        transcript=transcript,
        language=language,
    )


def limit_prompt_size(prompt: str, max_length: int) -> str:
    """Cut *prompt* to *max_length* characters, appending a marker if cut."""
    if len(prompt) <= max_length:
        return prompt
    return prompt[:max_length] + TRUNCATION_MARKER
