"""
Grounded search response extraction.

Turns a Gemini response produced with Google Search grounding into plain
text plus a numbered source list that can be dropped into a report.
"""

import logging
from typing import Any, List, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

MAX_SNIPPET_CHARS = 100
ELLIPSIS = "..."
FALLBACK_TITLE = "No title"
FALLBACK_URI = "No URI"


class SourceSummary(BaseModel):
    """A grounding chunk that has at least a title or a URI."""
    index: int
    title: str
    uri: str


class SupportSummary(BaseModel):
    """A text span of the answer and the 1-based sources backing it."""
    snippet: str
    source_numbers: List[int]


class GeminiExtraction(BaseModel):
    text: str
    sources_text: str = ""
    sources: List[SourceSummary] = Field(default_factory=list)
    supports: List[SupportSummary] = Field(default_factory=list)


def _response_text(response: Any) -> str:
    text = getattr(response, "text", None)
    return text.strip() if isinstance(text, str) else ""


def _grounding_metadata(response: Any) -> Optional[Any]:
    candidates = getattr(response, "candidates", None)
    if not candidates:
        return None
    return getattr(candidates[0], "grounding_metadata", None)


def to_source_summary(chunk: Any, index: int) -> Optional[SourceSummary]:
    """
    Summarize one grounding chunk.

    Args:
        chunk: Grounding chunk (``chunk.web.title`` / ``chunk.web.uri``)
        index: 0-based position of the chunk in the response

    Returns:
        SourceSummary, or None when the chunk has neither title nor URI
    """
    web = getattr(chunk, "web", None)
    title = (getattr(web, "title", None) or "") if web else ""
    uri = (getattr(web, "uri", None) or "") if web else ""

    if not (title or uri):
        return None

    return SourceSummary(
        index=index + 1,
        title=title or FALLBACK_TITLE,
        uri=uri or FALLBACK_URI
    )


def to_support_summary(support: Any) -> Optional[SupportSummary]:
    """
    Summarize one grounding support.

    Supports with no chunk indices or no text are dropped. Snippets longer
    than MAX_SNIPPET_CHARS are cut and suffixed with an ellipsis.
    """
    indices = getattr(support, "grounding_chunk_indices", None)
    if not indices:
        return None

    segment = getattr(support, "segment", None)
    if isinstance(segment, str):
        snippet_text = segment
    else:
        snippet_text = getattr(segment, "text", None) or ""

    trimmed = snippet_text.strip()
    if not trimmed:
        return None

    if len(trimmed) > MAX_SNIPPET_CHARS:
        trimmed = f"{trimmed[:MAX_SNIPPET_CHARS]}{ELLIPSIS}"

    return SupportSummary(
        snippet=trimmed,
        source_numbers=[value + 1 for value in indices]
    )


def format_sources(sources: List[SourceSummary]) -> str:
    """Render sources as ``"<n>. <title>\\n   <uri>"`` lines."""
    return "\n".join(f"{source.index}. {source.title}\n   {source.uri}" for source in sources)


def extract_gemini_response(response: Any) -> GeminiExtraction:
    """
    Extract text and citations from a grounded Gemini response.

    Args:
        response: GenerateContentResponse from a call with the search tool

    Returns:
        GeminiExtraction; ``sources_text`` is empty when the response
        carried no grounding metadata
    """
    text = _response_text(response)
    metadata = _grounding_metadata(response)

    if metadata is None:
        return GeminiExtraction(text=text)

    sources = [
        summary
        for index, chunk in enumerate(getattr(metadata, "grounding_chunks", None) or [])
        if (summary := to_source_summary(chunk, index)) is not None
    ]
    supports = [
        summary
        for support in getattr(metadata, "grounding_supports", None) or []
        if (summary := to_support_summary(support)) is not None
    ]

    return GeminiExtraction(
        text=text,
        sources_text=format_sources(sources),
        sources=sources,
        supports=supports
    )
