"""
Video analysis helpers.

Gemini reads the video straight from its URL; we only have to tell it the
content type and ask for an overview of the topic.
"""

import logging
import posixpath
from typing import Any, Dict, List
from urllib.parse import urlparse

from google.genai import types

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"

VIDEO_MIME_TYPES: Dict[str, str] = {
    "mp4": "video/mp4",
    "mov": "video/quicktime",
    "webm": "video/webm",
    "mkv": "video/x-matroska",
}

NO_VIDEO_MESSAGE = "No video provided for analysis."
EMPTY_ANALYSIS_MESSAGE = "The video analysis did not return any text."


def infer_mime_type(video_url: str) -> str:
    """
    Guess a video's MIME type from the extension in its URL path.

    Args:
        video_url: Absolute URL of the video

    Returns:
        Mapped MIME type, or application/octet-stream for unknown
        extensions and URLs that don't parse
    """
    try:
        parsed = urlparse(video_url)
    except ValueError:
        logger.warning(f"Could not parse video URL: {video_url!r}")
        return DEFAULT_MIME_TYPE

    if not parsed.scheme or not parsed.netloc:
        return DEFAULT_MIME_TYPE

    extension = posixpath.splitext(parsed.path)[1].lstrip(".").lower()
    return VIDEO_MIME_TYPES.get(extension, DEFAULT_MIME_TYPE)


def build_video_prompt(topic: str) -> str:
    return f"Based on the video content, give me an overview of this topic: {topic}"


def build_video_contents(topic: str, video_url: str) -> List[types.Content]:
    """Single user turn: the video reference followed by the prompt."""
    return [
        types.Content(
            role="user",
            parts=[
                types.Part(
                    file_data=types.FileData(
                        file_uri=video_url,
                        mime_type=infer_mime_type(video_url)
                    )
                ),
                types.Part(text=build_video_prompt(topic)),
            ]
        )
    ]


def _text_from_parts(response: Any) -> str:
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return ""

    content = getattr(candidates[0], "content", None)
    segments = []
    for part in getattr(content, "parts", None) or []:
        text = getattr(part, "text", None)
        if isinstance(text, str) and text:
            segments.append(text)

    return "\n".join(segments).strip()


def extract_video_summary(response: Any) -> str:
    """
    Get the answer text from a video analysis response.

    Falls back to joining the first candidate's text parts when
    ``response.text`` can't be read.

    Returns:
        Summary text, or EMPTY_ANALYSIS_MESSAGE when nothing came back
    """
    try:
        summary = (response.text or "").strip()
    except (ValueError, AttributeError) as e:
        logger.warning(f"Primary text extraction failed, scanning parts: {e}")
        summary = _text_from_parts(response)

    return summary or EMPTY_ANALYSIS_MESSAGE
