"""
Research report synthesis.

Combines the web research overview and the video summary into a short
narrative, then wraps it in a fixed Markdown report.
"""

import logging
from typing import Optional, Tuple

from google import genai

from .configuration import Configuration
from .core.gemini_client import text_generation_config

logger = logging.getLogger(__name__)

NO_VIDEO_URL = "No video provided"
NO_SOURCES = "Sources unavailable."
REPORT_FOOTER = "*Report generated using multi-modal AI research combining web search and video analysis*"


def build_synthesis_prompt(topic: str, search_text: str, video_text: str) -> str:
    return f"""You are a research analyst. I have gathered information about "{topic}" from two sources:

SEARCH RESULTS:
{search_text}

VIDEO CONTENT:
{video_text}

Please create a comprehensive synthesis that:
1. Identifies key themes and insights from both sources
2. Highlights any complementary or contrasting perspectives
3. Provides an overall analysis of the topic based on this multi-modal research
4. Keep it concise but thorough (3-4 paragraphs)

Focus on creating a coherent narrative that brings together the best insights from both sources."""


def format_report(
    topic: str,
    synthesis: str,
    video_url: Optional[str],
    search_sources_text: str
) -> str:
    """Lay out the Markdown report around the synthesis text."""
    lines = [
        f"# Research Report: {topic}",
        "",
        "## Executive Summary",
        "",
        synthesis,
        "",
        "## Video Source",
        f"- **URL**: {video_url or NO_VIDEO_URL}",
        "",
        "## Additional Sources",
        search_sources_text or NO_SOURCES,
        "",
        "---",
        REPORT_FOOTER,
    ]
    return "\n".join(lines)


async def create_research_report(
    topic: str,
    search_text: str,
    video_text: str,
    search_sources_text: str,
    video_url: Optional[str],
    genai_client: genai.Client,
    configuration: Configuration
) -> Tuple[str, str]:
    """
    Synthesize the findings and build the report.

    Args:
        topic: Research topic
        search_text: Web research overview
        video_text: Video analysis summary
        search_sources_text: Numbered citation list (may be empty)
        video_url: Analyzed video, if any
        genai_client: Gemini client
        configuration: Run configuration

    Returns:
        Tuple of (report markdown, synthesis text)
    """
    logger.info("Synthesizing research report...")

    try:
        response = await genai_client.aio.models.generate_content(
            model=configuration.synthesis_model,
            contents=build_synthesis_prompt(topic, search_text, video_text),
            config=text_generation_config(configuration.synthesis_temperature, configuration)
        )
    except Exception as e:
        logger.error(f"Report synthesis failed: {e}", exc_info=True)
        raise

    synthesis = (response.text or "").strip()
    report = format_report(topic, synthesis, video_url, search_sources_text)

    logger.info(f"Report complete ({len(report)} chars)")
    return report, synthesis
