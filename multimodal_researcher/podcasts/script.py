"""
Podcast script generation.

Builds the two-host dialogue (Mike interviews Dr. Sarah) from the research
findings and hands it to TTS.
"""

import logging
import re
from pathlib import Path
from typing import Optional, Tuple

from google import genai

from ..configuration import Configuration
from ..core.gemini_client import text_generation_config
from .audio import generate_podcast_audio

logger = logging.getLogger(__name__)

FILENAME_PREFIX = "research_podcast_"
FALLBACK_SLUG = "podcast"


def sanitize_topic_for_filename(topic: str) -> str:
    """
    Derive a WAV filename from a topic.

    Anything other than ASCII letters, digits, spaces, hyphens and
    underscores becomes a space, then whitespace runs become underscores.

    Args:
        topic: Research topic

    Returns:
        Filename like "research_podcast_AI_Robotics.wav"
    """
    slug = re.sub(r"[^a-zA-Z0-9 \-_]", " ", topic).strip()
    if not slug:
        slug = FALLBACK_SLUG
    slug = re.sub(r"\s+", "_", slug)
    return f"{FILENAME_PREFIX}{slug}.wav"


def build_podcast_prompt(topic: str, search_text: str, video_text: str) -> str:
    return f"""Create a natural, engaging podcast conversation between Dr. Sarah (research expert) and Mike (curious interviewer) about "{topic}".

Use this research content:

SEARCH FINDINGS:
{search_text}

VIDEO INSIGHTS:
{video_text}

Format as a dialogue with:
- Mike introducing the topic and asking questions
- Dr. Sarah explaining key concepts and insights
- Natural back-and-forth discussion (5-7 exchanges)
- Mike asking follow-up questions
- Dr. Sarah synthesizing the main takeaways
- Keep it conversational and accessible (3-4 minutes when spoken)

Format exactly like this:
Mike: [opening question]
Dr. Sarah: [expert response]
Mike: [follow-up]
Dr. Sarah: [explanation]
[continue...]"""


async def generate_podcast_script(
    topic: str,
    search_text: str,
    video_text: str,
    genai_client: genai.Client,
    configuration: Configuration
) -> str:
    """
    Generate the podcast dialogue.

    Args:
        topic: Research topic
        search_text: Web research overview
        video_text: Video analysis summary
        genai_client: Gemini client
        configuration: Run configuration

    Returns:
        Script text in ``Speaker: line`` format
    """
    logger.info("Generating podcast script...")

    try:
        response = await genai_client.aio.models.generate_content(
            model=configuration.synthesis_model,
            contents=build_podcast_prompt(topic, search_text, video_text),
            config=text_generation_config(configuration.podcast_script_temperature, configuration)
        )
    except Exception as e:
        logger.error(f"Failed to generate script: {e}", exc_info=True)
        raise

    script = (response.text or "").strip()
    logger.info(f"Generated script: {len(script)} characters")
    return script


async def create_podcast_discussion(
    topic: str,
    search_text: str,
    video_text: str,
    genai_client: genai.Client,
    configuration: Configuration,
    filename: Optional[str] = None
) -> Tuple[str, str]:
    """
    Write the podcast script and render it to a WAV file.

    Args:
        topic: Research topic
        search_text: Web research overview
        video_text: Video analysis summary
        genai_client: Gemini client
        configuration: Run configuration
        filename: Explicit output path; derived from the topic when omitted

    Returns:
        Tuple of (script, path of the WAV file)
    """
    if filename is None:
        path = Path(configuration.output_dir) / sanitize_topic_for_filename(topic)
    else:
        path = Path(filename)

    script = await generate_podcast_script(topic, search_text, video_text, genai_client, configuration)
    await generate_podcast_audio(script, path, genai_client, configuration)

    return script, str(path)
