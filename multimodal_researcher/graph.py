"""
Research workflow graph.

    search_research -> [analyze_video] -> create_report -> create_podcast

Video analysis only runs when the input carries a video URL. Every node is
a plain async function that reads the state and returns the keys it writes.
"""

import logging
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from google.genai import types
from langchain_core.runnables import RunnableConfig
from langgraph.graph import END, START, StateGraph

from .configuration import Configuration
from .core.gemini_client import get_genai_client, text_generation_config
from .core.grounding import extract_gemini_response
from .podcasts.script import create_podcast_discussion
from .report import create_research_report
from .state import ResearchState, ResearchStateInput, ResearchStateOutput
from .video import NO_VIDEO_MESSAGE, build_video_contents, extract_video_summary

logger = logging.getLogger(__name__)


class Step(str, Enum):
    SEARCH_RESEARCH = "search_research"
    ANALYZE_VIDEO = "analyze_video"
    CREATE_REPORT = "create_report"
    CREATE_PODCAST = "create_podcast"


def _to_nullable(value: Optional[str]) -> Optional[str]:
    trimmed = (value or "").strip()
    return trimmed or None


def _video_text(state: ResearchState) -> str:
    # analyze_video is skipped entirely when there is no URL
    return state.get("video_text") or NO_VIDEO_MESSAGE


async def search_research_node(state: ResearchState, config: RunnableConfig) -> Dict[str, Any]:
    """Research the topic with Google Search grounding."""
    configuration = Configuration.from_runnable_config(config)
    topic = state["topic"]
    logger.info(f"Researching topic with {configuration.search_model}: {topic}")

    genai_client = get_genai_client()
    try:
        response = await genai_client.aio.models.generate_content(
            model=configuration.search_model,
            contents=f"Research this topic and give me an overview: {topic}",
            config=text_generation_config(
                configuration.search_temperature,
                configuration,
                tools=[types.Tool(google_search=types.GoogleSearch())]
            )
        )
    except Exception as e:
        logger.error(f"Search research failed: {e}", exc_info=True)
        raise

    extraction = extract_gemini_response(response)
    logger.info(f"Search complete ({len(extraction.text)} chars, {len(extraction.sources)} sources)")
    for support in extraction.supports:
        logger.debug(f'  "{support.snippet}" -> sources {support.source_numbers}')

    return {
        "search_text": _to_nullable(extraction.text),
        "search_sources_text": _to_nullable(extraction.sources_text),
    }


async def analyze_video_node(state: ResearchState, config: RunnableConfig) -> Dict[str, Any]:
    """Summarize the video with a multimodal model, if there is one."""
    video_url = state.get("video_url")
    if not video_url:
        return {"video_text": NO_VIDEO_MESSAGE}

    configuration = Configuration.from_runnable_config(config)
    logger.info(f"Analyzing video with {configuration.video_model}: {video_url}")

    genai_client = get_genai_client()
    try:
        response = await genai_client.aio.models.generate_content(
            model=configuration.video_model,
            contents=build_video_contents(state["topic"], video_url)
        )
    except Exception as e:
        logger.error(f"Video analysis failed: {e}", exc_info=True)
        raise

    video_text = extract_video_summary(response)
    logger.info(f"Video analysis complete ({len(video_text)} chars)")
    return {"video_text": video_text}


async def create_report_node(state: ResearchState, config: RunnableConfig) -> Dict[str, Any]:
    configuration = Configuration.from_runnable_config(config)

    report, synthesis = await create_research_report(
        topic=state["topic"],
        search_text=state.get("search_text") or "",
        video_text=_video_text(state),
        search_sources_text=state.get("search_sources_text") or "",
        video_url=state.get("video_url"),
        genai_client=get_genai_client(),
        configuration=configuration
    )

    return {"report": report, "synthesis_text": synthesis}


async def create_podcast_node(state: ResearchState, config: RunnableConfig) -> Dict[str, Any]:
    configuration = Configuration.from_runnable_config(config)

    script, filename = await create_podcast_discussion(
        topic=state["topic"],
        search_text=state.get("search_text") or "",
        video_text=_video_text(state),
        genai_client=get_genai_client(),
        configuration=configuration
    )

    return {"podcast_script": script, "podcast_filename": filename}


def route_after_search(state: ResearchState) -> Step:
    """Pick the node that follows search_research."""
    return Step.ANALYZE_VIDEO if state.get("video_url") else Step.CREATE_REPORT


def create_research_graph() -> StateGraph:
    """Create the research workflow graph (uncompiled)."""
    graph = StateGraph(
        ResearchState,
        input_schema=ResearchStateInput,
        output_schema=ResearchStateOutput
    )

    graph.add_node(Step.SEARCH_RESEARCH.value, search_research_node)
    graph.add_node(Step.ANALYZE_VIDEO.value, analyze_video_node)
    graph.add_node(Step.CREATE_REPORT.value, create_report_node)
    graph.add_node(Step.CREATE_PODCAST.value, create_podcast_node)

    graph.add_edge(START, Step.SEARCH_RESEARCH.value)
    graph.add_conditional_edges(
        Step.SEARCH_RESEARCH.value,
        route_after_search,
        {
            Step.ANALYZE_VIDEO: Step.ANALYZE_VIDEO.value,
            Step.CREATE_REPORT: Step.CREATE_REPORT.value,
        }
    )
    graph.add_edge(Step.ANALYZE_VIDEO.value, Step.CREATE_REPORT.value)
    graph.add_edge(Step.CREATE_REPORT.value, Step.CREATE_PODCAST.value)
    graph.add_edge(Step.CREATE_PODCAST.value, END)

    return graph


def create_compiled_graph():
    """Create and compile the research graph."""
    return create_research_graph().compile()


async def run_research(
    topic: str,
    video_url: Optional[str] = None,
    configurable: Optional[Mapping[str, Any]] = None
) -> ResearchStateOutput:
    """
    Run the full pipeline once.

    Args:
        topic: Research topic
        video_url: Optional video to analyze alongside the web research
        configurable: Configuration overrides (field name -> value)

    Returns:
        Dict with report, podcast_script and podcast_filename
    """
    graph = create_compiled_graph()
    config: RunnableConfig = {"configurable": dict(configurable or {})}

    logger.info(f"Starting research run: {topic!r} (video: {video_url or 'none'})")
    result = await graph.ainvoke({"topic": topic, "video_url": video_url}, config=config)
    logger.info("Research run complete")
    return result
