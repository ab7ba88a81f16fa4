"""
Pipeline state schemas.

Each node returns only the keys it owns and LangGraph merges them in. Fields
written by a step go through ``write_once`` so a value can't be replaced
later in the same run.
"""

from typing import Annotated, Optional, TypedDict


class StateOverwriteError(ValueError):
    """Raised when a step tries to replace a field that already has a value."""


def write_once(current: Optional[str], update: Optional[str]) -> Optional[str]:
    if current is not None and update != current:
        raise StateOverwriteError(f"State field already set to {current!r:.60}, refusing {update!r:.60}")
    return update


class ResearchStateInput(TypedDict):
    topic: str
    video_url: Optional[str]


class ResearchStateOutput(TypedDict):
    report: Optional[str]
    podcast_script: Optional[str]
    podcast_filename: Optional[str]


class ResearchState(TypedDict):
    # Inputs
    topic: str
    video_url: Optional[str]

    # search_research
    search_text: Annotated[Optional[str], write_once]
    search_sources_text: Annotated[Optional[str], write_once]

    # analyze_video
    video_text: Annotated[Optional[str], write_once]

    # create_report
    report: Annotated[Optional[str], write_once]
    synthesis_text: Annotated[Optional[str], write_once]

    # create_podcast
    podcast_script: Annotated[Optional[str], write_once]
    podcast_filename: Annotated[Optional[str], write_once]
