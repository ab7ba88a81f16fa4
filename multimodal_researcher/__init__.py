"""
Multi-modal research assistant.

Researches a topic with grounded Gemini search (and optionally a video),
writes a Markdown report, and turns the findings into a two-host podcast.
"""

from .configuration import Configuration
from .graph import Step, create_compiled_graph, create_research_graph, run_research
from .state import ResearchState, ResearchStateInput, ResearchStateOutput, StateOverwriteError

__all__ = [
    'Configuration',
    'Step',
    'create_compiled_graph',
    'create_research_graph',
    'run_research',
    'ResearchState',
    'ResearchStateInput',
    'ResearchStateOutput',
    'StateOverwriteError',
]
