"""
Core utilities shared by the pipeline steps.
"""

from .gemini_client import (
    MissingAPIKeyError,
    get_genai_client,
    reset_genai_client,
    resolve_api_key,
    text_generation_config,
)
from .grounding import GeminiExtraction, SourceSummary, SupportSummary, extract_gemini_response

__all__ = [
    'MissingAPIKeyError',
    'get_genai_client',
    'reset_genai_client',
    'resolve_api_key',
    'text_generation_config',
    'GeminiExtraction',
    'SourceSummary',
    'SupportSummary',
    'extract_gemini_response',
]
