"""
Shared Gemini client.

One ``genai.Client`` is built lazily on first use and reused for the life of
the process. The API key comes from ``GOOGLE_API_KEY`` or ``GEMINI_API_KEY``.
"""

import logging
import os
import threading
from typing import List, Optional

from google import genai
from google.genai import types

from ..configuration import Configuration

logger = logging.getLogger(__name__)

API_KEY_ENV_KEYS = ("GOOGLE_API_KEY", "GEMINI_API_KEY")

_client: Optional[genai.Client] = None
_client_lock = threading.Lock()


class MissingAPIKeyError(ValueError):
    """Raised when no Gemini API key is available in the environment."""


def resolve_api_key() -> str:
    """
    Find the Gemini API key.

    Returns:
        The first non-blank value among GOOGLE_API_KEY and GEMINI_API_KEY

    Raises:
        MissingAPIKeyError: If neither variable holds a key
    """
    for key in API_KEY_ENV_KEYS:
        value = os.getenv(key)
        if value and value.strip():
            return value.strip()

    raise MissingAPIKeyError(
        "Missing Google API key. Set GOOGLE_API_KEY or GEMINI_API_KEY in the environment."
    )


def get_genai_client() -> genai.Client:
    """Return the process-wide Gemini client, creating it on first call."""
    global _client

    if _client is None:
        with _client_lock:
            if _client is None:
                _client = genai.Client(api_key=resolve_api_key())
                logger.info("Gemini client initialized")

    return _client


def reset_genai_client() -> None:
    """Forget the cached client so the next call builds a fresh one."""
    global _client

    with _client_lock:
        _client = None


def text_generation_config(
    temperature: float,
    configuration: Configuration,
    tools: Optional[List[types.Tool]] = None
) -> types.GenerateContentConfig:
    """
    Build the request config shared by the text-generation steps.

    Args:
        temperature: Sampling temperature for this call
        configuration: Run configuration (supplies the retry count)
        tools: Optional tools, e.g. Google Search grounding

    Returns:
        GenerateContentConfig with temperature, tools and retry options
    """
    return types.GenerateContentConfig(
        temperature=temperature,
        tools=tools,
        http_options=types.HttpOptions(
            retry_options=types.HttpRetryOptions(attempts=configuration.max_retries + 1)
        )
    )
