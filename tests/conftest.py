"""
Pytest configuration and shared fixtures for the research pipeline tests.
"""

import pytest
from unittest.mock import AsyncMock, Mock
from google.genai import types

from multimodal_researcher.configuration import Configuration
from multimodal_researcher.core.gemini_client import reset_genai_client

CONFIG_ENV_VARS = [name.upper() for name in Configuration.model_fields]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep the developer's shell/.env settings out of the tests."""
    for name in CONFIG_ENV_VARS + ["GOOGLE_API_KEY", "GEMINI_API_KEY"]:
        monkeypatch.delenv(name, raising=False)
    reset_genai_client()
    yield
    reset_genai_client()


@pytest.fixture
def mock_genai_client():
    """Mock Gemini client exposing the async generate_content surface."""
    mock = Mock()
    mock.aio.models.generate_content = AsyncMock()
    return mock


def text_response(text):
    """Build a plain text GenerateContentResponse."""
    return types.GenerateContentResponse(
        candidates=[
            types.Candidate(
                content=types.Content(role="model", parts=[types.Part(text=text)])
            )
        ]
    )


def grounded_response(text, chunks=(), supports=()):
    """
    Build a grounded search response.

    Args:
        text: Answer text
        chunks: (title, uri) tuples; either may be None
        supports: (segment_text, chunk_indices) tuples
    """
    return types.GenerateContentResponse(
        candidates=[
            types.Candidate(
                content=types.Content(role="model", parts=[types.Part(text=text)]),
                grounding_metadata=types.GroundingMetadata(
                    grounding_chunks=[
                        types.GroundingChunk(web=types.GroundingChunkWeb(title=title, uri=uri))
                        for title, uri in chunks
                    ],
                    grounding_supports=[
                        types.GroundingSupport(
                            segment=types.Segment(text=segment),
                            grounding_chunk_indices=list(indices)
                        )
                        for segment, indices in supports
                    ]
                )
            )
        ]
    )


def audio_response(pcm):
    """Build a TTS response carrying raw PCM as inline data."""
    return types.GenerateContentResponse(
        candidates=[
            types.Candidate(
                content=types.Content(
                    role="model",
                    parts=[types.Part(inline_data=types.Blob(data=pcm, mime_type="audio/L16;rate=24000"))]
                )
            )
        ]
    )


@pytest.fixture
def sample_pcm():
    """One second of silent 16-bit mono PCM at 24 kHz."""
    return b"\x00\x00" * 24_000


@pytest.fixture
def sample_script():
    return (
        "Mike: Welcome back! Today we're talking about quantum computing.\n"
        "Dr. Sarah: Thanks Mike. At its core it's about qubits and superposition.\n"
        "Mike: So what makes that different from a regular bit?\n"
        "Dr. Sarah: A qubit can hold a blend of zero and one until it's measured."
    )
