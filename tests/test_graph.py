"""
Tests for the research workflow graph.

Mocks the Gemini client so every step runs without network access; the
mock answers based on the request shape (search tool, video part, audio
modality, plain text).
"""

import asyncio

import pytest
from pathlib import Path
from unittest.mock import patch

from conftest import audio_response, grounded_response, text_response
from multimodal_researcher.core.gemini_client import MissingAPIKeyError
from multimodal_researcher.graph import (
    Step,
    analyze_video_node,
    create_compiled_graph,
    route_after_search,
    run_research,
)
from multimodal_researcher.state import StateOverwriteError, write_once
from multimodal_researcher.video import NO_VIDEO_MESSAGE


@pytest.fixture
def fake_gemini(mock_genai_client, sample_script, sample_pcm):
    """Route each generate_content call to a canned response by request shape."""
    calls = []

    async def generate_content(model, contents, config=None):
        calls.append({"model": model, "contents": contents, "config": config})

        if config is not None and config.response_modalities:
            return audio_response(sample_pcm)
        if config is not None and config.tools:
            return grounded_response(
                "Search overview.",
                chunks=[("Source A", "https://a.example")],
                supports=[("Search overview.", [0])]
            )
        if isinstance(contents, list):
            return text_response("Video summary.")
        if "podcast conversation" in contents:
            return text_response(sample_script)
        return text_response("Synthesis paragraph.")

    mock_genai_client.aio.models.generate_content.side_effect = generate_content
    mock_genai_client.calls = calls

    with patch("multimodal_researcher.graph.get_genai_client", return_value=mock_genai_client):
        yield mock_genai_client


async def _visited_steps(inputs, configurable):
    graph = create_compiled_graph()
    visited = []
    async for chunk in graph.astream(inputs, config={"configurable": configurable}, stream_mode="updates"):
        visited.extend(chunk.keys())
    return visited


class TestRouting:

    def test_route_with_video(self):
        assert route_after_search({"topic": "t", "video_url": "https://x/y.mp4"}) is Step.ANALYZE_VIDEO

    def test_route_without_video(self):
        assert route_after_search({"topic": "t", "video_url": None}) is Step.CREATE_REPORT
        assert route_after_search({"topic": "t"}) is Step.CREATE_REPORT


class TestWriteOnce:

    def test_first_write_and_identical_rewrite(self):
        assert write_once(None, "a") == "a"
        assert write_once("a", "a") == "a"

    def test_overwrite_rejected(self):
        with pytest.raises(StateOverwriteError):
            write_once("a", "b")


class TestAnalyzeVideoNode:

    @pytest.mark.asyncio
    async def test_no_video_makes_no_call(self):
        with patch("multimodal_researcher.graph.get_genai_client") as mock_get_client:
            result = await analyze_video_node({"topic": "t", "video_url": None}, {})

        assert result == {"video_text": NO_VIDEO_MESSAGE}
        mock_get_client.assert_not_called()


class TestResearchGraph:

    @pytest.mark.asyncio
    async def test_without_video_skips_analysis(self, fake_gemini, tmp_path):
        visited = await _visited_steps(
            {"topic": "quantum computing", "video_url": None},
            {"output_dir": str(tmp_path)}
        )

        assert visited == ["search_research", "create_report", "create_podcast"]
        assert not any(isinstance(call["contents"], list) for call in fake_gemini.calls)

    @pytest.mark.asyncio
    async def test_with_video_visits_all_steps(self, fake_gemini, tmp_path):
        visited = await _visited_steps(
            {"topic": "ocean currents", "video_url": "https://example.com/currents.mp4"},
            {"output_dir": str(tmp_path)}
        )

        assert visited == ["search_research", "analyze_video", "create_report", "create_podcast"]

        video_calls = [call for call in fake_gemini.calls if isinstance(call["contents"], list)]
        assert len(video_calls) == 1
        file_part = video_calls[0]["contents"][0].parts[0]
        assert file_part.file_data.mime_type == "video/mp4"
        assert video_calls[0]["model"] == "gemini-2.5-flash"

    @pytest.mark.asyncio
    async def test_run_research_output(self, fake_gemini, tmp_path, sample_script):
        result = await run_research("quantum computing", configurable={"output_dir": str(tmp_path)})

        assert set(result) == {"report", "podcast_script", "podcast_filename"}
        assert result["report"].startswith("# Research Report: quantum computing")
        assert "Synthesis paragraph." in result["report"]
        assert "1. Source A\n   https://a.example" in result["report"]
        assert "- **URL**: No video provided" in result["report"]
        assert result["podcast_script"] == sample_script
        assert result["podcast_filename"] == str(tmp_path / "research_podcast_quantum_computing.wav")
        assert Path(result["podcast_filename"]).exists()

    @pytest.mark.asyncio
    async def test_skipped_video_uses_sentinel_in_prompts(self, fake_gemini, tmp_path):
        await run_research("quantum computing", configurable={"output_dir": str(tmp_path)})

        text_prompts = [
            call["contents"] for call in fake_gemini.calls
            if isinstance(call["contents"], str) and not call["config"].tools
            and not call["config"].response_modalities
        ]
        assert len(text_prompts) == 2
        for prompt in text_prompts:
            assert NO_VIDEO_MESSAGE in prompt
            assert "Search overview." in prompt

    @pytest.mark.asyncio
    async def test_configurable_overrides_reach_steps(self, fake_gemini, tmp_path):
        await run_research(
            "quantum computing",
            configurable={"output_dir": str(tmp_path), "search_model": "gemini-search-x", "search_temperature": 0.2}
        )

        search_call = fake_gemini.calls[0]
        assert search_call["model"] == "gemini-search-x"
        assert search_call["config"].temperature == 0.2
        assert search_call["config"].tools[0].google_search is not None

    @pytest.mark.asyncio
    async def test_concurrent_runs_keep_separate_state(self, fake_gemini, tmp_path):
        configurable = {"output_dir": str(tmp_path)}

        alpha, beta = await asyncio.gather(
            run_research("alpha topic", configurable=configurable),
            run_research("beta topic", video_url="https://example.com/beta.mov", configurable=configurable),
        )

        assert alpha["report"].startswith("# Research Report: alpha topic")
        assert "- **URL**: No video provided" in alpha["report"]
        assert "beta" not in alpha["report"]
        assert alpha["podcast_filename"] == str(tmp_path / "research_podcast_alpha_topic.wav")

        assert beta["report"].startswith("# Research Report: beta topic")
        assert "- **URL**: https://example.com/beta.mov" in beta["report"]
        assert "alpha" not in beta["report"]
        assert beta["podcast_filename"] == str(tmp_path / "research_podcast_beta_topic.wav")

        video_calls = [call for call in fake_gemini.calls if isinstance(call["contents"], list)]
        assert len(video_calls) == 1
        assert video_calls[0]["contents"][0].parts[0].file_data.mime_type == "video/quicktime"

    @pytest.mark.asyncio
    async def test_step_failure_aborts_run(self, fake_gemini, tmp_path):
        original = fake_gemini.aio.models.generate_content.side_effect

        async def fail_on_synthesis(model, contents, config=None):
            if isinstance(contents, str) and "research analyst" in contents:
                raise RuntimeError("synthesis backend down")
            return await original(model, contents, config)

        fake_gemini.aio.models.generate_content.side_effect = fail_on_synthesis

        with pytest.raises(RuntimeError, match="synthesis backend down"):
            await run_research("quantum computing", configurable={"output_dir": str(tmp_path)})

        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_missing_api_key_fails_before_any_call(self):
        with patch("google.genai.Client") as mock_client_class:
            with pytest.raises(MissingAPIKeyError):
                await run_research("quantum computing")

        mock_client_class.assert_not_called()
