#!/usr/bin/env python3
"""
Multi-modal research assistant CLI.

Research a topic, write a report and generate a podcast episode (script +
WAV audio).

Usage:
    python -m multimodal_researcher "quantum computing"
    python -m multimodal_researcher "ocean currents" --video https://example.com/clip.mp4
    python -m multimodal_researcher "fusion energy" --output podcasts/ --mp3
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from .configuration import Configuration
from .graph import run_research
from .podcasts.audio import convert_to_mp3, get_audio_duration

logger = logging.getLogger(__name__)


def parse_overrides(pairs: List[str]) -> Dict[str, Any]:
    """
    Parse ``KEY=VALUE`` configuration overrides.

    Args:
        pairs: Strings like "tts_rate=16000"

    Returns:
        Dict of configuration field name to raw value

    Raises:
        ValueError: On a malformed pair or an unknown field
    """
    overrides = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        key = key.strip().lower()
        if not sep or not key:
            raise ValueError(f"Expected KEY=VALUE, got {pair!r}")
        if key not in Configuration.model_fields:
            raise ValueError(f"Unknown configuration field: {key}")
        overrides[key] = value.strip()
    return overrides


def save_outputs(result: Dict[str, Any], output_dir: str) -> Dict[str, Optional[str]]:
    """
    Save the report and script next to the podcast audio.

    Args:
        result: Pipeline output
        output_dir: Directory to save files to

    Returns:
        Dict with report_path and script_path (None when there was nothing to save)
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    podcast_filename = result.get("podcast_filename")
    base_name = Path(podcast_filename).stem if podcast_filename else "research"

    paths: Dict[str, Optional[str]] = {"report_path": None, "script_path": None}

    if result.get("report"):
        report_path = output_path / f"{base_name}_report.md"
        report_path.write_text(result["report"], encoding="utf-8")
        paths["report_path"] = str(report_path)
        logger.info(f"Report saved to: {report_path}")

    if result.get("podcast_script"):
        script_path = output_path / f"{base_name}_script.txt"
        script_path.write_text(result["podcast_script"], encoding="utf-8")
        paths["script_path"] = str(script_path)
        logger.info(f"Script saved to: {script_path}")

    return paths


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="multimodal-researcher",
        description="Research a topic and turn it into a report and a podcast",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Web research only:
    %(prog)s "quantum computing"

  Include a video:
    %(prog)s "ocean currents" --video https://example.com/clip.mp4

  Override configuration:
    %(prog)s "fusion energy" --set tts_rate=24000 --set mike_voice=Charon
        """
    )

    parser.add_argument('topic', help='Topic to research')
    parser.add_argument(
        '--video', '-v',
        dest='video_url',
        help='URL of a video to analyze alongside the web research'
    )
    parser.add_argument(
        '--output', '-o',
        help='Output directory for generated files (default: OUTPUT_DIR or current directory)'
    )
    parser.add_argument(
        '--mp3',
        action='store_true',
        help='Also export the podcast as MP3 (requires ffmpeg)'
    )
    parser.add_argument(
        '--set',
        dest='overrides',
        action='append',
        default=[],
        metavar='KEY=VALUE',
        help='Override a configuration field (repeatable)'
    )
    parser.add_argument('--verbose', action='store_true', help='Enable debug logging')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    topic = args.topic.strip()
    if not topic:
        logger.error("Empty topic provided")
        return 1

    try:
        configurable = parse_overrides(args.overrides)
        if args.output:
            configurable["output_dir"] = args.output
        # Resolve once up front so bad overrides fail before any API call
        output_dir = Configuration.from_overrides(configurable).output_dir
    except ValueError as e:
        parser.error(str(e))

    logger.info("=" * 80)
    logger.info("MULTI-MODAL RESEARCH ASSISTANT")
    logger.info("=" * 80)
    logger.info(f"Topic: {topic}")
    logger.info(f"Video: {args.video_url or 'none'}")
    logger.info(f"Output directory: {output_dir}")

    try:
        result = asyncio.run(run_research(topic, video_url=args.video_url, configurable=configurable))
        paths = save_outputs(result, output_dir)

        podcast_filename = result.get("podcast_filename")
        mp3_path = None
        if podcast_filename:
            try:
                logger.info(f"Podcast length: {get_audio_duration(podcast_filename):.1f}s")
            except Exception as e:
                logger.warning(f"Could not read podcast duration: {e}")
            if args.mp3:
                mp3_path = convert_to_mp3(podcast_filename)

        logger.info("=" * 80)
        logger.info("RESEARCH COMPLETE")
        logger.info("=" * 80)
        logger.info(f"  Report: {paths['report_path']}")
        logger.info(f"  Script: {paths['script_path']}")
        logger.info(f"  Audio:  {podcast_filename}")
        if mp3_path:
            logger.info(f"  MP3:    {mp3_path}")

        return 0

    except KeyboardInterrupt:
        logger.info("Cancelled by user")
        return 130
    except Exception as e:
        logger.error(f"Research run failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
