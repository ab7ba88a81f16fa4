"""
Audio generation and packaging for podcasts.

Handles multi-speaker TTS with Gemini, WAV packaging of the raw PCM it
returns, and a couple of pydub helpers for duration and MP3 export.
"""

import base64
import io
import logging
import os
import struct
import tempfile
from pathlib import Path
from typing import Any, Dict, Union

from google import genai
from google.genai import types
from pydub import AudioSegment

from ..configuration import Configuration

logger = logging.getLogger(__name__)

WAVE_HEADER_SIZE = 44
PCM_FORMAT_TAG = 1

# Speaker labels used in scripts, mapped to configuration voice fields
SPEAKER_VOICE_FIELDS: Dict[str, str] = {
    "Mike": "mike_voice",
    "Dr. Sarah": "sarah_voice",
}


class MissingAudioError(ValueError):
    """Raised when a TTS response carries no inline audio data."""


def build_wave_header(pcm_length: int, channels: int, sample_rate: int, sample_width: int) -> bytes:
    """
    Build the 44-byte RIFF/WAVE header for linear PCM.

    Args:
        pcm_length: Size of the sample payload in bytes
        channels: Channel count
        sample_rate: Samples per second
        sample_width: Bytes per sample

    Returns:
        Header bytes; the payload goes directly after it
    """
    byte_rate = sample_rate * channels * sample_width
    block_align = channels * sample_width
    bits_per_sample = sample_width * 8

    return struct.pack(
        "<4sI4s4sIHHIIHH4sI",
        b"RIFF",
        36 + pcm_length,
        b"WAVE",
        b"fmt ",
        16,
        PCM_FORMAT_TAG,
        channels,
        sample_rate,
        byte_rate,
        block_align,
        bits_per_sample,
        b"data",
        pcm_length,
    )


def write_wave_file(
    path: Union[str, Path],
    pcm_data: bytes,
    channels: int = 1,
    sample_rate: int = 24_000,
    sample_width: int = 2
) -> Path:
    """
    Write raw PCM samples to a WAV file.

    The file is written next to its destination and renamed into place, so
    readers never see a partial file.

    Args:
        path: Destination path
        pcm_data: Interleaved PCM sample bytes
        channels: Channel count
        sample_rate: Samples per second
        sample_width: Bytes per sample

    Returns:
        Path of the written file
    """
    path = Path(path)
    header = build_wave_header(len(pcm_data), channels, sample_rate, sample_width)

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(header)
            f.write(pcm_data)
        # mkstemp creates 0600 files
        os.chmod(temp_path, 0o644)
        os.replace(temp_path, path)
    except BaseException:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise

    logger.info(f"WAV written: {path} ({len(pcm_data)} bytes of PCM)")
    return path


def build_tts_prompt(script: str) -> str:
    return f"TTS the following conversation between Mike and Dr. Sarah:\n{script}"


def build_speech_config(configuration: Configuration) -> types.SpeechConfig:
    """Map each script speaker to its configured prebuilt voice."""
    return types.SpeechConfig(
        multi_speaker_voice_config=types.MultiSpeakerVoiceConfig(
            speaker_voice_configs=[
                types.SpeakerVoiceConfig(
                    speaker=speaker,
                    voice_config=types.VoiceConfig(
                        prebuilt_voice_config=types.PrebuiltVoiceConfig(
                            voice_name=getattr(configuration, field)
                        )
                    )
                )
                for speaker, field in SPEAKER_VOICE_FIELDS.items()
            ]
        )
    )


def extract_audio_data(response: Any) -> bytes:
    """
    Pull the first inline audio payload out of a TTS response.

    Args:
        response: GenerateContentResponse from an AUDIO-modality call

    Returns:
        Raw PCM bytes

    Raises:
        MissingAudioError: If no candidate carries inline data
    """
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            inline_data = getattr(part, "inline_data", None)
            data = getattr(inline_data, "data", None) if inline_data else None
            if not data:
                continue
            # The SDK normally decodes the payload; raw REST responses keep it base64
            if isinstance(data, str):
                return base64.b64decode(data)
            return bytes(data)

    raise MissingAudioError("Gemini did not return audio data.")


async def generate_podcast_audio(
    script: str,
    file_path: Union[str, Path],
    genai_client: genai.Client,
    configuration: Configuration
) -> Path:
    """
    Render a two-speaker script to speech and save it as WAV.

    Args:
        script: Dialogue in ``Speaker: line`` format
        file_path: Destination WAV path
        genai_client: Gemini client
        configuration: Run configuration (TTS model, voices, PCM parameters)

    Returns:
        Path of the written WAV file
    """
    logger.info(f"Generating audio with {configuration.tts_model}...")

    try:
        response = await genai_client.aio.models.generate_content(
            model=configuration.tts_model,
            contents=build_tts_prompt(script),
            config=types.GenerateContentConfig(
                response_modalities=["AUDIO"],
                speech_config=build_speech_config(configuration)
            )
        )
    except Exception as e:
        logger.error(f"Audio generation failed: {e}", exc_info=True)
        raise

    audio_data = extract_audio_data(response)
    logger.info(f"Audio generated: {len(audio_data)} bytes")

    return write_wave_file(
        file_path,
        audio_data,
        channels=configuration.tts_channels,
        sample_rate=configuration.tts_rate,
        sample_width=configuration.tts_sample_width
    )


def get_audio_duration(path: Union[str, Path]) -> float:
    """
    Get duration of a WAV file in seconds.

    Args:
        path: Path to a WAV file

    Returns:
        Duration in seconds
    """
    audio = AudioSegment.from_wav(str(path))
    return len(audio) / 1000.0


def convert_to_mp3(path: Union[str, Path], bitrate: str = "192k") -> Path:
    """
    Export a WAV file as MP3 next to the original (requires ffmpeg).

    Args:
        path: Path to a WAV file
        bitrate: MP3 bitrate

    Returns:
        Path of the MP3 file
    """
    path = Path(path)
    mp3_path = path.with_suffix(".mp3")
    logger.info(f"Converting {path} to MP3...")

    try:
        audio = AudioSegment.from_wav(str(path))
        mp3_buffer = io.BytesIO()
        audio.export(mp3_buffer, format="mp3", bitrate=bitrate)
        mp3_path.write_bytes(mp3_buffer.getvalue())
    except Exception as e:
        logger.error(f"MP3 conversion failed: {e}", exc_info=True)
        raise

    logger.info(f"MP3 conversion complete: {mp3_path}")
    return mp3_path
